"""
Palette Extraction Orchestrator

Coordinates one extraction from upload metadata through validation, decoding
and quantization to the ExtractionResult handed back to the caller. Validation
gates run strictly before the quantization core.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from fastapi import UploadFile

from hueprint.errors import CorruptImage, PaletteError
from hueprint.schemas import ExtractionOptions, ExtractionResult
from hueprint.services.cache import PaletteCache
from hueprint.services.colors.extraction import extract_palette
from hueprint.services.imaging import decode_image, read_upload, validate_file_size, validate_file_upload
from hueprint.utils.ids import generate_request_id
from hueprint.utils.logging import get_logger
from hueprint.utils.metrics import get_metrics

logger = get_logger()


@dataclass
class ImageUpload:
    """Upload handed over by a file picker: metadata plus a lazy byte reader."""
    filename: str
    content_type: Optional[str]
    size: Optional[int]
    read: Callable[[], bytes]

    @classmethod
    def from_bytes(cls, filename: str, content_type: Optional[str], data: bytes) -> "ImageUpload":
        return cls(filename=filename, content_type=content_type, size=len(data), read=lambda: data)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _record_rejection(error: PaletteError, request_id: str) -> None:
    get_metrics().increment_rejection_count(error.code)
    logger.warning(f"Extraction rejected: {error.message}",
                   extra={"request_id": request_id, "code": error.code})


def extract_from_bytes(filename: str,
                       file_bytes: bytes,
                       options: ExtractionOptions,
                       request_id: str) -> ExtractionResult:
    """
    Decode already-validated bytes and run the quantization core.

    Raises:
        CorruptImage, InvalidType, ResolutionExceeded: from decoding
    """
    metrics = get_metrics()

    with metrics.timed("decode") as decode_timing:
        bitmap = decode_image(file_bytes, options)

    logger.info("Decoded image", extra={
        "request_id": request_id,
        "width": bitmap.width,
        "height": bitmap.height,
        "ms_decode": round(decode_timing["ms"], 2)
    })

    with metrics.timed("quantize") as quantize_timing:
        extraction = extract_palette(bitmap, num_colors=options.num_colors, max_dimension=options.max_dimension)
    metrics.record_palette_size(len(extraction.palette))
    if extraction.is_grayscale:
        metrics.increment_grayscale_count()

    logger.info("Palette extracted", extra={
        "request_id": request_id,
        "palette": extraction.palette,
        "is_grayscale": extraction.is_grayscale,
        "buckets": extraction.bucket_count,
        "ms_quantize": round(quantize_timing["ms"], 2)
    })

    return ExtractionResult(
        palette=extraction.palette,
        is_grayscale=extraction.is_grayscale,
        filename=filename,
        timestamp=_utc_timestamp(),
        width=bitmap.width,
        height=bitmap.height,
        sampled_pixels=extraction.sampled_pixels,
    )


def _read_bytes(upload: ImageUpload) -> bytes:
    try:
        return upload.read()
    except Exception as e:
        raise CorruptImage(f"Failed to read file: {str(e)}")


def _finish(result: ExtractionResult, cache: Optional[PaletteCache], start_time: float) -> ExtractionResult:
    if cache is not None:
        cache.save(result)
    get_metrics().record_timing("extraction_total", (time.time() - start_time) * 1000)
    return result


def handle_extract(upload: ImageUpload,
                   options: Optional[ExtractionOptions] = None,
                   cache: Optional[PaletteCache] = None) -> ExtractionResult:
    """
    Run one extraction for an upload.

    Declared type and size are checked before upload.read() is called.

    Args:
        upload: Upload metadata and byte reader
        options: Extraction limits and palette size (defaults when omitted)
        cache: Optional last-palette cache updated on success

    Returns:
        ExtractionResult for the upload

    Raises:
        PaletteError: InvalidType, TooLarge, CorruptImage or ResolutionExceeded
    """
    options = options or ExtractionOptions()
    request_id = generate_request_id("pal")
    start_time = time.time()
    get_metrics().increment_request_count()

    logger.info("Starting palette extraction", extra={
        "request_id": request_id,
        "upload_filename": upload.filename,
        "content_type": upload.content_type,
        "size": upload.size
    })

    try:
        validate_file_upload(upload.content_type, upload.size, options)
        file_bytes = _read_bytes(upload)
        validate_file_size(len(file_bytes), options)
        result = extract_from_bytes(upload.filename, file_bytes, options, request_id)
    except PaletteError as e:
        _record_rejection(e, request_id)
        raise

    return _finish(result, cache, start_time)


async def handle_upload(file: UploadFile,
                        options: Optional[ExtractionOptions] = None,
                        cache: Optional[PaletteCache] = None) -> ExtractionResult:
    """FastAPI variant of handle_extract; the body read is the only await."""
    options = options or ExtractionOptions()
    request_id = generate_request_id("pal")
    start_time = time.time()
    get_metrics().increment_request_count()

    filename = file.filename or "upload"
    logger.info("Starting palette extraction", extra={
        "request_id": request_id,
        "upload_filename": filename,
        "content_type": file.content_type
    })

    try:
        file_bytes = await read_upload(file, options)
        result = extract_from_bytes(filename, file_bytes, options, request_id)
    except PaletteError as e:
        _record_rejection(e, request_id)
        raise

    return _finish(result, cache, start_time)
