"""
Hueprint Imaging Utilities
Handles upload validation, image decoding and resolution checks.

Every gate in this module runs before the quantization core and raises one of
the PaletteError subclasses on failure.
"""
import io
from typing import Optional

import numpy as np
from fastapi import UploadFile
from PIL import Image

from hueprint.errors import CorruptImage, InvalidType, ResolutionExceeded, TooLarge
from hueprint.schemas import ExtractionOptions
from hueprint.services.colors.bitmap import Bitmap

# Multi-picture JPEGs from cameras decode as MPO
_FORMAT_MIME_ALIASES = {"MPO": "image/jpeg"}


def _format_megabytes(size_bytes: int) -> str:
    mb = size_bytes / (1024 * 1024)
    return f"{mb:.0f}MB" if mb == int(mb) else f"{mb:.1f}MB"


def validate_content_type(content_type: Optional[str], options: ExtractionOptions) -> None:
    """
    Check the declared MIME type against the allow-list.

    Raises:
        InvalidType: if the type is missing or not allowed
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in options.allowed_mime_types:
        raise InvalidType(
            f"Unsupported file type '{content_type}'. "
            f"Supported: {', '.join(options.allowed_mime_types)}"
        )


def validate_file_size(size: Optional[int], options: ExtractionOptions) -> None:
    """
    Check a byte size against the configured limit.

    Unknown sizes (None) pass here and are checked again once the bytes are read.

    Raises:
        TooLarge: if size exceeds options.max_file_size_bytes
    """
    if size is not None and size > options.max_file_size_bytes:
        raise TooLarge(
            f"File too large. Maximum size: {_format_megabytes(options.max_file_size_bytes)}"
        )


def validate_file_upload(content_type: Optional[str], size: Optional[int], options: ExtractionOptions) -> None:
    """
    Validate declared upload metadata before any byte is read.

    Args:
        content_type: Declared MIME type
        size: Declared size in bytes, if known
        options: Extraction limits

    Raises:
        InvalidType: for MIME types outside the allow-list
        TooLarge: for declared sizes above the limit
    """
    validate_content_type(content_type, options)
    validate_file_size(size, options)


def validate_resolution(width: int, height: int, options: ExtractionOptions) -> None:
    """
    Raises:
        ResolutionExceeded: if width or height exceeds the configured maximum
    """
    if width > options.max_width or height > options.max_height:
        raise ResolutionExceeded(
            f"Image resolution {width}×{height} exceeds maximum "
            f"{options.max_width}×{options.max_height}"
        )


def _open_image(file_bytes: bytes) -> Image.Image:
    try:
        return Image.open(io.BytesIO(file_bytes))
    except Image.DecompressionBombError as e:
        raise ResolutionExceeded(f"Image resolution is too large to decode safely: {str(e)}")
    except Exception as e:
        raise CorruptImage(f"Failed to decode image: {str(e)}")


def decode_image(file_bytes: bytes, options: ExtractionOptions) -> Bitmap:
    """
    Safely decode image bytes into an RGBA bitmap.

    The file is first run through Pillow's integrity check, then reopened;
    the resolution limit is applied from the header before pixel data is
    decoded. Only the first frame of animated formats is used.

    Args:
        file_bytes: Raw file bytes
        options: Extraction limits

    Returns:
        Decoded Bitmap

    Raises:
        CorruptImage: for empty, truncated or undecodable data
        InvalidType: when the decoded format is outside the allow-list
        ResolutionExceeded: when dimensions exceed the configured maximum
    """
    if not file_bytes:
        raise CorruptImage("File is empty")

    # Integrity check; verify() leaves the image unusable so it is reopened below
    probe = _open_image(file_bytes)
    try:
        probe.verify()
    except Exception as e:
        raise CorruptImage(f"Image integrity check failed: {str(e)}")

    pil_image = _open_image(file_bytes)

    detected_mime = _FORMAT_MIME_ALIASES.get(pil_image.format) or Image.MIME.get(pil_image.format or "", "")
    if detected_mime and detected_mime.lower() not in options.allowed_mime_types:
        raise InvalidType(f"Decoded format {pil_image.format} is not an allowed image type")

    width, height = pil_image.size
    validate_resolution(width, height, options)

    try:
        pil_image.seek(0)
        if pil_image.mode != 'RGBA':
            pil_image = pil_image.convert('RGBA')
        rgba = np.array(pil_image, dtype=np.uint8)
    except Exception as e:
        raise CorruptImage(f"Failed to decode image: {str(e)}")

    return Bitmap.from_array(rgba)


async def read_upload(file: UploadFile, options: ExtractionOptions) -> bytes:
    """
    Validate and read a FastAPI upload.

    Declared metadata is checked before the body is read; the actual byte
    length is checked again afterwards.
    """
    validate_file_upload(file.content_type, getattr(file, "size", None), options)

    try:
        file_bytes = await file.read()
    except Exception as e:
        raise CorruptImage(f"Failed to read file: {str(e)}")

    validate_file_size(len(file_bytes), options)
    return file_bytes

