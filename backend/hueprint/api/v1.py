"""
Hueprint v1 API Routes
Palette extraction, last-palette cache and export endpoints.
"""
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from hueprint.config import Config, config
from hueprint.schemas import ClearResponse, ErrorResponse, ExtractionOptions, ExtractionResult, PaletteExportRequest
from hueprint.services.cache import PaletteCache, build_store
from hueprint.services.colors.export import ExportArtifact, export_swatch, export_text
from hueprint.services.colors.extract_api import handle_upload
from hueprint.utils.metrics import get_metrics

router = APIRouter(prefix="/v1", tags=["Palette"])

# Bodies produced by the PaletteError handler in main.py
PALETTE_ERROR_RESPONSES: Dict[int, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Corrupt or unreadable image"},
    413: {"model": ErrorResponse, "description": "File too large"},
    415: {"model": ErrorResponse, "description": "Unsupported file type"},
    422: {"model": ErrorResponse, "description": "Resolution exceeded or invalid parameters"},
}

# Global cache instance
_palette_cache: Optional[PaletteCache] = None


def get_palette_cache() -> PaletteCache:
    """Get or create the last-palette cache from configuration."""
    global _palette_cache
    if _palette_cache is None:
        store = build_store(redis_url=config.REDIS_URL, file_path=config.CACHE_PATH, ttl=config.CACHE_TTL)
        _palette_cache = PaletteCache(store)
    return _palette_cache


def get_extraction_options(
    num_colors: Optional[int] = Query(None, ge=1, le=20, description="Number of palette colors")
) -> ExtractionOptions:
    """Configured limits, with the palette size optionally overridden per request."""
    options = Config.default_options()
    if num_colors is not None:
        options = options.model_copy(update={"num_colors": num_colors})
    return options


def _download(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": artifact.content_disposition}
    )


@router.post("/palette",
             response_model=ExtractionResult,
             summary="Extract Palette",
             description="Upload an image and get its dominant colors",
             responses=PALETTE_ERROR_RESPONSES)
async def extract_palette_endpoint(
    file: UploadFile = File(..., description="Raster image to analyse"),
    options: ExtractionOptions = Depends(get_extraction_options),
    cache: PaletteCache = Depends(get_palette_cache)
) -> ExtractionResult:
    return await handle_upload(file, options, cache)


@router.get("/palette/last", response_model=ExtractionResult, summary="Last Palette")
async def get_last_palette(cache: PaletteCache = Depends(get_palette_cache)) -> ExtractionResult:
    result = cache.load()
    if result is None:
        raise HTTPException(status_code=404, detail="No cached palette")
    return result


@router.delete("/palette/last", response_model=ClearResponse, summary="Clear Last Palette")
async def clear_last_palette(cache: PaletteCache = Depends(get_palette_cache)) -> ClearResponse:
    return ClearResponse(cleared=cache.clear())


@router.post("/palette/export", summary="Download Palette as Text")
async def export_palette_text(request: PaletteExportRequest) -> Response:
    return _download(export_text(request.palette, request.filename))


@router.post("/palette/swatch", summary="Download Palette as PNG Strip")
async def export_palette_swatch(request: PaletteExportRequest) -> Response:
    return _download(export_swatch(request.palette, request.filename))


@router.get("/metrics", summary="Service Metrics")
async def get_service_metrics() -> Dict[str, Any]:
    return get_metrics().get_summary()
