"""
Hueprint API Schemas
Pydantic models for extraction options, results and export requests.
"""
from typing import Annotated, List, Optional
from pydantic import BaseModel, Field, field_validator

HEX_PATTERN = r"^#[0-9A-Fa-f]{6}$"

HexColor = Annotated[str, Field(pattern=HEX_PATTERN)]

DEFAULT_MIME_TYPES = [
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/bmp",
]


class ExtractionOptions(BaseModel):
    """Caller-supplied limits and palette size for one extraction."""
    max_file_size_bytes: int = Field(
        50 * 1024 * 1024,
        gt=0,
        description="Largest accepted upload in bytes"
    )
    max_width: int = Field(1920, gt=0, description="Largest accepted decoded width in pixels")
    max_height: int = Field(1200, gt=0, description="Largest accepted decoded height in pixels")
    num_colors: int = Field(5, ge=1, le=20, description="Number of palette entries to return")
    max_dimension: int = Field(200, ge=1, le=1024, description="Downscale target for the longer edge")
    allowed_mime_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_MIME_TYPES),
        description="MIME allow-list checked before any decode"
    )

    @field_validator("allowed_mime_types")
    @classmethod
    def normalize_mime_types(cls, v):
        return [mime.strip().lower() for mime in v if mime.strip()]


class ExtractionResult(BaseModel):
    """Palette produced for one uploaded image; the unit that gets cached."""
    palette: List[HexColor] = Field(..., description="Dominant colors as uppercase #RRGGBB, most frequent first")
    is_grayscale: bool = Field(..., description="Whether the image is effectively monochrome")
    filename: str = Field(..., description="Source filename as supplied by the client")
    timestamp: str = Field(..., description="ISO-8601 UTC time of extraction")
    width: Optional[int] = Field(None, description="Decoded source width in pixels")
    height: Optional[int] = Field(None, description="Decoded source height in pixels")
    sampled_pixels: Optional[int] = Field(None, description="Pixels counted during bucketing")

    @field_validator("palette")
    @classmethod
    def uppercase_palette(cls, v):
        return [color.upper() for color in v]


class PaletteExportRequest(BaseModel):
    """Palette to be rendered as a downloadable artifact."""
    palette: List[HexColor] = Field(..., min_length=1, max_length=20)
    filename: Optional[str] = Field(None, max_length=255, description="Download name override")

    @field_validator("palette")
    @classmethod
    def uppercase_palette(cls, v):
        return [color.upper() for color in v]


class ClearResponse(BaseModel):
    """Result of clearing the cached palette."""
    cleared: bool


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("hueprint-palette", description="Service name")
    cache_backend: str = Field(..., description="Store used for the last palette")


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
    code: str = Field(..., description="Machine-readable error kind")
