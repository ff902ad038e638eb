"""
Hueprint Configuration
Manages environment variables and defaults for the palette extraction service.
"""
import os
from typing import List, Optional


class Config:
    """Configuration class for Hueprint services."""

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("HUEPRINT_MAX_FILE_MB", "50"))
    MAX_WIDTH: int = int(os.environ.get("HUEPRINT_MAX_WIDTH", "1920"))
    MAX_HEIGHT: int = int(os.environ.get("HUEPRINT_MAX_HEIGHT", "1200"))

    # Quantization defaults
    NUM_COLORS: int = int(os.environ.get("HUEPRINT_NUM_COLORS", "5"))
    MAX_DIMENSION: int = int(os.environ.get("HUEPRINT_MAX_DIMENSION", "200"))

    # Logging
    LOG_LEVEL: str = os.environ.get("HUEPRINT_LOG_LEVEL", "INFO")
    LOG_JSON: bool = os.environ.get("HUEPRINT_LOG_JSON", "").lower() in ("1", "true", "yes")

    # Last-palette persistence
    REDIS_URL: Optional[str] = os.environ.get("HUEPRINT_REDIS_URL")
    CACHE_PATH: Optional[str] = os.environ.get("HUEPRINT_CACHE_PATH")
    CACHE_TTL: int = int(os.environ.get("HUEPRINT_CACHE_TTL", "604800"))  # 7 days

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("HUEPRINT_ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173")

    # Supported image formats (raster only, first frame is used)
    SUPPORTED_MIME_TYPES = [
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/bmp",
    ]

    @classmethod
    def max_file_size_bytes(cls) -> int:
        """Upload size limit in bytes."""
        return cls.MAX_FILE_MB * 1024 * 1024

    @classmethod
    def allowed_origins(cls) -> List[str]:
        return [origin.strip() for origin in cls.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @classmethod
    def default_options(cls):
        """Build extraction options from the current environment."""
        from hueprint.schemas import ExtractionOptions

        return ExtractionOptions(
            max_file_size_bytes=cls.max_file_size_bytes(),
            max_width=cls.MAX_WIDTH,
            max_height=cls.MAX_HEIGHT,
            num_colors=cls.NUM_COLORS,
            max_dimension=cls.MAX_DIMENSION,
            allowed_mime_types=list(cls.SUPPORTED_MIME_TYPES),
        )

    @classmethod
    def validate_num_colors(cls, num_colors: int) -> bool:
        """Validate requested palette size."""
        return 1 <= num_colors <= 20

    @classmethod
    def validate_max_dimension(cls, max_dimension: int) -> bool:
        """Validate downscale target."""
        return 1 <= max_dimension <= 1024

    @classmethod
    def validate_settings(cls) -> None:
        """
        Check environment-provided settings once at startup.

        Raises:
            ValueError: naming every HUEPRINT_* setting that is out of range
        """
        problems = []
        if not cls.validate_num_colors(cls.NUM_COLORS):
            problems.append(f"HUEPRINT_NUM_COLORS={cls.NUM_COLORS} (expected 1..20)")
        if not cls.validate_max_dimension(cls.MAX_DIMENSION):
            problems.append(f"HUEPRINT_MAX_DIMENSION={cls.MAX_DIMENSION} (expected 1..1024)")
        if cls.MAX_FILE_MB < 1:
            problems.append(f"HUEPRINT_MAX_FILE_MB={cls.MAX_FILE_MB} (expected >= 1)")
        if cls.MAX_WIDTH < 1 or cls.MAX_HEIGHT < 1:
            problems.append(f"HUEPRINT_MAX_WIDTH/HEIGHT={cls.MAX_WIDTH}x{cls.MAX_HEIGHT} (expected >= 1)")
        if problems:
            raise ValueError("Invalid configuration: " + "; ".join(problems))


# Global config instance
config = Config()
