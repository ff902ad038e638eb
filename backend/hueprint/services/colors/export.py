"""
Palette export artifacts offered for download.
"""

from dataclasses import dataclass
from typing import List, Optional

from .swatches import render_swatch_strip

DEFAULT_TEXT_FILENAME = "palette.txt"
DEFAULT_SWATCH_FILENAME = "palette.png"


@dataclass(frozen=True)
class ExportArtifact:
    """A downloadable file: name, media type and body."""
    filename: str
    media_type: str
    content: bytes

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def palette_to_text(palette: List[str]) -> str:
    """Newline-joined hex strings, no trailing newline."""
    return "\n".join(palette)


def _safe_filename(filename: Optional[str], default: str) -> str:
    if not filename:
        return default
    # Keep only the base name and drop characters that break the header
    name = filename.replace("\\", "/").split("/")[-1]
    name = "".join(ch for ch in name if ch.isprintable() and ch not in '"')
    return name or default


def export_text(palette: List[str], filename: Optional[str] = None) -> ExportArtifact:
    """Build the text/plain download for a palette."""
    return ExportArtifact(
        filename=_safe_filename(filename, DEFAULT_TEXT_FILENAME),
        media_type="text/plain",
        content=palette_to_text(palette).encode("utf-8"),
    )


def export_swatch(palette: List[str],
                  filename: Optional[str] = None,
                  highlight_index: Optional[int] = None) -> ExportArtifact:
    """Build the image/png swatch strip download for a palette."""
    return ExportArtifact(
        filename=_safe_filename(filename, DEFAULT_SWATCH_FILENAME),
        media_type="image/png",
        content=render_swatch_strip(palette, highlight_index=highlight_index),
    )
