"""
Swatch Rendering Module

Draws a palette as a PNG strip of square chips, most dominant color on the
left. Used for the swatch download and for eyeballing extraction results.
"""

from typing import List, Optional, Tuple

import cv2
import numpy as np
from loguru import logger

from .extraction import hex_to_rgb


def hex_to_bgr(hex_color: str) -> Tuple[int, int, int]:
    """OpenCV channel order for a ``#RRGGBB`` string."""
    r, g, b = hex_to_rgb(hex_color)
    return (b, g, r)


def render_swatch_strip(hex_colors: List[str],
                        chip_size: int = 40,
                        highlight_index: Optional[int] = None,
                        border_color: Tuple[int, int, int] = (0, 0, 0),
                        border_width: int = 2) -> bytes:
    """
    Render the palette as one row of ``chip_size`` squares.

    Args:
        hex_colors: Palette in rank order
        chip_size: Edge length of each chip in pixels
        highlight_index: Chip to outline, e.g. the last copied color;
            ignored when out of range
        border_color: BGR outline color
        border_width: Outline thickness in pixels

    Returns:
        PNG-encoded bytes
    """
    if not hex_colors:
        raise ValueError("Cannot render a swatch strip for an empty palette")

    chips = np.array([hex_to_bgr(color) for color in hex_colors], dtype=np.uint8)
    # (k, 3) -> (chip_size, k * chip_size, 3)
    row = np.repeat(chips, chip_size, axis=0)
    strip = np.ascontiguousarray(np.broadcast_to(row, (chip_size,) + row.shape))

    if highlight_index is not None and 0 <= highlight_index < len(hex_colors):
        left = highlight_index * chip_size
        cv2.rectangle(strip, (left, 0), (left + chip_size - 1, chip_size - 1), border_color, border_width)

    ok, encoded = cv2.imencode(".png", strip)
    if not ok:
        raise RuntimeError("OpenCV failed to encode swatch strip")

    logger.debug(f"Swatch strip {strip.shape[1]}x{strip.shape[0]} for {len(hex_colors)} colors, {encoded.size} bytes")
    return encoded.tobytes()
