"""
Color extraction core for Hueprint.

This module implements the palette pipeline: downscaling the decoded bitmap,
bucketing sampled pixels onto a coarse RGB grid, ranking buckets by frequency
and classifying near-monochrome images. Every function here is total over
well-formed bitmaps and never raises for degenerate input.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import cv2
import numpy as np
from loguru import logger

from .bitmap import Bitmap

# One pixel out of every SAMPLE_STRIDE, in flat buffer order
SAMPLE_STRIDE = 4

BUCKET_SIZE = 10
MAX_BUCKET = 250

GRAYSCALE_SAMPLE_LIMIT = 1000
GRAY_CHANNEL_TOLERANCE = 5
GRAYSCALE_RATIO_THRESHOLD = 0.9

DEFAULT_MAX_DIMENSION = 200
DEFAULT_NUM_COLORS = 5

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class PaletteExtraction:
    """Output of the quantization core for a single bitmap."""
    palette: List[str]
    is_grayscale: bool
    sampled_pixels: int
    bucket_count: int
    counts: List[int] = field(default_factory=list)


def rgb_to_hex(rgb: Sequence[int]) -> str:
    """Convert an RGB triple (tuple or uint8 array) to an uppercase #RRGGBB string."""
    r, g, b = [int(x) for x in rgb]
    return f"#{r:02X}{g:02X}{b:02X}"


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert hex color string to RGB tuple."""
    hex_color = hex_color.lstrip('#')
    return tuple(int(hex_color[i:i+2], 16) for i in (0, 2, 4))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def downscale(bitmap: Bitmap, max_dimension: int = DEFAULT_MAX_DIMENSION) -> Bitmap:
    """
    Rescale a bitmap so that it fits in a max_dimension square.

    The scale factor is min(max_dimension / width, max_dimension / height) and
    is applied to both axes, so small images are enlarged as well. Output
    dimensions are rounded and never smaller than 1×1.

    Args:
        bitmap: Source bitmap (left untouched)
        max_dimension: Target size of the longer edge

    Returns:
        New bitmap with its own pixel buffer
    """
    scale = min(max_dimension / bitmap.width, max_dimension / bitmap.height)
    new_width = max(1, _round_half_up(bitmap.width * scale))
    new_height = max(1, _round_half_up(bitmap.height * scale))

    if (new_width, new_height) == (bitmap.width, bitmap.height):
        return Bitmap.from_array(bitmap.pixels)

    # INTER_AREA for shrinking, bilinear for enlarging
    interpolation = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_LINEAR
    resized = cv2.resize(bitmap.pixels.copy(), (new_width, new_height), interpolation=interpolation)

    logger.debug(f"Downscaled {bitmap.width}×{bitmap.height} -> {new_width}×{new_height} (scale={scale:.4f})")
    return Bitmap.from_array(resized)


def bucket_channels(rgb: np.ndarray) -> np.ndarray:
    """
    Snap channel values to the nearest multiple of BUCKET_SIZE.

    Halves round up (125 -> 130, not banker's rounding), and results are
    clamped to MAX_BUCKET so every key stays a valid byte.
    """
    values = np.asarray(rgb, dtype=np.int32)
    bucketed = (values + BUCKET_SIZE // 2) // BUCKET_SIZE * BUCKET_SIZE
    return np.minimum(bucketed, MAX_BUCKET)


def sample_pixels(bitmap: Bitmap) -> np.ndarray:
    """RGB values of every SAMPLE_STRIDE-th pixel in buffer order, shape (N, 3)."""
    return bitmap.flat_pixels()[::SAMPLE_STRIDE, :3]


def count_buckets(bitmap: Bitmap) -> Counter:
    """
    Count sampled pixels per bucketed RGB key.

    Keys are inserted in the order they are first seen during the scan.
    """
    sampled = sample_pixels(bitmap)
    if sampled.size == 0:
        return Counter()
    buckets = bucket_channels(sampled)
    return Counter(tuple(key) for key in buckets.tolist())


def rank_colors(bitmap: Bitmap, k: int = DEFAULT_NUM_COLORS) -> List[Tuple[RGB, int]]:
    """
    Rank bucketed colors by frequency.

    Ties keep first-seen scan order (sorted() is stable, including with
    reverse=True). Fewer than k buckets returns all of them.

    Args:
        bitmap: Bitmap to analyse, normally already downscaled
        k: Maximum number of entries to return

    Returns:
        List of ((r, g, b), count) ordered by count descending
    """
    return _top_buckets(count_buckets(bitmap), k)


def _top_buckets(counts: Counter, k: int) -> List[Tuple[RGB, int]]:
    if k < 1:
        return []
    ranked = sorted(counts.items(), key=lambda entry: entry[1], reverse=True)
    return ranked[:k]


def is_gray_like(rgb: np.ndarray, tolerance: int = GRAY_CHANNEL_TOLERANCE) -> np.ndarray:
    """Boolean mask of pixels whose pairwise channel differences are all within tolerance."""
    values = np.asarray(rgb, dtype=np.int16).reshape(-1, 3)
    r, g, b = values[:, 0], values[:, 1], values[:, 2]
    return (
        (np.abs(r - g) <= tolerance)
        & (np.abs(g - b) <= tolerance)
        & (np.abs(r - b) <= tolerance)
    )


def is_grayscale(bitmap: Bitmap, sample_limit: int = GRAYSCALE_SAMPLE_LIMIT) -> bool:
    """
    Classify a bitmap as effectively monochrome.

    Looks at the first sample_limit pixels in buffer order (raw, unbucketed)
    and returns True when strictly more than 90% of them are gray-like.
    """
    sample = bitmap.flat_pixels()[:sample_limit, :3]
    if len(sample) == 0:
        return False

    gray_fraction = float(np.mean(is_gray_like(sample)))
    return gray_fraction > GRAYSCALE_RATIO_THRESHOLD


def extract_palette(bitmap: Bitmap,
                    num_colors: int = DEFAULT_NUM_COLORS,
                    max_dimension: int = DEFAULT_MAX_DIMENSION) -> PaletteExtraction:
    """
    Run the full quantization pipeline on a decoded bitmap.

    Args:
        bitmap: Decoded source bitmap
        num_colors: Palette size upper bound
        max_dimension: Downscale target for the longer edge

    Returns:
        PaletteExtraction with hex palette and grayscale flag
    """
    small = downscale(bitmap, max_dimension)

    counts = count_buckets(small)
    ranked = _top_buckets(counts, num_colors)
    palette = [rgb_to_hex(key) for key, _ in ranked]
    grayscale = is_grayscale(small)

    logger.info(
        f"Extracted {len(palette)} colors from {len(counts)} buckets "
        f"({small.width}×{small.height}, grayscale={grayscale})"
    )

    return PaletteExtraction(
        palette=palette,
        is_grayscale=grayscale,
        sampled_pixels=int(sum(counts.values())),
        bucket_count=len(counts),
        counts=[count for _, count in ranked],
    )
