"""
Decoded raster image held as an immutable RGBA pixel array.
"""

from dataclasses import dataclass
from typing import Union

import numpy as np


@dataclass(frozen=True, eq=False)
class Bitmap:
    """Width, height and a read-only (height, width, 4) uint8 RGBA array."""
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Bitmap dimensions must be positive, got {self.width}×{self.height}")
        if self.pixels.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Pixel array shape {self.pixels.shape} does not match "
                f"{self.width}×{self.height} RGBA"
            )
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 pixels, got {self.pixels.dtype}")
        # Callers never see a writable view of the buffer
        self.pixels.setflags(write=False)

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "Bitmap":
        """Wrap an (H, W, 4) uint8 array, copying it so the caller keeps ownership."""
        rgba = np.array(rgba, dtype=np.uint8, copy=True)
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise ValueError("Expected RGBA array with 4 channels")
        height, width = rgba.shape[:2]
        return cls(width=width, height=height, pixels=rgba)

    @classmethod
    def from_buffer(cls, width: int, height: int, buffer: Union[bytes, bytearray, memoryview]) -> "Bitmap":
        """Build a bitmap from a flat RGBA byte buffer (4 bytes per pixel)."""
        expected = width * height * 4
        if len(buffer) != expected:
            raise ValueError(f"RGBA buffer length {len(buffer)} != {width}×{height}×4 = {expected}")
        rgba = np.frombuffer(bytes(buffer), dtype=np.uint8).reshape(height, width, 4).copy()
        return cls(width=width, height=height, pixels=rgba)

    def flat_pixels(self) -> np.ndarray:
        """Pixels in buffer order as an (N, 4) array."""
        return self.pixels.reshape(-1, 4)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()
