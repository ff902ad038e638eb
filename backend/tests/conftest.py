"""
Test configuration and fixtures for Hueprint palette tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Import the main app
from main import app
from hueprint.api.v1 import get_palette_cache
from hueprint.services.cache import InMemoryStore, PaletteCache
from hueprint.utils.metrics import reset_metrics


def encode_image(rgb: np.ndarray, fmt: str = "PNG", **save_kwargs) -> bytes:
    """Encode an (H, W, 3) or (H, W, 4) uint8 array with Pillow."""
    buffer = io.BytesIO()
    Image.fromarray(rgb.astype(np.uint8)).save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def solid_rgb(width: int, height: int, color) -> np.ndarray:
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = color
    return img


@pytest.fixture
def palette_cache():
    """Fresh in-memory last-palette cache."""
    return PaletteCache(InMemoryStore())


@pytest.fixture
def test_client(palette_cache):
    """Create test client for the FastAPI app with an isolated cache."""
    app.dependency_overrides[get_palette_cache] = lambda: palette_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_metrics_between_tests():
    """Reset metrics before each test."""
    reset_metrics()


@pytest.fixture
def purple_png():
    """200×100 PNG filled with RGB (120, 50, 200)."""
    return encode_image(solid_rgb(200, 100, (120, 50, 200)))


@pytest.fixture
def striped_png():
    """
    90×60 PNG with three horizontal bands of unequal height:
    red (30 rows), green (20 rows), blue (10 rows).
    """
    img = np.zeros((60, 90, 3), dtype=np.uint8)
    img[:30] = (250, 0, 0)
    img[30:50] = (0, 250, 0)
    img[50:] = (0, 0, 250)
    return encode_image(img)


@pytest.fixture
def noisy_png():
    """64×64 PNG of seeded random noise (large, incompressible payload)."""
    rng = np.random.default_rng(7)
    return encode_image(rng.integers(0, 256, size=(64, 64, 3), dtype=np.uint8))
