"""
Tests for the extraction orchestrator: gate ordering, results, cache and metrics.
"""
from datetime import datetime

import pytest

from conftest import encode_image, solid_rgb
from hueprint.errors import CorruptImage, InvalidType, ResolutionExceeded, TooLarge
from hueprint.schemas import ExtractionOptions
from hueprint.services.cache import InMemoryStore, KeyValueStore, PaletteCache
from hueprint.services.colors.extract_api import ImageUpload, handle_extract
from hueprint.utils.metrics import get_metrics

MB = 1024 * 1024


def never_read():
    raise AssertionError("upload bytes must not be read")


def failing_read():
    raise OSError("disk gone")


class BrokenStore(KeyValueStore):
    name = "broken"

    def get(self, key):
        raise ConnectionError("store offline")

    def set(self, key, value):
        raise ConnectionError("store offline")

    def remove(self, key):
        raise ConnectionError("store offline")


class TestValidationOrder:
    """Gates run before reading and before quantization"""

    def test_pdf_rejected_before_read(self):
        upload = ImageUpload("report.pdf", "application/pdf", 2048, never_read)
        with pytest.raises(InvalidType):
            handle_extract(upload)

    def test_declared_60mb_rejected_without_reading(self):
        upload = ImageUpload("huge.png", "image/png", 60 * MB, never_read)
        with pytest.raises(TooLarge):
            handle_extract(upload, ExtractionOptions(max_file_size_bytes=50 * MB))

    def test_actual_size_checked_when_undeclared(self, noisy_png):
        upload = ImageUpload("noise.png", "image/png", None, lambda: noisy_png)
        with pytest.raises(TooLarge):
            handle_extract(upload, ExtractionOptions(max_file_size_bytes=100))

    def test_corrupt_bytes(self):
        upload = ImageUpload.from_bytes("broken.png", "image/png", b"\x89PNG\r\n\x1a\nnope")
        with pytest.raises(CorruptImage):
            handle_extract(upload)

    def test_resolution_exceeded(self):
        data = encode_image(solid_rgb(2000, 10, (5, 5, 5)))
        upload = ImageUpload.from_bytes("wide.png", "image/png", data)
        with pytest.raises(ResolutionExceeded):
            handle_extract(upload)

    def test_read_failure_is_corrupt_image(self):
        upload = ImageUpload("photo.png", "image/png", 10, failing_read)
        with pytest.raises(CorruptImage) as exc_info:
            handle_extract(upload)
        assert "disk gone" in exc_info.value.message
        assert get_metrics().get_counters()["palette_rejected_total_corrupt_image"] == 1

    def test_rejections_are_counted(self):
        with pytest.raises(InvalidType):
            handle_extract(ImageUpload("a.pdf", "application/pdf", 1, never_read))
        with pytest.raises(TooLarge):
            handle_extract(ImageUpload("b.png", "image/png", 60 * MB, never_read))

        counters = get_metrics().get_counters()
        assert counters["palette_requests_total"] == 2
        assert counters["palette_rejected_total_invalid_type"] == 1
        assert counters["palette_rejected_total_too_large"] == 1


class TestExtraction:
    """Successful extraction results"""

    def test_uniform_image(self, purple_png):
        result = handle_extract(ImageUpload.from_bytes("purple.png", "image/png", purple_png))

        assert result.palette == ["#7832C8"]
        assert result.is_grayscale is False
        assert result.filename == "purple.png"
        assert (result.width, result.height) == (200, 100)
        # 200×100 stays 200×100; 20000 pixels / 4
        assert result.sampled_pixels == 5000
        assert result.timestamp.endswith("Z")
        datetime.fromisoformat(result.timestamp.replace("Z", "+00:00"))

    def test_num_colors_option(self, striped_png):
        upload = ImageUpload.from_bytes("stripes.png", "image/png", striped_png)
        result = handle_extract(upload, ExtractionOptions(num_colors=2))
        assert result.palette == ["#FA0000", "#00FA00"]

    def test_grayscale_image(self):
        data = encode_image(solid_rgb(50, 50, (128, 128, 128)))
        result = handle_extract(ImageUpload.from_bytes("gray.png", "image/png", data))
        assert result.is_grayscale is True
        assert get_metrics().get_counters()["palette_grayscale_total"] == 1

    def test_deterministic(self, striped_png):
        upload = ImageUpload.from_bytes("stripes.png", "image/png", striped_png)
        first = handle_extract(upload, ExtractionOptions(num_colors=8))
        second = handle_extract(upload, ExtractionOptions(num_colors=8))
        assert first.palette == second.palette

    def test_result_saved_to_cache(self, purple_png):
        cache = PaletteCache(InMemoryStore())
        result = handle_extract(ImageUpload.from_bytes("purple.png", "image/png", purple_png), cache=cache)
        assert cache.load() == result

    def test_rejected_upload_leaves_cache_untouched(self, purple_png):
        cache = PaletteCache(InMemoryStore())
        first = handle_extract(ImageUpload.from_bytes("purple.png", "image/png", purple_png), cache=cache)
        with pytest.raises(InvalidType):
            handle_extract(ImageUpload("x.pdf", "application/pdf", 1, never_read), cache=cache)
        assert cache.load() == first

    def test_cache_failure_is_not_fatal(self, purple_png):
        cache = PaletteCache(BrokenStore())
        result = handle_extract(ImageUpload.from_bytes("purple.png", "image/png", purple_png), cache=cache)
        assert result.palette == ["#7832C8"]
