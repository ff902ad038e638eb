"""
Tests for palette text export and swatch rendering.
"""
import io

import pytest
from PIL import Image

from hueprint.services.colors.export import export_swatch, export_text, palette_to_text
from hueprint.services.colors.swatches import hex_to_bgr, render_swatch_strip


def decode_png(data):
    return Image.open(io.BytesIO(data)).convert("RGB")


class TestTextExport:

    def test_palette_to_text(self):
        assert palette_to_text(["#FA0000", "#00FA00", "#0000FA"]) == "#FA0000\n#00FA00\n#0000FA"

    def test_single_color_has_no_trailing_newline(self):
        assert palette_to_text(["#000000"]) == "#000000"

    def test_default_filename(self):
        artifact = export_text(["#123456"])
        assert artifact.filename == "palette.txt"
        assert artifact.media_type == "text/plain"
        assert artifact.content == b"#123456"
        assert artifact.content_disposition == 'attachment; filename="palette.txt"'

    @pytest.mark.parametrize("requested,expected", [
        ("colors.txt", "colors.txt"),
        ("../../etc/colors.txt", "colors.txt"),
        ("C:\\temp\\colors.txt", "colors.txt"),
        ('say"hi".txt', "sayhi.txt"),
        ("dir/", "palette.txt"),
        ("", "palette.txt"),
    ])
    def test_filename_sanitized(self, requested, expected):
        assert export_text(["#000000"], requested).filename == expected


class TestSwatchExport:

    def test_hex_to_bgr(self):
        assert hex_to_bgr("#FA3200") == (0, 50, 250)

    def test_strip_layout(self):
        image = decode_png(render_swatch_strip(["#FA0000", "#00FA00", "#0000FA"], chip_size=10))
        assert image.size == (30, 10)
        assert image.getpixel((5, 5)) == (250, 0, 0)
        assert image.getpixel((15, 5)) == (0, 250, 0)
        assert image.getpixel((25, 5)) == (0, 0, 250)

    def test_highlight_border(self):
        data = render_swatch_strip(["#FAFAFA", "#FAFAFA"], chip_size=40, highlight_index=1)
        image = decode_png(data)
        # Border drawn only around the second chip
        assert image.getpixel((0, 0)) == (250, 250, 250)
        assert image.getpixel((40, 0)) == (0, 0, 0)
        assert image.getpixel((79, 39)) == (0, 0, 0)
        assert image.getpixel((60, 20)) == (250, 250, 250)

    def test_out_of_range_highlight_ignored(self):
        image = decode_png(render_swatch_strip(["#FAFAFA"], chip_size=10, highlight_index=3))
        assert image.getpixel((0, 0)) == (250, 250, 250)

    def test_empty_palette_rejected(self):
        with pytest.raises(ValueError):
            render_swatch_strip([])

    def test_export_swatch_artifact(self):
        artifact = export_swatch(["#7832C8"])
        assert artifact.filename == "palette.png"
        assert artifact.media_type == "image/png"
        assert decode_png(artifact.content).getpixel((0, 0)) == (120, 50, 200)
