"""
Tests for the still-image compositor.
"""
import io
import pytest

from PIL import Image

from adstudio.editor import canvas_size, compose_still, wrap_text
from adstudio.editor import overlays as ops
from adstudio.errors import ExportError
from adstudio.models import Position, VisualType


def char_width(text):
    """Every character is 10 units wide."""
    return len(text) * 10


class TestWrapText:
    """Tests for greedy word wrap."""

    def test_wraps_long_text(self):
        """Text longer than the width splits into lines that each fit."""
        text = "Taste the stars in every sip of Starlight Soda tonight"
        lines = wrap_text(text, 200, char_width)

        assert len(lines) >= 2
        assert all(char_width(line) <= 200 for line in lines)
        assert " ".join(lines) == text

    def test_greedy(self):
        """Words are added while they fit."""
        assert wrap_text("aaa bbb ccc ddd", 70, char_width) == ["aaa bbb", "ccc ddd"]

    def test_short_text_single_line(self):
        """Text that fits stays on one line."""
        assert wrap_text("Hello", 1000, char_width) == ["Hello"]

    def test_newlines_break(self):
        """Explicit newlines always start a new line."""
        assert wrap_text("one\ntwo", 1000, char_width) == ["one", "two"]

    def test_long_word_broken(self):
        """A word wider than the line is split so no line overflows."""
        lines = wrap_text("hi extraordinarily ok", 50, char_width)
        assert lines == ["hi", "extra", "ordin", "arily", "ok"]
        assert all(char_width(line) <= 50 for line in lines)

    def test_long_word_continues_line(self):
        """The tail of a broken word is filled like any other line."""
        assert wrap_text("abcdefg h", 50, char_width) == ["abcde", "fg h"]


class TestCanvas:
    """Tests for canvas sizing."""

    @pytest.mark.parametrize("ratio, expected", [("16:9", (1920, 1080)), ("9:16", (1920, 3413)), ("1:1", (1920, 1920))])
    def test_reference_width(self, ratio, expected):
        """The canvas is 1920 wide with height from the aspect ratio."""
        assert canvas_size(ratio) == expected


class TestComposeStill:
    """Tests for compositing an image scene."""

    def test_output_is_jpeg_of_canvas_size(self, make_scene, jpeg_bytes):
        """The export has the canvas size regardless of the visual's size."""
        scene = make_scene(visual_type=VisualType.IMAGE, text_overlays=ops.caption_overlays(["Taste the stars."]))
        data = compose_still(scene, jpeg_bytes, width=640)

        image = Image.open(io.BytesIO(data))
        assert image.format == "JPEG"
        assert image.size == (640, 360)

    def test_logo_drawn_at_center_anchor(self, make_scene, jpeg_bytes, logo_file):
        """A centered red logo turns the middle of the image red."""
        scene = ops.set_logo(make_scene(visual_type=VisualType.IMAGE), str(logo_file), size=20, position=Position(x=50, y=50))
        image = Image.open(io.BytesIO(compose_still(scene, jpeg_bytes, width=640))).convert("RGB")

        red, green, blue = image.getpixel((320, 180))
        assert red > 200 and green < 60 and blue < 60
        # Outside the logo the blue background remains
        red, green, blue = image.getpixel((20, 20))
        assert blue > red

    def test_text_drawn(self, make_scene, jpeg_bytes):
        """White text changes pixels inside its box."""
        scene = make_scene(visual_type=VisualType.IMAGE)
        scene, _ = ops.add_text_overlay(scene, "WWWWWW", size=20, position=Position(x=50, y=40))
        plain = Image.open(io.BytesIO(compose_still(make_scene(visual_type=VisualType.IMAGE), jpeg_bytes, width=640)))
        drawn = Image.open(io.BytesIO(compose_still(scene, jpeg_bytes, width=640)))

        region = (160, 144, 480, 230)
        assert plain.crop(region).tobytes() != drawn.crop(region).tobytes()

    def test_unreadable_visual(self, make_scene):
        """Corrupt visuals are reported as export errors."""
        with pytest.raises(ExportError):
            compose_still(make_scene(visual_type=VisualType.IMAGE), b"not an image", width=320)

    def test_bad_color(self, make_scene, jpeg_bytes):
        """Unknown colors are reported as export errors."""
        scene, _ = ops.add_text_overlay(make_scene(visual_type=VisualType.IMAGE), "Hi", color="not-a-color")
        with pytest.raises(ExportError):
            compose_still(scene, jpeg_bytes, width=320)
