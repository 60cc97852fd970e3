"""
Test Helpers
============

Builders for binary fixtures: PNG images and minimal outline fonts.
"""

import io
import time

from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen
from PIL import Image

__all__ = [
    "create_test_png",
    "create_test_jpeg",
    "build_test_font",
    "TEST_FONT_UPM",
    "TEST_GLYPH_ADVANCE",
    "TEST_SPACE_ADVANCE",
    "TestTimer",
]

TEST_FONT_UPM = 1000
TEST_GLYPH_ADVANCE = 600
TEST_SPACE_ADVANCE = 250


def create_test_png(width: int = 100, height: int = 100, color: str = "white") -> bytes:
    """Create a valid PNG image with Pillow."""
    output = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(output, format="PNG")
    return output.getvalue()


def create_test_jpeg(width: int = 64, height: int = 48) -> bytes:
    """Create a valid JPEG image with Pillow."""
    output = io.BytesIO()
    Image.new("RGB", (width, height), (40, 60, 90)).save(output, format="JPEG")
    return output.getvalue()


def build_test_font(family: str = "Test") -> bytes:
    """
    Build a TrueType font with a box .notdef glyph and a space.

    Every character other than the space renders as the box, which makes
    text widths easy to predict: 0.6 em per character, 0.25 em per space.
    """
    builder = FontBuilder(TEST_FONT_UPM, isTTF=True)
    builder.setupGlyphOrder([".notdef", "space"])
    builder.setupCharacterMap({32: "space"})

    pen = TTGlyphPen(None)
    pen.moveTo((50, 0))
    pen.lineTo((50, 700))
    pen.lineTo((550, 700))
    pen.lineTo((550, 0))
    pen.closePath()
    builder.setupGlyf({".notdef": pen.glyph(), "space": TTGlyphPen(None).glyph()})

    builder.setupHorizontalMetrics(
        {".notdef": (TEST_GLYPH_ADVANCE, 50), "space": (TEST_SPACE_ADVANCE, 0)}
    )
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": family, "styleName": "Regular"})
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupPost()

    output = io.BytesIO()
    builder.save(output)
    return output.getvalue()


class TestTimer:
    """Context manager for timing test operations."""

    __test__ = False

    def __init__(self, description: str = ""):
        self.description = description
        self.start_time = 0.0
        self.end_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()

    @property
    def duration(self) -> float:
        """Get the measured duration."""
        return self.end_time - self.start_time
