"""
Unit Tests for PNG Finishing
============================
"""

import pytest
from PIL import UnidentifiedImageError

from hcrm.core.rendering.imaging import finalize_png, image_mime, optimize_png

from tests.utils.assertions import assert_valid_png_result
from tests.utils.helpers import create_test_jpeg, create_test_png


class TestImageMime:
    def test_png(self):
        assert image_mime(create_test_png(4, 4)) == "image/png"

    def test_jpeg(self):
        assert image_mime(create_test_jpeg()) == "image/jpeg"


class TestOptimizePng:
    def test_never_larger(self, test_png):
        assert len(optimize_png(test_png)) <= len(test_png)

    def test_invalid_input_is_returned(self):
        assert optimize_png(b"not a png") == b"not a png"


class TestFinalizePng:
    def test_reads_dimensions(self, test_png):
        result = finalize_png(test_png, generator="test", metadata={"source": "unit"})

        assert_valid_png_result(result)
        assert (result.width, result.height) == (840, 1200)
        assert result.metadata == {"generator": "test", "optimization": False, "source": "unit"}

    def test_optimized(self, test_png):
        result = finalize_png(test_png, generator="test", optimize=True)

        assert result.metadata["optimization"] is True
        assert result.file_size <= len(test_png)

    def test_invalid_bytes(self):
        with pytest.raises(UnidentifiedImageError):
            finalize_png(b"garbage", generator="test")
