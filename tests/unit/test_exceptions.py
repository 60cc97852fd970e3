"""
Unit Tests for Card Exceptions
==============================
"""

import pytest

from hcrm.core.data.quotes import QuoteServiceError
from hcrm.core.exceptions import AssetError, CardError, CardRenderError, MissingFontError
from hcrm.core.rendering.html_generator import HTMLGenerationError
from hcrm.core.rendering.layout import LayoutError
from hcrm.core.rendering.png_generator import PNGGenerationError
from hcrm.core.rendering.svg_generator import SVGGenerationError


class TestHierarchy:
    """Test that every pipeline error is a CardError."""

    @pytest.mark.parametrize(
        "error_class",
        [HTMLGenerationError, PNGGenerationError, SVGGenerationError, LayoutError],
    )
    def test_render_errors(self, error_class):
        assert issubclass(error_class, CardRenderError)
        assert issubclass(error_class, CardError)

    @pytest.mark.parametrize("error_class", [AssetError, MissingFontError, QuoteServiceError])
    def test_card_errors(self, error_class):
        assert issubclass(error_class, CardError)


class TestMissingFontError:
    def test_lists_files(self):
        error = MissingFontError(f for f in ["a.otf", "b.ttf"])

        assert error.missing == ["a.otf", "b.ttf"]
        assert str(error) == "missing fonts: a.otf, b.ttf"
