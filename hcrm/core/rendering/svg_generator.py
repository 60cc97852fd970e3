"""
SVG Generator
=============

Paint a laid-out node tree into an SVG document and rasterize it to PNG.

Text is drawn from the card fonts' own glyph outlines, so the SVG carries no
font references and rasterization never falls back to a system font.
"""

from typing import Dict, List, Tuple
import base64
import io
import re

from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont

from hcrm.config.logging import get_logger
from hcrm.core.exceptions import CardRenderError, MissingFontError
from hcrm.core.rendering.imaging import image_mime
from hcrm.core.rendering.layout import Node
from hcrm.models.schemas import AssetName, CardAssets, FONT_ASSETS

logger = get_logger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
ITALIC_SKEW = 0.2

_RGBA_RE = re.compile(r"rgba?\(([^)]*)\)")


class SVGGenerationError(CardRenderError):
    """Exception raised when painting or rasterizing the SVG fails."""

    pass


class OutlineFont:
    """Glyph metrics and outlines of one font file."""

    def __init__(self, data: bytes, name: str):
        self.name = name
        self.font = TTFont(io.BytesIO(data))
        self.glyph_set = self.font.getGlyphSet()
        self.cmap = self.font.getBestCmap() or {}
        self.units_per_em = self.font["head"].unitsPerEm
        hhea = self.font["hhea"]
        self.ascent = hhea.ascent
        self.descent = hhea.descent
        self.metrics = self.font["hmtx"].metrics

    def glyph_name(self, char: str) -> str:
        name = self.cmap.get(ord(char), ".notdef")
        return name if name in self.glyph_set else ".notdef"

    def advance(self, glyph: str) -> float:
        return self.metrics.get(glyph, (self.units_per_em / 2, 0))[0]

    def text_width(self, text: str, size: float, letter_spacing: float = 0.0) -> float:
        scale = size / self.units_per_em
        return sum(self.advance(self.glyph_name(c)) * scale + letter_spacing for c in text)

    def baseline_offset(self, size: float, line_height: float) -> float:
        """Distance from the top of a line box to the baseline."""
        scale = size / self.units_per_em
        glyph_height = (self.ascent - self.descent) * scale
        return (size * line_height - glyph_height) / 2.0 + self.ascent * scale

    def text_path(
        self,
        text: str,
        x: float,
        baseline: float,
        size: float,
        letter_spacing: float = 0.0,
        italic: bool = False,
    ) -> str:
        """SVG path data for a line of text starting at (x, baseline)."""
        scale = size / self.units_per_em
        shear = scale * ITALIC_SKEW if italic else 0.0
        pen = SVGPathPen(self.glyph_set)
        cursor = x
        for char in text:
            glyph = self.glyph_name(char)
            self.glyph_set[glyph].draw(TransformPen(pen, (scale, 0, shear, -scale, cursor, baseline)))
            cursor += self.advance(glyph) * scale + letter_spacing
        return pen.getCommands()


class FontBook:
    """The three card fonts, keyed by logical name; doubles as a text measurer."""

    def __init__(self, fonts: Dict[AssetName, OutlineFont]):
        self.fonts = fonts

    @classmethod
    def from_assets(cls, assets: CardAssets) -> "FontBook":
        """
        Load every card font.

        Raises:
            MissingFontError: If any font asset is absent
        """
        missing = assets.missing_fonts()
        if missing:
            raise MissingFontError(name.filename for name in missing)
        return cls({name: OutlineFont(assets.get(name), name.value) for name in FONT_ASSETS})

    def __getitem__(self, name: AssetName) -> OutlineFont:
        return self.fonts[name]

    def measure(self, font: AssetName, size: float, letter_spacing: float, text: str) -> float:
        return self.fonts[font].text_width(text, size, letter_spacing)


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def parse_color(value: str) -> Tuple[str, float]:
    """Split a CSS color into a hex color and an opacity."""
    value = value.strip()
    match = _RGBA_RE.fullmatch(value)
    if match:
        parts = [p.strip() for p in match.group(1).split(",")]
        r, g, b = (int(float(p)) for p in parts[:3])
        alpha = float(parts[3]) if len(parts) > 3 else 1.0
        return f"#{r:02x}{g:02x}{b:02x}", alpha
    if re.fullmatch(r"#[0-9a-fA-F]{3}", value):
        return "#" + "".join(c * 2 for c in value[1:]), 1.0
    return value, 1.0


class SVGPainter:
    """Serializes a laid-out tree into SVG markup."""

    def __init__(self, fonts: FontBook):
        self.fonts = fonts
        self._clip_count = 0

    def paint(self, root: Node) -> str:
        self._clip_count = 0
        width, height = root.box.width, root.box.height
        body: List[str] = []
        self._paint_node(root, body)
        return "".join(
            [
                f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}" ',
                f'width="{_num(width)}" height="{_num(height)}" ',
                f'viewBox="0 0 {_num(width)} {_num(height)}">',
                *body,
                "</svg>",
            ]
        )

    def _paint_node(self, node: Node, out: List[str]) -> None:
        s = node.style
        box = node.box
        grouped = s.opacity < 1.0
        if grouped:
            out.append(f'<g opacity="{_num(s.opacity)}">')

        rect = f'x="{_num(box.x)}" y="{_num(box.y)}" width="{_num(box.width)}" height="{_num(box.height)}"'

        if s.background_image:
            self._clip_count += 1
            clip_id = f"clip{self._clip_count}"
            encoded = base64.b64encode(s.background_image).decode("ascii")
            out.append(f'<clipPath id="{clip_id}"><rect {rect}/></clipPath>')
            out.append(
                f'<image {rect} preserveAspectRatio="xMidYMid slice" clip-path="url(#{clip_id})" '
                f'xlink:href="data:{image_mime(s.background_image)};base64,{encoded}"/>'
            )

        if s.background:
            fill, alpha = parse_color(s.background)
            out.append(f'<rect {rect} fill="{fill}" fill-opacity="{_num(alpha)}"/>')

        if s.border_width and s.border_color:
            stroke, alpha = parse_color(s.border_color)
            half = s.border_width / 2.0
            out.append(
                f'<rect x="{_num(box.x + half)}" y="{_num(box.y + half)}" '
                f'width="{_num(box.width - s.border_width)}" height="{_num(box.height - s.border_width)}" '
                f'fill="none" stroke="{stroke}" stroke-opacity="{_num(alpha)}" '
                f'stroke-width="{_num(s.border_width)}"/>'
            )

        if node.text is not None:
            self._paint_text(node, out)

        for child in node.children:
            self._paint_node(child, out)

        if grouped:
            out.append("</g>")

    def _paint_text(self, node: Node, out: List[str]) -> None:
        s = node.style
        font = self.fonts[s.font]
        top, right, bottom, left = s.inset
        content_x = node.box.x + left
        content_width = node.box.width - left - right
        line_box = s.font_size * s.line_height
        fill, alpha = parse_color(s.color)

        for index, line in enumerate(node.lines):
            if not line:
                continue
            line_width = font.text_width(line, s.font_size, s.letter_spacing)
            if s.text_align == "center":
                x = content_x + (content_width - line_width) / 2.0
            elif s.text_align == "right":
                x = content_x + content_width - line_width
            else:
                x = content_x
            baseline = node.box.y + top + index * line_box + font.baseline_offset(s.font_size, s.line_height)
            path = font.text_path(line, x, baseline, s.font_size, s.letter_spacing, s.italic)
            if path:
                out.append(f'<path d="{path}" fill="{fill}" fill-opacity="{_num(alpha)}"/>')


def paint_svg(root: Node, fonts: FontBook) -> str:
    """Serialize a laid-out tree into an SVG document."""
    return SVGPainter(fonts).paint(root)


def rasterize_svg(svg: str, output_width: int) -> bytes:
    """
    Rasterize an SVG document to PNG with CairoSVG.

    Raises:
        SVGGenerationError: If CairoSVG fails
    """
    try:
        import cairosvg

        png_bytes = cairosvg.svg2png(bytestring=svg.encode("utf-8"), output_width=output_width)
    except Exception as e:
        raise SVGGenerationError(f"SVG rasterization failed: {e}")
    if not png_bytes:
        raise SVGGenerationError("SVG rasterization produced no output")

    logger.debug("SVG rasterized", output_width=output_width, png_size=len(png_bytes))
    return png_bytes
