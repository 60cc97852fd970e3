"""
Vector Renderer
===============

Browser-free backend: author the card as a flex node tree, lay it out, paint
it to SVG with the card fonts' outlines and rasterize the SVG with CairoSVG.
"""

from typing import Any, List, Optional

from hcrm.config.logging import get_logger
from hcrm.config.settings import get_settings
from hcrm.core.exceptions import MissingFontError
from hcrm.core.rendering.imaging import finalize_png
from hcrm.core.rendering.layout import Node, Style, compute_layout, edges
from hcrm.core.rendering.svg_generator import FontBook, paint_svg, rasterize_svg
from hcrm.models.schemas import (
    AssetName,
    CardAssets,
    FooterLayout,
    RenderConfig,
    RenderData,
    RenderResult,
)

logger = get_logger(__name__)

MISSING_FONT_PREFIX = "渲染错误：矢量渲染缺少字体 "
RENDER_FAILED_PREFIX = "生成失败："

FALLBACK_BACKGROUND = "#2b2d3a"
WHITE = "#ffffff"

DISPLAY = AssetName.FONT_DISPLAY
BODY = AssetName.FONT_BODY
HEADING = AssetName.FONT_HEADING


def _text(text: str, key: Optional[str] = None, **style: Any) -> Node:
    return Node(style=Style(**style), text=text, key=key)


def _stat_group(key: str, label: str, percent: str, info: str) -> Node:
    try:
        fill = min(max(float(percent), 0.0), 100.0)
    except ValueError:
        fill = 0.0

    row = Node(
        style=Style(direction="row", align_items="center", justify_content="space-between"),
        children=[
            _text(label, font=BODY, font_size=18, width=50),
            Node(
                key=f"{key}-track",
                style=Style(
                    direction="row",
                    flex_grow=1,
                    height=14,
                    background="rgba(255, 255, 255, 0.2)",
                ),
                children=[
                    Node(key=f"{key}-bar", style=Style(width_percent=fill, background=WHITE)),
                ],
            ),
            _text(
                f"{percent}%",
                key=f"{key}-value",
                font=BODY,
                font_size=18,
                min_width=50,
                margin=edges(0, 0, 0, 10),
                text_align="right",
            ),
        ],
    )
    return Node(
        key=key,
        style=Style(width_percent=100, gap=5, margin=edges(0, 0, 10, 0)),
        children=[
            row,
            _text(
                info,
                font=BODY,
                font_size=12,
                color="rgba(255, 255, 255, 0.7)",
                padding=edges(0, 0, 0, 50),
                margin=edges(-2, 0, 0, 0),
            ),
        ],
    )


def _footer(config: RenderConfig) -> Node:
    text_style = dict(font=BODY, font_size=12, color="#cccccc", letter_spacing=1)
    children: List[Node] = [_text(config.footer_text, key="footer-text", **text_style)]
    if config.background_credit:
        children.append(_text(config.background_credit, key="footer-credit", **text_style))

    if config.footer_layout is FooterLayout.SPLIT:
        style = Style(
            direction="row",
            width_percent=100,
            justify_content="space-between",
            align_items="center",
        )
    else:
        style = Style(align_items="center", gap=2)
    style.margin = edges(5, 0, 0, 0)
    style.opacity = 0.9
    return Node(key="footer", style=style, children=children)


def build_card_tree(
    data: RenderData, assets: CardAssets, config: RenderConfig, width: float = 420
) -> Node:
    """
    Author the card as a node tree.

    Args:
        data: Assembled template data
        assets: Resolved background and fonts
        config: User render options
        width: Logical card width

    Returns:
        Root node; boxes are filled in by the layout engine
    """
    stats = data.stats
    panel = Node(
        key="panel",
        style=Style(
            width_percent=100,
            padding=edges(25, 20),
            gap=15,
            align_items="center",
            background="rgba(0, 0, 0, 0.2)",
            border_width=3,
            border_color="rgba(255, 255, 255, 0.5)",
        ),
        children=[
            _text(
                data.content_hash,
                key="hash",
                font=BODY,
                font_size=8,
                color="rgba(255, 255, 255, 0.2)",
                letter_spacing=1,
                position="absolute",
                right=10,
                bottom=5,
            ),
            _text("HCRM", key="title", font=DISPLAY, font_size=42, letter_spacing=2),
            Node(
                key="lunar",
                style=Style(align_items="center", gap=4, margin=edges(-10, 0, 5, 0), opacity=0.9),
                children=[
                    _text(data.lunar_text, key="lunar-text", font=HEADING, font_size=12,
                          color="#cccccc", letter_spacing=1),
                    _text(data.mood_and_greeting, key="mood", font=HEADING, font_size=12,
                          color="#cccccc", letter_spacing=1),
                ],
            ),
            Node(
                key="time",
                style=Style(align_items="center", margin=edges(0, 0, 10, 0)),
                children=[
                    _text(data.time_text, key="time-text", font=HEADING, font_size=28),
                    _text(
                        f"Timestamp: {data.timestamp_millis}",
                        key="timestamp",
                        font=BODY,
                        font_size=14,
                        color="rgba(255, 255, 255, 0.8)",
                        letter_spacing=1,
                        margin=edges(5, 0, 0, 0),
                    ),
                ],
            ),
            _stat_group("cpu", "CPU", stats.cpu_percent, stats.cpu_model),
            _stat_group("ram", "RAM", stats.ram_percent, f"OS: {stats.os_descriptor}"),
            Node(
                key="quote",
                style=Style(width_percent=100, margin=edges(15, 0, 5, 0), padding=edges(0, 5)),
                children=[
                    _text(
                        f"“ {data.quote_text} ”",
                        key="quote-text",
                        font=HEADING,
                        font_size=14,
                        line_height=1.5,
                        text_align="center",
                        italic=True,
                    ),
                ],
            ),
            _footer(config),
        ],
    )

    return Node(
        key="card",
        style=Style(
            width=width,
            padding=edges(50, 30),
            align_items="center",
            background_image=assets.background,
            background=None if assets.background else FALLBACK_BACKGROUND,
        ),
        children=[
            Node(
                key="overlay",
                style=Style(
                    position="absolute",
                    top=0,
                    right=0,
                    bottom=0,
                    left=0,
                    background="rgba(0, 0, 0, 0.3)",
                ),
            ),
            panel,
        ],
    )


class VectorRenderer:
    """Render the card without a browser."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(generator="vector")  # structlog.BoundLoggerBase

    async def render(
        self, data: RenderData, assets: CardAssets, config: RenderConfig
    ) -> RenderResult:
        """
        Render the card to PNG.

        Args:
            data: Assembled template data
            assets: Resolved fonts and background; all three fonts are required
            config: User render options

        Returns:
            RenderResult with the rasterized card or a user facing error
        """
        try:
            fonts = FontBook.from_assets(assets)
        except MissingFontError as e:
            self.logger.error("Vector render aborted, fonts missing", missing=e.missing)
            return RenderResult.failed(f"{MISSING_FONT_PREFIX}{', '.join(e.missing)}")
        except Exception as e:
            self.logger.error("Vector render aborted, fonts unreadable", error=str(e), exc_info=True)
            return RenderResult.failed(f"{RENDER_FAILED_PREFIX}{e}")

        width = self.settings.vector_width
        output_width = int(round(width * self.settings.vector_scale))
        try:
            root = compute_layout(build_card_tree(data, assets, config, width), width, fonts)
            svg = paint_svg(root, fonts)
            png_bytes = rasterize_svg(svg, output_width)
            result = finalize_png(
                png_bytes,
                generator="cairosvg",
                optimize=self.settings.optimize_png,
                metadata={"logical_width": width, "svg_length": len(svg)},
            )
        except Exception as e:
            self.logger.error("Vector render failed", error=str(e), exc_info=True)
            return RenderResult.failed(f"{RENDER_FAILED_PREFIX}{e}")

        self.logger.info("Vector render completed", file_size=result.file_size)
        return RenderResult.ok(result)


async def render_vector(data: RenderData, assets: CardAssets, config: RenderConfig) -> RenderResult:
    """Render the card with the vector backend."""
    return await VectorRenderer().render(data, assets, config)
