"""
HTML Generator
==============

Build the styled card document for the browser backend. Fonts and the
background are embedded as base64 data URIs so the page needs no network.
"""

from typing import Any, Dict, List, Optional
from pathlib import Path
import base64

import jinja2

from hcrm.config.logging import get_logger
from hcrm.config.settings import get_settings
from hcrm.core.exceptions import CardRenderError
from hcrm.core.rendering.imaging import image_mime
from hcrm.models.schemas import (
    AssetName,
    CardAssets,
    FooterLayout,
    RenderConfig,
    RenderData,
)

logger = get_logger(__name__)

CARD_SELECTOR = ".main-card"
CARD_CONTENT_WIDTH = 360

# Logical font -> (CSS family, data URI MIME type)
FONT_FACES: Dict[AssetName, tuple] = {
    AssetName.FONT_DISPLAY: ("Anurati", "font/otf"),
    AssetName.FONT_BODY: ("ChiMing", "font/otf"),
    AssetName.FONT_HEADING: ("Zcool", "font/ttf"),
}


class HTMLGenerationError(CardRenderError):
    """Exception raised when HTML generation fails."""

    pass


def _b64(data: Optional[bytes]) -> str:
    return base64.b64encode(data).decode("ascii") if data else ""


class CardHTMLGenerator:
    """Jinja2-based card document generator."""

    template_name = "card.html"

    def __init__(self) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(generator="jinja2")  # structlog.BoundLoggerBase
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        template_dir = Path(__file__).parent / "templates"
        self.env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            enable_async=True,
        )

    async def generate(self, data: RenderData, assets: CardAssets, config: RenderConfig) -> str:
        """
        Generate the card document.

        Args:
            data: Assembled template data
            assets: Resolved fonts and background
            config: User render options

        Returns:
            Generated HTML string

        Raises:
            HTMLGenerationError: If HTML generation fails
        """
        try:
            template = self.env.get_template(self.template_name)
            html = await template.render_async(**self._prepare_context(data, assets, config))
        except jinja2.TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            self.logger.error("HTML generation failed", error=error_msg)
            raise HTMLGenerationError(error_msg)

        self.logger.debug("HTML generation completed", html_length=len(html))
        return html

    def _prepare_context(
        self, data: RenderData, assets: CardAssets, config: RenderConfig
    ) -> Dict[str, Any]:
        """Template context; every dynamic value is a structured field."""
        font_faces: List[Dict[str, str]] = []
        for name, (family, mime) in FONT_FACES.items():
            font_bytes = assets.get(name)
            if font_bytes:
                font_faces.append({"family": family, "mime": mime, "data": _b64(font_bytes)})
            else:
                self.logger.warning("Font missing, browser fallback will be used", font=name.value)

        stat_rows = [
            {"label": "CPU", "percent": data.stats.cpu_percent, "info": data.stats.cpu_model},
            {"label": "RAM", "percent": data.stats.ram_percent, "info": f"OS: {data.stats.os_descriptor}"},
        ]

        return {
            "data": data,
            "font_faces": font_faces,
            "background": _b64(assets.background),
            "background_mime": image_mime(assets.background) if assets.background else "",
            "card_width": CARD_CONTENT_WIDTH,
            "stat_rows": stat_rows,
            "footer_text": config.footer_text,
            "footer_split": config.footer_layout is FooterLayout.SPLIT,
            "background_credit": config.background_credit,
        }


async def generate_card_html(data: RenderData, assets: CardAssets, config: RenderConfig) -> str:
    """Generate the card HTML document."""
    return await CardHTMLGenerator().generate(data, assets, config)
