"""
Pydantic Models and Schemas
===========================

Core data models for the status card: sampled metrics, resolved assets,
assembled template data, user options and rendering results.
"""

from typing import Optional, List, Dict, Any, FrozenSet, TYPE_CHECKING
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from hcrm.config.settings import Settings


# Enums
class RenderMode(str, Enum):
    """Available rendering backends."""
    DOM = "dom"
    VECTOR = "vector"


class FooterLayout(str, Enum):
    """Footer arrangement on the card."""
    CENTER = "center"
    SPLIT = "split"


class AssetName(str, Enum):
    """Logical asset names with their bundled file names."""
    BACKGROUND = "background"
    FONT_DISPLAY = "font_display"
    FONT_BODY = "font_body"
    FONT_HEADING = "font_heading"

    @property
    def filename(self) -> str:
        return ASSET_FILENAMES[self]


ASSET_FILENAMES: Dict[AssetName, str] = {
    AssetName.BACKGROUND: "1.jpg",
    AssetName.FONT_DISPLAY: "Anurati-Regular.otf",
    AssetName.FONT_BODY: "赤明工业革命SC-Regular.otf",
    AssetName.FONT_HEADING: "站酷快乐体.ttf",
}

FONT_ASSETS = (AssetName.FONT_DISPLAY, AssetName.FONT_BODY, AssetName.FONT_HEADING)

# Hitokoto category codes accepted by the quote service
HITOKOTO_CATEGORIES: Dict[str, str] = {
    "a": "动画",
    "b": "漫画",
    "c": "游戏",
    "d": "文学",
    "e": "原创",
    "f": "来自网络",
    "g": "其他",
    "h": "影视",
    "i": "诗词",
    "j": "网易云",
    "k": "哲学",
    "l": "抖机灵",
}


# Metrics Models
class MetricsSnapshot(BaseModel):
    """Cumulative CPU tick counters summed over all cores."""
    model_config = ConfigDict(frozen=True)

    idle_ticks: int = Field(..., ge=0, description="Idle clock ticks across all cores")
    total_ticks: int = Field(..., ge=0, description="Clock ticks of every category across all cores")
    cpu_model: str = Field("Unknown CPU", description="CPU model name")


class SystemStats(BaseModel):
    """Host usage figures shown on the card."""
    model_config = ConfigDict(frozen=True)

    cpu_percent: str = Field(..., description="CPU usage, one fraction digit")
    ram_percent: str = Field(..., description="RAM usage, one fraction digit")
    cpu_model: str = Field(..., description="CPU model name")
    os_descriptor: str = Field(..., description="Operating system type and release")


# Asset Models
class CardAssets(BaseModel):
    """Resolved asset bytes; None marks a missing asset."""
    model_config = ConfigDict(frozen=True)

    background: Optional[bytes] = None
    font_display: Optional[bytes] = None
    font_body: Optional[bytes] = None
    font_heading: Optional[bytes] = None

    def get(self, name: AssetName) -> Optional[bytes]:
        return getattr(self, name.value)

    def missing_fonts(self) -> List[AssetName]:
        """Font assets that could not be resolved."""
        return [name for name in FONT_ASSETS if not self.get(name)]


# Template Models
class RenderData(BaseModel):
    """Everything the card displays, assembled once per request."""
    model_config = ConfigDict(frozen=True)

    stats: SystemStats
    quote_text: str = Field(..., description="Hitokoto quote text")
    date_text: str = Field(..., description="Local date, YYYY/M/D")
    time_text: str = Field(..., description="Local date and time, 24h clock")
    timestamp_millis: int = Field(..., description="Unix timestamp in milliseconds")
    lunar_text: str = Field(..., description="Lunar calendar date")
    mood_and_greeting: str = Field(..., description="Weekday mood and greeting")
    content_hash: str = Field(..., pattern=r"^[0-9A-F]{16}$", description="Render fingerprint")


# Configuration Models
class RenderConfig(BaseModel):
    """Resolved user options for one card invocation."""
    model_config = ConfigDict(frozen=True)

    render_mode: RenderMode = RenderMode.DOM
    footer_text: str = "Powered By 狼狼"
    footer_layout: FooterLayout = FooterLayout.CENTER
    feedback_only: bool = False
    background_credit: Optional[str] = None

    # Asset overrides
    background_image: Optional[Path] = None
    font_display: Optional[Path] = None
    font_body: Optional[Path] = None
    font_heading: Optional[Path] = None

    weekend_quotes: List[str] = Field(default_factory=list)
    hitokoto_types: FrozenSet[str] = Field(default_factory=lambda: frozenset({"a"}))

    @field_validator("hitokoto_types")
    @classmethod
    def validate_hitokoto_types(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        """Reject category codes the quote service does not know."""
        unknown = sorted(set(v) - set(HITOKOTO_CATEGORIES))
        if unknown:
            raise ValueError(f"Unknown hitokoto categories: {unknown}")
        return v

    def override_for(self, name: AssetName) -> Optional[Path]:
        """User supplied path for a logical asset."""
        if name is AssetName.BACKGROUND:
            return self.background_image
        return getattr(self, name.value)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "RenderConfig":
        """Build the default options from application settings."""
        return cls(
            render_mode=RenderMode(settings.render_mode),
            footer_text=settings.footer_text,
            footer_layout=FooterLayout(settings.footer_layout),
            background_credit=settings.background_credit,
            background_image=settings.background_image,
            font_display=settings.font_display,
            font_body=settings.font_body,
            font_heading=settings.font_heading,
            weekend_quotes=list(settings.weekend_quotes),
            hitokoto_types=frozenset(settings.hitokoto_types),
        )


class CardCommandOptions(BaseModel):
    """Per-invocation overrides received from the command layer."""
    render_mode: Optional[RenderMode] = Field(None, description="Backend override")
    feedback_only: Optional[bool] = Field(None, description="Reply with text instead of an image")


# Rendering Models
class PNGResult(BaseModel):
    """Result of PNG generation."""
    png_data: bytes = Field(..., description="PNG binary data", exclude=True)
    width: int = Field(..., description="Image width")
    height: int = Field(..., description="Image height")
    file_size: int = Field(..., description="File size in bytes")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Generation metadata")


class RenderResult(BaseModel):
    """Outcome of a backend run: an image or a user facing error."""
    success: bool = Field(..., description="Whether rendering succeeded")
    result: Optional[PNGResult] = Field(None, description="Rendered image")
    error: Optional[str] = Field(None, description="User facing error message")

    @classmethod
    def ok(cls, result: PNGResult) -> "RenderResult":
        return cls(success=True, result=result)

    @classmethod
    def failed(cls, error: str) -> "RenderResult":
        return cls(success=False, error=error)


class CardReply(BaseModel):
    """Reply handed back to the host transport."""
    text: Optional[str] = Field(None, description="Plain text reply")
    image: Optional[bytes] = Field(None, description="PNG image payload", exclude=True)
    mime_type: str = Field("image/png", description="Image MIME type")

    @property
    def is_image(self) -> bool:
        return self.image is not None
