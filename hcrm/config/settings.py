"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Holds the rendering knobs and the default card options.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


DEFAULT_WEEKEND_QUOTES = [
    "睡到自然醒喵",
    "公园散散步喵",
    "煮杯咖啡发呆",
    "陪陪家人放松",
    "享受一顿大餐",
    "听首轻松的歌",
    "晒晒温暖太阳",
    "读本有趣的书",
    "做个美梦也好",
    "约朋友聚一聚",
    "要玩场游戏吗",
    "来饮茶看书喵",
    "整理一下心情",
    "享受独处时光",
    "陪猫玩玩闹闹",
    "玩会游戏放松",
    "陪我聊聊天喵",
]


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="HCRM Status Card", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    # Quote Service Configuration
    hitokoto_url: str = Field(default="https://v1.hitokoto.cn", description="Hitokoto endpoint")
    hitokoto_timeout: float = Field(default=5.0, gt=0, description="Quote request timeout in seconds")
    user_agent: str = Field(
        default="hcrm-status-card/1.0 (+aiohttp)", description="User agent for outbound requests"
    )

    # Metrics Configuration
    metrics_sample_window: float = Field(
        default=0.5, description="Seconds between the two CPU tick snapshots"
    )

    # Browser Configuration
    viewport_width: int = Field(default=600, gt=0, description="Browser viewport width")
    viewport_height: int = Field(default=1000, gt=0, description="Browser viewport height")
    device_scale_factor: float = Field(default=2.0, gt=0, le=4.0, description="Device pixel ratio")
    dom_wait_until: str = Field(
        default="networkidle", description="Playwright load state for set_content"
    )
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")

    # Vector Configuration
    vector_width: int = Field(default=420, gt=0, description="Logical card width for the SVG")
    vector_scale: float = Field(default=2.0, gt=0, description="Raster upscale for the SVG")

    # Image Configuration
    optimize_png: bool = Field(default=False, description="Re-encode PNG output with Pillow")

    # Card Defaults
    render_mode: str = Field(default="dom", description="Default render backend: dom or vector")
    footer_text: str = Field(default="Powered By 狼狼", description="Footer text")
    footer_layout: str = Field(default="center", description="Footer layout: center or split")
    background_credit: Optional[str] = Field(default=None, description="Background attribution")
    background_image: Optional[Path] = Field(default=None, description="Background image path")
    font_display: Optional[Path] = Field(default=None, description="Anurati font path")
    font_body: Optional[Path] = Field(default=None, description="ChiMing font path")
    font_heading: Optional[Path] = Field(default=None, description="Zcool font path")
    weekend_quotes: List[str] = Field(
        default_factory=lambda: list(DEFAULT_WEEKEND_QUOTES), description="Weekend phrase pool"
    )
    hitokoto_types: List[str] = Field(default=["a"], description="Hitokoto category codes")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("hitokoto_timeout")
    @classmethod
    def validate_hitokoto_timeout(cls, v: float) -> float:
        """Keep the quote request bounded."""
        if v > 5.0:
            raise ValueError("Hitokoto timeout must not exceed 5 seconds")
        return v

    @field_validator("metrics_sample_window")
    @classmethod
    def validate_sample_window(cls, v: float) -> float:
        """Enforce the minimum CPU sampling window."""
        return max(v, 0.5)

    @field_validator("dom_wait_until")
    @classmethod
    def validate_wait_until(cls, v: str) -> str:
        """Validate the Playwright load state."""
        allowed = {"load", "domcontentloaded", "networkidle", "commit"}
        if v not in allowed:
            raise ValueError(f"dom_wait_until must be one of: {allowed}")
        return v

    @field_validator("weekend_quotes", "hitokoto_types", mode="before")
    @classmethod
    def parse_string_list(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse lists from JSON or comma-separated strings."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="HCRM_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
