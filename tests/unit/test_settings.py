"""
Unit Tests for Settings
=======================

Environment overrides, validators and the default render options.
"""

import pytest
from pydantic import ValidationError

from hcrm.config.settings import DEFAULT_WEEKEND_QUOTES, Settings, get_settings, reload_settings
from hcrm.models.schemas import AssetName, FooterLayout, RenderConfig, RenderMode


class TestSettings:
    """Test settings loading and validation."""

    def test_test_environment(self, test_settings):
        assert test_settings.environment == "testing"
        assert get_settings() is test_settings

    def test_defaults(self):
        settings = Settings()

        assert settings.hitokoto_url == "https://v1.hitokoto.cn"
        assert settings.hitokoto_timeout <= 5.0
        assert settings.metrics_sample_window == 0.5
        assert settings.device_scale_factor == 2.0
        assert settings.vector_width == 420
        assert settings.weekend_quotes == DEFAULT_WEEKEND_QUOTES

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("HCRM_FOOTER_TEXT", "Powered By 测试")
        monkeypatch.setenv("HCRM_RENDER_MODE", "vector")

        settings = reload_settings()

        assert settings.footer_text == "Powered By 测试"
        assert settings.render_mode == "vector"

    def test_list_from_json_env(self, monkeypatch):
        monkeypatch.setenv("HCRM_HITOKOTO_TYPES", '["d", "i"]')
        assert reload_settings().hitokoto_types == ["d", "i"]

    def test_list_from_comma_separated_string(self):
        settings = Settings(weekend_quotes="喝茶, 看书 ,", hitokoto_types="a,k")

        assert settings.weekend_quotes == ["喝茶", "看书"]
        assert settings.hitokoto_types == ["a", "k"]

    def test_sample_window_floor(self):
        assert Settings(metrics_sample_window=0.1).metrics_sample_window == 0.5
        assert Settings(metrics_sample_window=2.0).metrics_sample_window == 2.0

    def test_timeout_is_bounded(self):
        with pytest.raises(ValidationError):
            Settings(hitokoto_timeout=10)

    def test_log_level_normalised(self):
        assert Settings(log_level="warning").log_level == "WARNING"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("environment", "staging"),
            ("log_level", "VERBOSE"),
            ("dom_wait_until", "idle"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})


class TestRenderConfig:
    """Test render options."""

    def test_from_settings(self, tmp_path):
        settings = Settings(
            render_mode="vector",
            footer_layout="split",
            background_credit="Photo",
            background_image=tmp_path / "bg.jpg",
            font_body=tmp_path / "body.otf",
            hitokoto_types=["d", "k"],
        )

        config = RenderConfig.from_settings(settings)

        assert config.render_mode is RenderMode.VECTOR
        assert config.footer_layout is FooterLayout.SPLIT
        assert config.background_credit == "Photo"
        assert config.background_image == tmp_path / "bg.jpg"
        assert config.font_body == tmp_path / "body.otf"
        assert config.font_display is None
        assert config.weekend_quotes == DEFAULT_WEEKEND_QUOTES
        assert config.hitokoto_types == frozenset({"d", "k"})
        assert config.feedback_only is False

    def test_unknown_render_mode(self):
        with pytest.raises(ValueError):
            RenderConfig.from_settings(Settings(render_mode="raster"))

    def test_unknown_hitokoto_category(self):
        with pytest.raises(ValidationError, match="Unknown hitokoto categories"):
            RenderConfig(hitokoto_types=frozenset({"a", "z"}))

    def test_override_for(self, tmp_path):
        config = RenderConfig(background_image=tmp_path / "bg.jpg", font_heading=tmp_path / "h.ttf")

        assert config.override_for(AssetName.BACKGROUND) == tmp_path / "bg.jpg"
        assert config.override_for(AssetName.FONT_HEADING) == tmp_path / "h.ttf"
        assert config.override_for(AssetName.FONT_BODY) is None

    def test_frozen(self):
        config = RenderConfig()
        with pytest.raises(ValidationError):
            config.footer_text = "changed"
