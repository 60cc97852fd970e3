"""
Test Configuration
==================

Pytest configuration with fixtures shared by the unit tests: test settings,
sample template data, render options and binary assets.
"""

import os

os.environ["HCRM_ENVIRONMENT"] = "testing"
os.environ.setdefault("HCRM_LOG_LEVEL", "DEBUG")

from datetime import datetime
from typing import Generator

import pytest

from hcrm.config.settings import Settings, reload_settings
from hcrm.models.schemas import (
    CardAssets,
    RenderConfig,
    RenderData,
    SystemStats,
)
from tests.utils.helpers import build_test_font, create_test_jpeg, create_test_png
from tests.utils.mocks import FakeHostProbe


@pytest.fixture(autouse=True)
def test_settings() -> Generator[Settings, None, None]:
    """Fresh settings for every test, read from the test environment."""
    settings = reload_settings()
    yield settings
    reload_settings()


@pytest.fixture
def sample_stats() -> SystemStats:
    """Sampled host metrics."""
    return SystemStats(
        cpu_percent="60.0",
        ram_percent="75.0",
        cpu_model="Test CPU @ 3.00GHz",
        os_descriptor="Linux 6.1.0-test",
    )


@pytest.fixture
def monday_morning() -> datetime:
    """2026-10-19 09:30:15, a Monday."""
    return datetime(2026, 10, 19, 9, 30, 15)


@pytest.fixture
def render_data(sample_stats: SystemStats) -> RenderData:
    """Assembled card data."""
    return RenderData(
        stats=sample_stats,
        quote_text="生活明朗，万物可爱。",
        date_text="2026/10/19",
        time_text="2026/10/19 09:30:15",
        timestamp_millis=1792373415000,
        lunar_text="2026丙午年九月初九",
        mood_and_greeting="周一 又是新的开始 · 早上好",
        content_hash="0123456789ABCDEF",
    )


@pytest.fixture
def render_config() -> RenderConfig:
    """Default render options with a small weekend pool."""
    return RenderConfig(weekend_quotes=["睡到自然醒喵", "公园散散步喵"])


@pytest.fixture(scope="session")
def test_font() -> bytes:
    """Minimal TrueType font."""
    return build_test_font()


@pytest.fixture
def full_assets(test_font: bytes) -> CardAssets:
    """All four assets present."""
    return CardAssets(
        background=create_test_jpeg(),
        font_display=test_font,
        font_body=test_font,
        font_heading=test_font,
    )


@pytest.fixture
def test_png() -> bytes:
    """Valid 840x1200 PNG screenshot."""
    return create_test_png(840, 1200)


@pytest.fixture
def fake_probe() -> FakeHostProbe:
    """Host probe with a 40% idle delta and 75% memory use."""
    return FakeHostProbe([(1000, 5000), (1040, 5100)])
