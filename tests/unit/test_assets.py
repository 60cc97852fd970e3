"""
Unit Tests for Asset Resolver
=============================

Override precedence and the bundled directory search order.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from hcrm.core.assets import candidate_paths, resolve, resolve_all
from hcrm.core.exceptions import AssetError
from hcrm.models.schemas import AssetName, CardAssets, RenderConfig


@pytest.fixture
def layout(tmp_path: Path) -> Path:
    """Directory tree mimicking ``<root>/pkg/core`` with three asset dirs."""
    module_dir = tmp_path / "root" / "pkg" / "core"
    module_dir.mkdir(parents=True)
    for directory in (
        tmp_path / "root" / "pkg" / "assets",
        tmp_path / "root" / "assets",
        module_dir / "assets",
    ):
        directory.mkdir(parents=True)
    return module_dir


def write_asset(directory: Path, name: AssetName, content: bytes) -> Path:
    path = directory / name.filename
    path.write_bytes(content)
    return path


class TestCandidatePaths:
    """Test search order."""

    def test_order_without_override(self, layout):
        paths = candidate_paths(AssetName.FONT_BODY, base_dir=layout)
        filename = AssetName.FONT_BODY.filename
        assert paths == [
            layout.parent / "assets" / filename,
            layout.parent.parent / "assets" / filename,
            layout / "assets" / filename,
        ]

    def test_override_comes_first(self, layout, tmp_path):
        override = tmp_path / "custom.otf"
        paths = candidate_paths(AssetName.FONT_BODY, override, base_dir=layout)
        assert paths[0] == override
        assert len(paths) == 4

    def test_default_base_is_the_package(self):
        paths = candidate_paths(AssetName.BACKGROUND)
        assert paths[0].parent.name == "assets"
        assert paths[0].parent.parent.name == "hcrm"


class TestResolve:
    """Test resolving bytes."""

    @pytest.mark.parametrize("name", list(AssetName))
    def test_override_wins(self, layout, tmp_path, name):
        write_asset(layout.parent / "assets", name, b"bundled")
        override = tmp_path / f"override-{name.value}"
        override.write_bytes(b"override")

        assert resolve(name, override, base_dir=layout) == b"override"

    def test_first_bundled_directory_wins(self, layout):
        name = AssetName.BACKGROUND
        write_asset(layout.parent / "assets", name, b"package")
        write_asset(layout.parent.parent / "assets", name, b"checkout")
        write_asset(layout / "assets", name, b"local")

        assert resolve(name, base_dir=layout) == b"package"

    def test_second_bundled_directory(self, layout):
        name = AssetName.FONT_HEADING
        write_asset(layout.parent.parent / "assets", name, b"checkout")
        write_asset(layout / "assets", name, b"local")

        assert resolve(name, base_dir=layout) == b"checkout"

    def test_third_bundled_directory(self, layout):
        name = AssetName.FONT_DISPLAY
        write_asset(layout / "assets", name, b"local")

        assert resolve(name, base_dir=layout) == b"local"

    def test_missing_override_falls_back(self, layout, tmp_path):
        name = AssetName.FONT_BODY
        write_asset(layout.parent / "assets", name, b"bundled")

        assert resolve(name, tmp_path / "nope.otf", base_dir=layout) == b"bundled"

    def test_missing_override_is_logged_before_fallback(self, layout, tmp_path):
        name = AssetName.FONT_BODY
        write_asset(layout.parent / "assets", name, b"bundled")

        with patch("hcrm.core.assets.logger") as mock_logger:
            assert resolve(name, tmp_path / "nope.otf", base_dir=layout) == b"bundled"

        mock_logger.warning.assert_called_once_with(
            "Asset override not found", asset=name.value, path=str(tmp_path / "nope.otf")
        )

    def test_existing_override_is_not_logged(self, layout, tmp_path):
        override = tmp_path / "custom.otf"
        override.write_bytes(b"override")

        with patch("hcrm.core.assets.logger") as mock_logger:
            resolve(AssetName.FONT_BODY, override, base_dir=layout)

        mock_logger.warning.assert_not_called()

    def test_directory_override_is_ignored(self, layout, tmp_path):
        name = AssetName.FONT_BODY
        write_asset(layout / "assets", name, b"bundled")

        assert resolve(name, tmp_path, base_dir=layout) == b"bundled"

    def test_nothing_found(self, layout):
        assert resolve(AssetName.BACKGROUND, base_dir=layout) is None

    def test_unreadable_asset(self, layout):
        name = AssetName.BACKGROUND
        write_asset(layout / "assets", name, b"locked")

        with patch.object(Path, "read_bytes", side_effect=PermissionError("denied")):
            with pytest.raises(AssetError, match="denied"):
                resolve(name, base_dir=layout)

    def test_nothing_cached(self, layout):
        name = AssetName.BACKGROUND
        path = write_asset(layout / "assets", name, b"first")
        assert resolve(name, base_dir=layout) == b"first"

        path.write_bytes(b"second")
        assert resolve(name, base_dir=layout) == b"second"


class TestResolveAll:
    """Test resolving a whole asset set."""

    def test_uses_config_overrides(self, layout, tmp_path):
        background = tmp_path / "bg.png"
        background.write_bytes(b"bg")
        write_asset(layout.parent / "assets", AssetName.FONT_DISPLAY, b"display")

        config = RenderConfig(background_image=background)
        assets = resolve_all(config, base_dir=layout)

        assert isinstance(assets, CardAssets)
        assert assets.background == b"bg"
        assert assets.font_display == b"display"
        assert assets.font_body is None
        assert assets.font_heading is None
        assert assets.missing_fonts() == [AssetName.FONT_BODY, AssetName.FONT_HEADING]

    def test_all_present(self, layout):
        for name in AssetName:
            write_asset(layout / "assets", name, name.value.encode())

        assets = resolve_all(RenderConfig(), base_dir=layout)

        assert assets.missing_fonts() == []
        for name in AssetName:
            assert assets.get(name) == name.value.encode()
