"""
Asset Resolver
==============

Resolve the card background and fonts to bytes. User overrides win, then the
bundled asset directories are searched in a fixed order:

1. the user supplied path
2. ``assets/`` one level above this module (installed package data)
3. ``assets/`` two levels above this module (source checkout)
4. ``assets/`` beside this module

Nothing is cached; each call resolves from scratch.
"""

from pathlib import Path
from typing import List, Optional, Union

from hcrm.config.logging import get_logger
from hcrm.core.exceptions import AssetError
from hcrm.models.schemas import AssetName, CardAssets, RenderConfig

logger = get_logger(__name__)

PathLike = Union[str, Path]


def candidate_paths(
    name: AssetName, override: Optional[PathLike] = None, base_dir: Optional[Path] = None
) -> List[Path]:
    """Ordered list of paths tried for an asset."""
    here = (base_dir or Path(__file__).resolve().parent)
    candidates: List[Path] = []
    if override:
        candidates.append(Path(override).expanduser())
    candidates.extend(
        [
            here.parent / "assets" / name.filename,
            here.parent.parent / "assets" / name.filename,
            here / "assets" / name.filename,
        ]
    )
    return candidates


def resolve(
    name: AssetName, override: Optional[PathLike] = None, base_dir: Optional[Path] = None
) -> Optional[bytes]:
    """
    Resolve a logical asset to its bytes.

    Args:
        name: Logical asset name
        override: User supplied path, used when it exists
        base_dir: Directory the bundled search starts from, this module's by default

    Returns:
        Asset bytes, or None when no candidate exists

    Raises:
        AssetError: If an existing candidate cannot be read
    """
    candidates = candidate_paths(name, override, base_dir)
    if override and not candidates[0].is_file():
        logger.warning("Asset override not found", asset=name.value, path=str(override))

    for path in candidates:
        if path.is_file():
            try:
                data = path.read_bytes()
            except OSError as e:
                raise AssetError(f"Cannot read asset {path}: {e}")
            logger.debug("Resolved asset", asset=name.value, path=str(path))
            return data

    logger.debug("Asset not found", asset=name.value)
    return None


def resolve_all(config: RenderConfig, base_dir: Optional[Path] = None) -> CardAssets:
    """Resolve every card asset using the overrides in the render config."""
    return CardAssets(
        **{name.value: resolve(name, config.override_for(name), base_dir) for name in AssetName}
    )
