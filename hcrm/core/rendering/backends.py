"""
Render Backends
===============

Registry of rendering backends keyed by RenderMode. Both backends share the
``render(data, assets, config) -> RenderResult`` contract.
"""

from typing import Awaitable, Callable, Dict, Optional

from hcrm.core.rendering.png_generator import DomScreenshotRenderer, PageProvider
from hcrm.core.rendering.vector_renderer import VectorRenderer
from hcrm.models.schemas import CardAssets, RenderConfig, RenderData, RenderMode, RenderResult

RenderFunction = Callable[[RenderData, CardAssets, RenderConfig], Awaitable[RenderResult]]
BackendFactory = Callable[[Optional[PageProvider]], RenderFunction]

_BACKENDS: Dict[RenderMode, BackendFactory] = {
    RenderMode.DOM: lambda page_provider: DomScreenshotRenderer(page_provider).render,
    RenderMode.VECTOR: lambda page_provider: VectorRenderer().render,
}


def select_render_mode(config: RenderConfig, override: Optional[RenderMode] = None) -> RenderMode:
    """An explicit request override beats the configured default."""
    return override if override is not None else config.render_mode


def get_backend(mode: RenderMode, page_provider: Optional[PageProvider] = None) -> RenderFunction:
    """
    Create the render function for a mode.

    Raises:
        ValueError: If the mode has no registered backend
    """
    try:
        factory = _BACKENDS[RenderMode(mode)]
    except (KeyError, ValueError):
        raise ValueError(f"Unsupported render mode: {mode}")
    return factory(page_provider)


async def render_card(
    mode: RenderMode,
    data: RenderData,
    assets: CardAssets,
    config: RenderConfig,
    page_provider: Optional[PageProvider] = None,
) -> RenderResult:
    """Render the card with the backend selected by ``mode``."""
    return await get_backend(mode, page_provider)(data, assets, config)
