"""
Status Card Command
===================

Entry point used by the command layer. Runs the pipeline strictly in order:
sample metrics, fetch the quote, assemble the data, then render. Every
terminal failure becomes a plain text reply; nothing is retried.
"""

from datetime import datetime
from typing import Optional
import time

import aiohttp

from hcrm.config.logging import get_logger
from hcrm.core.assets import resolve_all
from hcrm.core.data.assembler import assemble
from hcrm.core.data.metrics import HostProbe, sample
from hcrm.core.data.quotes import fetch_quote
from hcrm.core.rendering.backends import render_card, select_render_mode
from hcrm.core.rendering.png_generator import PageProvider
from hcrm.models.schemas import CardCommandOptions, CardReply, RenderConfig, RenderData

logger = get_logger(__name__)

RENDER_FAILED_PREFIX = "生成失败："


def format_feedback(data: RenderData) -> str:
    """Plain text version of the card."""
    stats = data.stats
    return "\n".join(
        [
            "HCRM 状态反馈",
            f"时间：{data.time_text}",
            f"农历：{data.lunar_text}",
            data.mood_and_greeting,
            f"CPU：{stats.cpu_percent}%（{stats.cpu_model}）",
            f"RAM：{stats.ram_percent}%",
            f"OS：{stats.os_descriptor}",
            f"“ {data.quote_text} ”",
            f"Hash：{data.content_hash}",
        ]
    )


async def generate_status_card(
    config: RenderConfig,
    options: Optional[CardCommandOptions] = None,
    *,
    probe: Optional[HostProbe] = None,
    page_provider: Optional[PageProvider] = None,
    session: Optional[aiohttp.ClientSession] = None,
    now: Optional[datetime] = None,
) -> CardReply:
    """
    Produce the status card reply.

    Args:
        config: Resolved user options
        options: Per-invocation overrides
        probe: Host counter source for the metrics sampler
        page_provider: Browser page source for the DOM backend
        session: aiohttp session for the quote request
        now: Clock override for the template data

    Returns:
        CardReply carrying either the PNG image or a text message
    """
    options = options or CardCommandOptions()
    mode = select_render_mode(config, options.render_mode)
    feedback_only = (
        options.feedback_only if options.feedback_only is not None else config.feedback_only
    )
    request_logger = logger.bind(render_mode=mode.value, feedback_only=feedback_only)
    started = time.perf_counter()

    try:
        stats = await sample(probe)
        quote = await fetch_quote(config.hitokoto_types, session=session)
        data = assemble(stats, quote, config.weekend_quotes, now=now)

        if feedback_only:
            request_logger.info("Status feedback generated", content_hash=data.content_hash)
            return CardReply(text=format_feedback(data))

        assets = resolve_all(config)
        outcome = await render_card(mode, data, assets, config, page_provider=page_provider)
    except Exception as e:
        request_logger.error("Status card generation failed", error=str(e), exc_info=True)
        return CardReply(text=f"{RENDER_FAILED_PREFIX}{e}")

    if not outcome.success or outcome.result is None:
        request_logger.warning("Status card not rendered", error=outcome.error)
        return CardReply(text=outcome.error or RENDER_FAILED_PREFIX.rstrip("："))

    request_logger.info(
        "Status card generated",
        content_hash=data.content_hash,
        file_size=outcome.result.file_size,
        elapsed=round(time.perf_counter() - started, 3),
    )
    return CardReply(image=outcome.result.png_data, mime_type="image/png")
