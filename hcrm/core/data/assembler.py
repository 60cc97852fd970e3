"""
Template Data Assembler
=======================

Pure composition of the card's template data: clock, lunar date, weekday
mood, greeting and the content fingerprint.
"""

import hashlib
import random
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from lunar_python import Solar

from hcrm.config.logging import get_logger
from hcrm.models.schemas import RenderData, SystemStats

logger = get_logger(__name__)

LUNAR_FALLBACK = "农历获取失败"
NEUTRAL_MOOD = "平平无奇的工作日"

LunarFormatter = Callable[[datetime], str]

# datetime.weekday(): Monday is 0
FIXED_MOODS: Dict[int, str] = {
    0: "周一 又是新的开始",
    4: "周五 马上就放假啦",
}
WEEKEND_LABELS: Dict[int, str] = {
    5: "周六",
    6: "周日",
}

# Half-open [start, end) hour windows covering 0-23
GREETING_BUCKETS: Tuple[Tuple[int, int, str], ...] = (
    (0, 6, "凌晨好"),
    (6, 11, "早上好"),
    (11, 13, "中午好"),
    (13, 18, "下午好"),
    (18, 24, "晚上好"),
)


def chinese_lunar_date(moment: datetime) -> str:
    """Format a date in the Chinese calendar, e.g. ``2026丙午年九月初九``."""
    lunar = Solar.fromYmd(moment.year, moment.month, moment.day).getLunar()
    return (
        f"{lunar.getYear()}{lunar.getYearInGanZhi()}年"
        f"{lunar.getMonthInChinese()}月{lunar.getDayInChinese()}"
    )


def lunar_text(moment: datetime, formatter: Optional[LunarFormatter] = None) -> str:
    """Lunar date text, or a fixed fallback when formatting fails."""
    formatter = formatter or chinese_lunar_date
    try:
        return formatter(moment)
    except Exception as e:
        logger.warning("Lunar date formatting failed", error=str(e))
        return LUNAR_FALLBACK


def weekday_mood(
    weekday: int, weekend_quotes: Sequence[str], rng: Optional[random.Random] = None
) -> str:
    """Mood line for a weekday, re-rolling the weekend phrase on every call."""
    if weekday in FIXED_MOODS:
        return FIXED_MOODS[weekday]
    if weekday in WEEKEND_LABELS:
        label = WEEKEND_LABELS[weekday]
        if not weekend_quotes:
            return label
        pick = (rng or random).choice(list(weekend_quotes))
        return f"{label} {pick}"
    return NEUTRAL_MOOD


def greeting_for_hour(hour: int) -> str:
    """Greeting for an hour of the day."""
    for start, end, greeting in GREETING_BUCKETS:
        if start <= hour < end:
            return greeting
    raise ValueError(f"Hour out of range: {hour}")


def content_hash(timestamp_millis: int, mood_and_greeting: str) -> str:
    """16 character uppercase fingerprint of the render."""
    digest = hashlib.md5(f"{timestamp_millis}{mood_and_greeting}".encode("utf-8")).hexdigest()
    return digest[:16].upper()


def format_date(moment: datetime) -> str:
    return f"{moment.year}/{moment.month}/{moment.day}"


def format_time(moment: datetime) -> str:
    return f"{format_date(moment)} {moment:%H:%M:%S}"


def assemble(
    stats: SystemStats,
    quote_text: str,
    weekend_quotes: List[str],
    now: Optional[datetime] = None,
    lunar_formatter: Optional[LunarFormatter] = None,
    rng: Optional[random.Random] = None,
) -> RenderData:
    """
    Assemble the card template data.

    Args:
        stats: Sampled host metrics
        quote_text: Quote to display
        weekend_quotes: Phrase pool for Saturday and Sunday
        now: Current local time, defaults to the wall clock
        lunar_formatter: Lunar date formatter
        rng: Random source for the weekend phrase

    Returns:
        Immutable RenderData
    """
    now = now or datetime.now()
    timestamp_millis = int(now.timestamp() * 1000)

    mood_and_greeting = (
        f"{weekday_mood(now.weekday(), weekend_quotes, rng)} · {greeting_for_hour(now.hour)}"
    )

    return RenderData(
        stats=stats,
        quote_text=quote_text,
        date_text=format_date(now),
        time_text=format_time(now),
        timestamp_millis=timestamp_millis,
        lunar_text=lunar_text(now, lunar_formatter),
        mood_and_greeting=mood_and_greeting,
        content_hash=content_hash(timestamp_millis, mood_and_greeting),
    )
