"""
Metrics Sampler
===============

CPU utilisation from two time-spaced tick snapshots and instantaneous memory
usage. Host access goes through a small probe interface so tests can feed
deterministic counters.
"""

import asyncio
import platform
from pathlib import Path
from typing import Optional, Protocol, Tuple

import psutil

from hcrm.config.logging import get_logger
from hcrm.config.settings import get_settings
from hcrm.models.schemas import MetricsSnapshot, SystemStats

logger = get_logger(__name__)

MIN_SAMPLE_WINDOW = 0.5

# psutil reports CPU times in seconds; the kernel counts in USER_HZ ticks
TICKS_PER_SECOND = 100

# Guest time is already accounted in user/nice on Linux
_DOUBLE_COUNTED = ("guest", "guest_nice")


class HostProbe(Protocol):
    """Read-only access to host counters."""

    def sample_cpu_ticks(self) -> MetricsSnapshot: ...

    def memory_totals(self) -> Tuple[int, int]: ...

    def os_descriptor(self) -> str: ...


def _read_cpu_model() -> str:
    cpuinfo = Path("/proc/cpuinfo")
    if cpuinfo.exists():
        try:
            for line in cpuinfo.read_text(encoding="utf-8", errors="ignore").splitlines():
                if line.lower().startswith("model name"):
                    return line.split(":", 1)[1].strip()
        except OSError:
            pass
    return platform.processor() or platform.machine() or "Unknown CPU"


class PsutilHostProbe:
    """Host probe backed by psutil."""

    def __init__(self) -> None:
        self._cpu_model: Optional[str] = None

    @property
    def cpu_model(self) -> str:
        if self._cpu_model is None:
            self._cpu_model = _read_cpu_model()
        return self._cpu_model

    def sample_cpu_ticks(self) -> MetricsSnapshot:
        idle = 0.0
        total = 0.0
        for times in psutil.cpu_times(percpu=True):
            fields = times._asdict()
            for name in _DOUBLE_COUNTED:
                fields.pop(name, None)
            total += sum(fields.values())
            idle += fields.get("idle", 0.0)
        return MetricsSnapshot(
            idle_ticks=round(idle * TICKS_PER_SECOND),
            total_ticks=round(total * TICKS_PER_SECOND),
            cpu_model=self.cpu_model,
        )

    def memory_totals(self) -> Tuple[int, int]:
        vm = psutil.virtual_memory()
        return vm.total, vm.available

    def os_descriptor(self) -> str:
        return f"{platform.system()} {platform.release()}"


def _clamp_percent(value: float, metric: str) -> float:
    if value < 0.0 or value > 100.0:
        logger.warning("Percentage out of range, clamping", metric=metric, value=value)
        return min(max(value, 0.0), 100.0)
    return value


def cpu_percent(start: MetricsSnapshot, end: MetricsSnapshot) -> float:
    """CPU utilisation between two snapshots, in [0, 100]."""
    total_diff = end.total_ticks - start.total_ticks
    idle_diff = end.idle_ticks - start.idle_ticks
    if total_diff <= 0:
        logger.warning(
            "CPU tick counters did not advance, reporting idle host",
            total_start=start.total_ticks,
            total_end=end.total_ticks,
        )
        return 0.0
    return _clamp_percent(100.0 - (idle_diff / total_diff) * 100.0, "cpu")


def ram_percent(total: int, free: int) -> float:
    """Memory utilisation, in [0, 100]."""
    if total <= 0:
        logger.warning("Host reported no memory, reporting 0%", total=total)
        return 0.0
    return _clamp_percent((total - free) / total * 100.0, "ram")


async def sample(probe: Optional[HostProbe] = None, window: Optional[float] = None) -> SystemStats:
    """
    Sample host CPU and memory usage.

    Suspends for the full measurement window between the two CPU snapshots.

    Args:
        probe: Host counter source, psutil by default
        window: Seconds between snapshots, never below 0.5

    Returns:
        SystemStats with one-decimal percentages
    """
    probe = probe or PsutilHostProbe()
    if window is None:
        window = get_settings().metrics_sample_window
    window = max(window, MIN_SAMPLE_WINDOW)

    start = probe.sample_cpu_ticks()
    await asyncio.sleep(window)
    end = probe.sample_cpu_ticks()

    total, free = probe.memory_totals()
    stats = SystemStats(
        cpu_percent=f"{cpu_percent(start, end):.1f}",
        ram_percent=f"{ram_percent(total, free):.1f}",
        cpu_model=start.cpu_model,
        os_descriptor=probe.os_descriptor(),
    )

    logger.debug(
        "Sampled host metrics",
        cpu=stats.cpu_percent,
        ram=stats.ram_percent,
        window=window,
    )
    return stats
