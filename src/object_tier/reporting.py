"""Run timing and counters for manipulator jobs."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def display_size(num_bytes: int) -> str:
    """Format a byte count for humans (1024-based)."""
    size = float(num_bytes)
    for unit in _SIZE_UNITS[:-1]:
        if abs(size) < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} {_SIZE_UNITS[-1]}"


@dataclass
class RunStats:
    """Summary of one manipulator run."""

    action: str
    processed_count: int = 0
    total_bytes: int = 0
    duration: float = 0.0
    """Seconds spent in the last timed section."""

    candidate_count: int = 0
    conflicts: int = 0
    """Location writes skipped because another process changed the record first."""


class RunLogger:
    """Collects timing and counters for one manipulator and logs them.

    Usage:
        reporter = RunLogger("delete")
        reporter.start_timing()
        ...query...
        reporter.end_timing()
        reporter.record_query_result(len(rows))
    """

    def __init__(self, action: str, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.action = action
        self._clock = clock
        self._started: float | None = None
        self._stats = RunStats(action=action)

    @property
    def stats(self) -> RunStats:
        return self._stats

    def start_timing(self) -> None:
        self._started = self._clock()
        self._stats.duration = 0.0

    def end_timing(self) -> None:
        if self._started is None:
            return
        self._stats.duration = self._clock() - self._started
        self._started = None

    def record_query_result(self, count: int) -> None:
        self._stats.candidate_count = count
        logger.info(
            "[%s] candidate query took %.2fs to find %d objects",
            self.action, self._stats.duration, count,
        )

    def record_transition(self, num_bytes: int) -> None:
        self._stats.processed_count += 1
        self._stats.total_bytes += num_bytes

    def record_conflict(self) -> None:
        self._stats.conflicts += 1

    def flush_summary(self) -> RunStats:
        """Log the run summary and hand back the stats.

        Counters are reset so the same logger can time another run.
        """
        stats = self._stats
        logger.info(
            "[%s] processed %d objects, total size: %s in %.2fs (%d conflicts)",
            self.action,
            stats.processed_count,
            display_size(stats.total_bytes),
            stats.duration,
            stats.conflicts,
        )
        self._stats = RunStats(action=self.action)
        return stats
