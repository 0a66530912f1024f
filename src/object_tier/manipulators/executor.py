"""Time-boxed transition loop shared by all manipulators.

For each candidate, in order:
1. Stop if the deadline has passed (the rest wait for the next run)
2. Run the transition (adapter calls happen in a worker thread)
3. Reconcile: success means the nominal location, failure means probe
4. Compare-and-set the reconciled location into the store
5. Count the object and its bytes

A transition that returns None leaves the record alone.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime

from object_tier.models.enums import ObjectLocation
from object_tier.reporting import RunLogger, RunStats
from object_tier.storage.filesystem import ObjectFileSystem
from object_tier.store import Candidate, LocationStore

logger = logging.getLogger(__name__)

Transition = Callable[[Candidate], Awaitable[ObjectLocation | None]]


async def reconcile_location(
    filesystem: ObjectFileSystem,
    contenthash: str,
    *,
    success: bool,
    nominal: ObjectLocation,
) -> ObjectLocation:
    """Turn an advisory success flag into the location to record.

    A reported success is trusted. A failure is not taken to mean nothing
    happened: the adapter is asked where the object actually is.
    """
    if success:
        return nominal
    location = await asyncio.to_thread(filesystem.probe_actual_location, contenthash)
    logger.info("[RECONCILE] %s probed as %s after failed transition", contenthash, location.value)
    return location


class TimeBoxedExecutor:
    """Applies one transition to candidates until they run out or time does."""

    def __init__(
        self,
        store: LocationStore,
        reporter: RunLogger,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._reporter = reporter
        self._clock = clock

    async def run(
        self,
        candidates: list[Candidate],
        deadline: float,
        transition: Transition,
        *,
        expected: ObjectLocation,
    ) -> RunStats:
        """Process candidates sequentially.

        Args:
            candidates: Output of a candidate selector.
            deadline: Epoch seconds; checked before each candidate only, an
                in-flight transition is allowed to finish.
            transition: Returns the reconciled location, or None to skip the write.
            expected: Location every candidate was selected in; used for
                the compare-and-set.

        Returns:
            RunStats for this run.
        """
        self._reporter.start_timing()

        for index, candidate in enumerate(candidates):
            started = self._clock()
            if started >= deadline:
                logger.info(
                    "[%s] deadline reached, %d candidates left for the next run",
                    self._reporter.action, len(candidates) - index,
                )
                break

            location = await transition(candidate)
            if location is not None:
                updated = await self._store.update_location(
                    candidate.contenthash, location, expected=expected,
                    now=datetime.fromtimestamp(started, UTC),
                )
                if not updated:
                    self._reporter.record_conflict()

            self._reporter.record_transition(candidate.filesize)

        self._reporter.end_timing()
        return self._reporter.flush_summary()
