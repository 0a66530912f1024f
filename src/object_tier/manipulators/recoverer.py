"""Recovers objects stuck in ERROR once their real location can be determined."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from object_tier.manipulators.candidates import CandidateSelector, recover_candidates_stmt
from object_tier.manipulators.executor import TimeBoxedExecutor
from object_tier.models.enums import ManipulatorKind, ObjectLocation
from object_tier.reporting import RunLogger, RunStats
from object_tier.storage.filesystem import ObjectFileSystem
from object_tier.store import Candidate, LocationStore

if TYPE_CHECKING:
    from object_tier.config import Settings


class Recoverer:
    """ERROR → whatever the probe finds.

    Never calls a mutating adapter operation and never writes ERROR;
    objects the probe still cannot place stay as they are for the next run.
    """

    kind = ManipulatorKind.RECOVERER

    def __init__(
        self,
        store: LocationStore,
        filesystem: ObjectFileSystem,
        settings: Settings | None = None,
        *,
        reporter: RunLogger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._filesystem = filesystem
        self._reporter = reporter or RunLogger("recover")
        self._selector = CandidateSelector(store, self._reporter)
        self._executor = TimeBoxedExecutor(store, self._reporter, clock=clock)

    async def get_candidates(self) -> list[Candidate]:
        return await self._selector.select(recover_candidates_stmt())

    async def execute(self, candidates: list[Candidate], deadline: float) -> RunStats:
        return await self._executor.run(
            candidates, deadline, self._recover, expected=ObjectLocation.ERROR
        )

    async def _recover(self, candidate: Candidate) -> ObjectLocation | None:
        location = await asyncio.to_thread(
            self._filesystem.probe_actual_location, candidate.contenthash
        )
        if location == ObjectLocation.ERROR:
            return None
        return location
