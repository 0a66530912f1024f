"""Pulls small remote-only objects back into local storage."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from object_tier.manipulators.candidates import CandidateSelector, pull_candidates_stmt
from object_tier.manipulators.executor import TimeBoxedExecutor, reconcile_location
from object_tier.models.enums import ManipulatorKind, ObjectLocation
from object_tier.reporting import RunLogger, RunStats
from object_tier.storage.filesystem import ObjectFileSystem
from object_tier.store import Candidate, LocationStore

if TYPE_CHECKING:
    from object_tier.config import Settings


class Puller:
    """REMOTE → DUPLICATED for objects no larger than ``size_threshold`` bytes."""

    kind = ManipulatorKind.PULLER

    def __init__(
        self,
        store: LocationStore,
        filesystem: ObjectFileSystem,
        settings: Settings,
        *,
        reporter: RunLogger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._filesystem = filesystem
        self._size_threshold = settings.size_threshold
        self._reporter = reporter or RunLogger("pull")
        self._selector = CandidateSelector(store, self._reporter)
        self._executor = TimeBoxedExecutor(store, self._reporter, clock=clock)

    async def get_candidates(self) -> list[Candidate]:
        return await self._selector.select(pull_candidates_stmt(self._size_threshold))

    async def execute(self, candidates: list[Candidate], deadline: float) -> RunStats:
        return await self._executor.run(
            candidates, deadline, self._pull, expected=ObjectLocation.REMOTE
        )

    async def _pull(self, candidate: Candidate) -> ObjectLocation:
        success = await asyncio.to_thread(
            self._filesystem.copy_remote_to_local, candidate.contenthash
        )
        return await reconcile_location(
            self._filesystem,
            candidate.contenthash,
            success=success,
            nominal=ObjectLocation.DUPLICATED,
        )
