"""Deletes local copies of objects that have been safely duplicated to remote."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from object_tier.manipulators.candidates import CandidateSelector, delete_candidates_stmt
from object_tier.manipulators.executor import TimeBoxedExecutor, reconcile_location
from object_tier.models.enums import ManipulatorKind, ObjectLocation
from object_tier.reporting import RunLogger, RunStats
from object_tier.storage.filesystem import ObjectFileSystem
from object_tier.store import Candidate, LocationStore

if TYPE_CHECKING:
    from object_tier.config import Settings

logger = logging.getLogger(__name__)


class Deleter:
    """DUPLICATED → REMOTE once the consistency delay has passed.

    Does nothing at all while ``delete_local`` is off: no query, no writes.
    """

    kind = ManipulatorKind.DELETER

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
        self._consistency_delay = settings.consistency_delay
        self._delete_local = settings.delete_local
        self._clock = clock
        self._reporter = reporter or RunLogger("delete")
        self._selector = CandidateSelector(store, self._reporter)
        self._executor = TimeBoxedExecutor(store, self._reporter, clock=clock)

    async def get_candidates(self) -> list[Candidate]:
        if not self._delete_local:
            logger.info("[delete] delete_local disabled, not running query")
            return []

        now = datetime.fromtimestamp(self._clock(), UTC)
        return await self._selector.select(
            delete_candidates_stmt(self._consistency_delay, now=now)
        )

    async def execute(self, candidates: list[Candidate], deadline: float) -> RunStats:
        if not self._delete_local:
            logger.info("[delete] delete_local disabled, not deleting")
            return self._reporter.flush_summary()

        return await self._executor.run(
            candidates, deadline, self._delete, expected=ObjectLocation.DUPLICATED
        )

    async def _delete(self, candidate: Candidate) -> ObjectLocation:
        success = await asyncio.to_thread(self._filesystem.delete_local, candidate.contenthash)
        return await reconcile_location(
            self._filesystem,
            candidate.contenthash,
            success=success,
            nominal=ObjectLocation.REMOTE,
        )
