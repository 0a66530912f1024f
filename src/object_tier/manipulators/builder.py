"""Build and run manipulators by kind."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from object_tier.manipulators.base import Manipulator
from object_tier.manipulators.deleter import Deleter
from object_tier.manipulators.puller import Puller
from object_tier.manipulators.recoverer import Recoverer
from object_tier.models.enums import ManipulatorKind
from object_tier.reporting import RunStats
from object_tier.storage.filesystem import ObjectFileSystem
from object_tier.store import LocationStore

if TYPE_CHECKING:
    from object_tier.config import Settings

MANIPULATORS: dict[ManipulatorKind, type[Deleter] | type[Puller] | type[Recoverer]] = {
    ManipulatorKind.DELETER: Deleter,
    ManipulatorKind.PULLER: Puller,
    ManipulatorKind.RECOVERER: Recoverer,
}


def build_manipulator(
    kind: ManipulatorKind,
    store: LocationStore,
    filesystem: ObjectFileSystem,
    settings: Settings,
    *,
    clock: Callable[[], float] = time.time,
) -> Manipulator:
    return MANIPULATORS[kind](store, filesystem, settings, clock=clock)


async def run_manipulator(
    kind: ManipulatorKind,
    store: LocationStore,
    filesystem: ObjectFileSystem,
    settings: Settings,
    *,
    clock: Callable[[], float] = time.time,
) -> RunStats:
    """Select candidates and process them before ``max_task_runtime`` runs out.

    The deadline starts counting before the candidate query, so a slow
    query eats into the time left for transitions.
    """
    deadline = clock() + settings.max_task_runtime
    manipulator = build_manipulator(kind, store, filesystem, settings, clock=clock)
    candidates = await manipulator.get_candidates()
    return await manipulator.execute(candidates, deadline)
