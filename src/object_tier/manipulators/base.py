"""Shared contract for manipulators."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from object_tier.models.enums import ManipulatorKind
    from object_tier.reporting import RunStats
    from object_tier.store import Candidate


class Manipulator(Protocol):
    """A time-boxed batch job that moves objects between tiers.

    Implementations pair one candidate policy with one transition. None of
    them raise for a single candidate going wrong; that outcome is written
    as a location (usually ERROR) and left for the recoverer.
    """

    kind: ManipulatorKind

    async def get_candidates(self) -> list[Candidate]:
        """Objects eligible for this transition right now, one per content hash."""
        ...

    async def execute(self, candidates: list[Candidate], deadline: float) -> RunStats:
        """Process candidates in order until done or ``deadline`` (epoch seconds) passes."""
        ...
