"""Location store: candidate queries and point updates on object records.

All writes are point updates keyed by content hash. Callers that know
the location they started from pass it as ``expected`` so the write
becomes a compare-and-set; a concurrent manipulator that already moved
the record wins and the late write is dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy import DateTime, Select, case, func, literal, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from object_tier.models.enums import ObjectLocation
from object_tier.models.object_record import ObjectRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Candidate:
    """An object eligible for a transition in the current run."""

    contenthash: str
    filesize: int


@dataclass
class LocationSummary:
    """Object count and bytes held in one location state."""

    count: int = 0
    total_bytes: int = 0


class LocationStore:
    """Reads and writes ObjectRecord rows for the manipulators.

    Usage:
        async with async_session_factory() as session:
            store = LocationStore(session)
            rows = await store.find_candidates(stmt)
            await store.update_location(h, ObjectLocation.REMOTE,
                                        expected=ObjectLocation.DUPLICATED)
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_candidates(self, stmt: Select[tuple[str, int]]) -> list[Candidate]:
        """Run a read-only candidate query selecting (contenthash, filesize)."""
        result = await self._session.execute(stmt)
        return [Candidate(contenthash=h, filesize=int(size or 0)) for h, size in result.all()]

    async def get_record(self, contenthash: str) -> ObjectRecord | None:
        # Updates bypass the identity map, so always reload
        return await self._session.get(ObjectRecord, contenthash, populate_existing=True)

    async def update_location(
        self,
        contenthash: str,
        location: ObjectLocation,
        *,
        expected: ObjectLocation | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Write a new location for one content hash and commit.

        timeduplicated is stamped only when the record moves into
        DUPLICATED from some other state, and kept on every other write.

        Args:
            contenthash: Record key.
            location: The reconciled location.
            expected: If given, only write when the stored location still
                equals this value.
            now: Stamp for timeduplicated; defaults to the current UTC time.

        Returns:
            True if a row was updated. False when the record does not exist
            or the compare-and-set lost.
        """
        values: dict[str, object] = {"location": location}
        if location == ObjectLocation.DUPLICATED:
            values["timeduplicated"] = case(
                (
                    ObjectRecord.location != ObjectLocation.DUPLICATED,
                    literal(now or datetime.now(UTC), DateTime(timezone=True)),
                ),
                else_=ObjectRecord.timeduplicated,
            )

        stmt = update(ObjectRecord).where(ObjectRecord.contenthash == contenthash)
        if expected is not None:
            stmt = stmt.where(ObjectRecord.location == expected)
        stmt = stmt.values(**values).execution_options(synchronize_session=False)

        result = await self._session.execute(stmt)
        await self._session.commit()

        updated = (getattr(result, "rowcount", 0) or 0) > 0
        if not updated:
            logger.warning(
                "[STORE] no update for %s → %s (expected %s)",
                contenthash, location.value, expected.value if expected else "any",
            )
        return updated

    async def count_by_location(self) -> dict[ObjectLocation, LocationSummary]:
        """Object count and total bytes per location state."""
        stmt = select(
            ObjectRecord.location,
            func.count(ObjectRecord.contenthash),
            func.coalesce(func.sum(ObjectRecord.filesize), 0),
        ).group_by(ObjectRecord.location)
        result = await self._session.execute(stmt)

        summary = {location: LocationSummary() for location in ObjectLocation}
        for location, count, total in result.all():
            summary[location] = LocationSummary(count=int(count), total_bytes=int(total))
        return summary
