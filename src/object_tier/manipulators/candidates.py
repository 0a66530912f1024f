"""Candidate selection policies.

Every policy joins the file catalog against object records on content
hash and groups by hash, so each object appears once with the largest
catalog size seen for it.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import ColumnElement, Select, func, select

from object_tier.models.enums import ObjectLocation
from object_tier.models.file_entry import FileEntry
from object_tier.models.object_record import ObjectRecord
from object_tier.reporting import RunLogger
from object_tier.store import Candidate, LocationStore

_max_filesize = func.max(FileEntry.filesize)


def _grouped_by_hash(
    *conditions: ColumnElement[bool],
    having: ColumnElement[bool] | None = None,
) -> Select[Any]:
    stmt = (
        select(FileEntry.contenthash, _max_filesize.label("filesize"))
        .join(ObjectRecord, ObjectRecord.contenthash == FileEntry.contenthash)
        .where(*conditions)
        .group_by(FileEntry.contenthash)
        .order_by(FileEntry.contenthash)
    )
    if having is not None:
        stmt = stmt.having(having)
    return stmt


def delete_candidates_stmt(consistency_delay: int, *, now: datetime) -> Select[Any]:
    """DUPLICATED objects that have been duplicated for at least ``consistency_delay`` seconds."""
    threshold = now - timedelta(seconds=consistency_delay)
    return _grouped_by_hash(
        ObjectRecord.location == ObjectLocation.DUPLICATED,
        ObjectRecord.timeduplicated <= threshold,
    )


def pull_candidates_stmt(size_threshold: int) -> Select[Any]:
    """REMOTE objects no larger than ``size_threshold`` bytes."""
    return _grouped_by_hash(
        ObjectRecord.location == ObjectLocation.REMOTE,
        having=_max_filesize <= size_threshold,
    )


def recover_candidates_stmt() -> Select[Any]:
    """Every object in ERROR, regardless of size."""
    return _grouped_by_hash(ObjectRecord.location == ObjectLocation.ERROR)


class CandidateSelector:
    """Runs a candidate query and reports how long it took and what it found."""

    def __init__(self, store: LocationStore, reporter: RunLogger) -> None:
        self._store = store
        self._reporter = reporter

    async def select(self, stmt: Select[Any]) -> list[Candidate]:
        self._reporter.start_timing()
        candidates = await self._store.find_candidates(stmt)
        self._reporter.end_timing()
        self._reporter.record_query_result(len(candidates))
        return candidates
