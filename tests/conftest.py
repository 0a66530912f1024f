"""Shared pytest fixtures for ObjectTier tests."""

from __future__ import annotations

import hashlib
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from object_tier.config import Settings
from object_tier.models import Base, FileEntry, ObjectLocation, ObjectRecord
from object_tier.store import LocationStore

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


def make_hash(seed: str | bytes) -> str:
    """Content hash of the given bytes (str seeds are utf-8 encoded)."""
    data = seed.encode() if isinstance(seed, str) else seed
    return hashlib.sha1(data).hexdigest()


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture
async def test_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a throwaway SQLite database with all tables."""
    engine = create_async_engine(sqlite_url(tmp_path / "object_tier_test.db"), echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """A session on the test database.

    The store commits after every location write, so tests see committed
    state rather than a rolled-back transaction.
    """
    async_session_factory = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> LocationStore:
    return LocationStore(db_session)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings matching the documented scenarios (delay 500s, threshold 100 bytes)."""
    return Settings(
        _env_file=None,
        database_url=sqlite_url(tmp_path / "object_tier_test.db"),
        consistency_delay=500,
        delete_local=True,
        size_threshold=100,
        max_task_runtime=60,
        local_storage_path=str(tmp_path / "local"),
        remote_storage_path=str(tmp_path / "remote"),
    )


# Type aliases for factory fixtures
AddObject = Callable[..., Awaitable[ObjectRecord]]
FetchRecord = Callable[[str], Awaitable[ObjectRecord]]


@pytest.fixture
def add_object(db_session: AsyncSession) -> AddObject:
    """Factory fixture: insert an ObjectRecord plus its catalog entries and commit."""

    async def _add(
        contenthash: str | None = None,
        *,
        location: ObjectLocation = ObjectLocation.DUPLICATED,
        filesize: int = 100,
        timeduplicated: datetime | None = None,
        catalog_sizes: list[int] | None = None,
    ) -> ObjectRecord:
        contenthash = contenthash or make_hash(uuid4().hex)
        record = ObjectRecord(
            contenthash=contenthash,
            location=location,
            filesize=filesize,
            timeduplicated=timeduplicated,
        )
        db_session.add(record)
        for size in catalog_sizes or [filesize]:
            db_session.add(
                FileEntry(
                    file_id=uuid4(),
                    contenthash=contenthash,
                    filesize=size,
                    filename=f"{contenthash[:8]}.bin",
                )
            )
        await db_session.commit()
        return record

    return _add


@pytest.fixture
def fetch_record(db_session: AsyncSession) -> FetchRecord:
    """Reload a record from the database, bypassing the identity map."""

    async def _fetch(contenthash: str) -> ObjectRecord:
        stmt = (
            select(ObjectRecord)
            .where(ObjectRecord.contenthash == contenthash)
            .execution_options(populate_existing=True)
        )
        return (await db_session.execute(stmt)).scalar_one()

    return _fetch


class FakeFileSystem:
    """Scripted storage adapter.

    Unscripted hashes succeed on delete / copy and probe as ERROR.
    Every call is recorded in ``calls`` as (operation, contenthash).
    """

    def __init__(self) -> None:
        self.delete_results: dict[str, bool] = {}
        self.copy_results: dict[str, bool] = {}
        self.locations: dict[str, ObjectLocation] = {}
        self.calls: list[tuple[str, str]] = []

    def delete_local(self, contenthash: str) -> bool:
        self.calls.append(("delete_local", contenthash))
        return self.delete_results.get(contenthash, True)

    def copy_remote_to_local(self, contenthash: str) -> bool:
        self.calls.append(("copy_remote_to_local", contenthash))
        return self.copy_results.get(contenthash, True)

    def probe_actual_location(self, contenthash: str) -> ObjectLocation:
        self.calls.append(("probe_actual_location", contenthash))
        return self.locations.get(contenthash, ObjectLocation.ERROR)

    def operations(self) -> list[str]:
        return [op for op, _ in self.calls]


@pytest.fixture
def fake_fs() -> FakeFileSystem:
    return FakeFileSystem()
