"""File catalog model."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from object_tier.models.base import Base


class FileEntry(Base):
    """A logical file in the catalog.

    Many entries can point at the same content hash (dedup). Candidate
    selection joins this table against ObjectRecord on contenthash.
    """

    __tablename__ = "files"

    file_id: Mapped[UUID] = mapped_column(primary_key=True)
    contenthash: Mapped[str] = mapped_column(String(40), index=True)
    filesize: Mapped[int] = mapped_column(BigInteger)
    filename: Mapped[str] = mapped_column(String(1024), default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
