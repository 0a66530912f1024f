"""Location record for content-addressed objects."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from object_tier.models.base import Base
from object_tier.models.enums import ObjectLocation


class ObjectRecord(Base):
    """Where the bytes for one content hash currently live.

    There is exactly one record per content hash, no matter how many
    catalog files share it. Records are created by the duplication
    process and then mutated only by the manipulators; they are never
    deleted here. An object missing from every tier shows up as ERROR.
    """

    __tablename__ = "object_records"

    contenthash: Mapped[str] = mapped_column(String(40), primary_key=True)
    location: Mapped[ObjectLocation] = mapped_column(index=True)
    filesize: Mapped[int] = mapped_column(BigInteger, default=0)

    timeduplicated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), index=True)
    """Stamped when the record moves into DUPLICATED. Gates local deletion."""
