"""Database models for ObjectTier."""

from object_tier.models.base import Base
from object_tier.models.enums import ManipulatorKind, ObjectLocation
from object_tier.models.file_entry import FileEntry
from object_tier.models.object_record import ObjectRecord

__all__ = [
    "Base",
    "FileEntry",
    "ManipulatorKind",
    "ObjectLocation",
    "ObjectRecord",
]
