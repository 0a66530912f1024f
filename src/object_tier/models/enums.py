"""Enumerations for ObjectTier data model."""

from enum import Enum


class ObjectLocation(str, Enum):
    """Which storage tier(s) currently hold an object's bytes.

    Transitions handled by this package:
    - DUPLICATED → REMOTE (deleter, local copy removed)
    - REMOTE → DUPLICATED (puller, local copy restored)
    - ERROR → anything else (recoverer, once the probe can tell)

    LOCAL → DUPLICATED belongs to the external duplication process.
    """

    LOCAL = "local"  # Only in local storage
    DUPLICATED = "duplicated"  # In both tiers
    REMOTE = "remote"  # Local copy absent
    ERROR = "error"  # Unknown or inconsistent


class ManipulatorKind(str, Enum):
    """Batch jobs that move objects between tiers."""

    DELETER = "deleter"
    PULLER = "puller"
    RECOVERER = "recoverer"
