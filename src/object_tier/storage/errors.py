"""Storage adapter exceptions."""


class StorageError(Exception):
    """Base class for storage adapter failures."""


class RemoteUnavailableError(StorageError):
    """The remote store cannot be reached at all.

    Raised instead of a per-object failure so the whole run aborts and is
    retried on the next schedule.
    """
