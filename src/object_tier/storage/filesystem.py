"""Local tier and the three adapter operations the manipulators call.

The boolean results are advisory. When an operation reports failure the
caller asks probe_actual_location() what is really there.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

from object_tier.models.enums import ObjectLocation
from object_tier.storage.clients import DirectoryObjectClient, ObjectClient, S3ObjectClient
from object_tier.storage.errors import RemoteUnavailableError, StorageError
from object_tier.storage.layout import content_hash, hash_path

if TYPE_CHECKING:
    from object_tier.config import Settings

logger = logging.getLogger(__name__)


class ObjectFileSystem(Protocol):
    """What the manipulators need from storage."""

    def delete_local(self, contenthash: str) -> bool: ...

    def copy_remote_to_local(self, contenthash: str) -> bool: ...

    def probe_actual_location(self, contenthash: str) -> ObjectLocation: ...


class TieredFileSystem:
    """Local directory tier in front of a remote ObjectClient.

    Usage:
        fs = TieredFileSystem(Path("/srv/filedir"), DirectoryObjectClient("/mnt/bucket"))
        if fs.copy_remote_to_local(h):
            ...
    """

    def __init__(self, local_root: Path | str, remote: ObjectClient) -> None:
        self._local_root = Path(local_root)
        self._remote = remote

    def local_path(self, contenthash: str) -> Path:
        return self._local_root / hash_path(contenthash)

    def is_local(self, contenthash: str) -> bool:
        return self.local_path(contenthash).is_file()

    def is_remote(self, contenthash: str) -> bool:
        return self._remote.exists(contenthash)

    def delete_local(self, contenthash: str) -> bool:
        """Remove the local copy, but only if the remote copy is readable.

        A local copy that is already gone counts as success.
        """
        try:
            if not self._remote.exists(contenthash):
                logger.warning("[FS] refusing local delete of %s: not in remote", contenthash)
                return False
            self.local_path(contenthash).unlink(missing_ok=True)
        except RemoteUnavailableError:
            raise
        except (StorageError, OSError, ValueError) as e:
            logger.warning("[FS] local delete of %s failed: %s", contenthash, e)
            return False
        return True

    def copy_remote_to_local(self, contenthash: str) -> bool:
        """Restore the local copy from remote.

        Downloads to a temp file beside the target, checks the digest, and
        renames into place so a partial download never looks local. An
        object that is already local counts as pulled only if the remote
        copy is there too.
        """
        try:
            dest = self.local_path(contenthash)
            if dest.is_file():
                return self._remote.exists(contenthash)
        except RemoteUnavailableError:
            raise
        except (StorageError, OSError, ValueError) as e:
            logger.warning("[FS] pull of %s skipped: %s", contenthash, e)
            return False

        tmp = dest.with_name(f"{dest.name}.{uuid4().hex}.tmp")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            self._remote.download(contenthash, tmp)
            actual = content_hash(tmp)
            if actual != contenthash:
                logger.warning(
                    "[FS] pulled bytes for %s hash to %s, discarding", contenthash, actual
                )
                return False
            os.replace(tmp, dest)
        except RemoteUnavailableError:
            raise
        except (StorageError, OSError) as e:
            logger.warning("[FS] pull of %s failed: %s", contenthash, e)
            return False
        finally:
            tmp.unlink(missing_ok=True)
        return True

    def probe_actual_location(self, contenthash: str) -> ObjectLocation:
        """Look at both tiers and say where the object really is."""
        try:
            local = self.is_local(contenthash)
            remote = self.is_remote(contenthash)
        except RemoteUnavailableError:
            raise
        except (StorageError, OSError, ValueError) as e:
            logger.warning("[FS] cannot determine location of %s: %s", contenthash, e)
            return ObjectLocation.ERROR

        if local and remote:
            return ObjectLocation.DUPLICATED
        if local:
            return ObjectLocation.LOCAL
        if remote:
            return ObjectLocation.REMOTE
        return ObjectLocation.ERROR


def build_filesystem(settings: Settings) -> TieredFileSystem:
    """Build the adapter described by the storage settings."""
    remote: ObjectClient
    if settings.remote_backend == "s3":
        remote = S3ObjectClient(
            settings.s3_bucket,
            key_prefix=settings.s3_key_prefix,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
        )
    else:
        remote = DirectoryObjectClient(settings.remote_storage_path)
    return TieredFileSystem(settings.local_storage_path, remote)
