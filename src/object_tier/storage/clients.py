"""Remote tier clients.

Both clients answer the same two questions for a content hash: is the
object there, and can we copy it down. Per-object problems raise
StorageError; losing the remote altogether raises RemoteUnavailableError.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, ConnectTimeoutError, EndpointConnectionError

from object_tier.storage.errors import RemoteUnavailableError, StorageError
from object_tier.storage.layout import hash_path

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}
_DOWNLOAD_CHUNK_SIZE = 1024 * 1024


class ObjectClient(Protocol):
    """Read-side interface to the remote tier."""

    def exists(self, contenthash: str) -> bool: ...

    def download(self, contenthash: str, dest: Path) -> None: ...


class DirectoryObjectClient:
    """Remote tier backed by a mounted directory (NFS share, bucket mount)."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    def object_path(self, contenthash: str) -> Path:
        return self._root / hash_path(contenthash)

    def _check_mount(self) -> None:
        if not self._root.is_dir():
            raise RemoteUnavailableError(f"Remote directory not available: {self._root}")

    def exists(self, contenthash: str) -> bool:
        self._check_mount()
        try:
            return self.object_path(contenthash).is_file()
        except OSError as e:
            raise StorageError(f"Cannot stat remote object {contenthash}: {e}") from e

    def download(self, contenthash: str, dest: Path) -> None:
        self._check_mount()
        try:
            shutil.copyfile(self.object_path(contenthash), dest)
        except OSError as e:
            raise StorageError(f"Cannot copy remote object {contenthash}: {e}") from e


class S3ObjectClient:
    """Remote tier backed by S3 or an S3-compatible store (MinIO).

    Retries are left to botocore's own retry config.
    """

    def __init__(
        self,
        bucket: str,
        *,
        key_prefix: str = "",
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        client: Any | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("S3 bucket name is required")
        self._bucket = bucket
        self._key_prefix = key_prefix.strip("/")
        self._client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=Config(
                signature_version="s3v4",
                connect_timeout=5,
                read_timeout=30,
                retries={"max_attempts": 3, "mode": "standard"},
            ),
        )

    def key_for(self, contenthash: str) -> str:
        key = str(hash_path(contenthash))
        return f"{self._key_prefix}/{key}" if self._key_prefix else key

    def exists(self, contenthash: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=self.key_for(contenthash))
        except (EndpointConnectionError, ConnectTimeoutError) as e:
            raise RemoteUnavailableError(f"S3 endpoint unreachable: {e}") from e
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                return False
            raise StorageError(f"S3 head_object failed for {contenthash}: {code}") from e
        return True

    def download(self, contenthash: str, dest: Path) -> None:
        key = self.key_for(contenthash)
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            with dest.open("wb") as f:
                for chunk in response["Body"].iter_chunks(chunk_size=_DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
        except (EndpointConnectionError, ConnectTimeoutError) as e:
            raise RemoteUnavailableError(f"S3 endpoint unreachable: {e}") from e
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            raise StorageError(f"S3 get_object failed for {contenthash}: {code}") from e
        except OSError as e:
            raise StorageError(f"Cannot write {dest}: {e}") from e
        logger.debug("[S3] downloaded s3://%s/%s", self._bucket, key)
