"""Content hash helpers and the on-disk / object-key layout."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path, PurePosixPath

CONTENT_HASH_ALGORITHM = "sha1"

_CONTENT_HASH_RE = re.compile(r"[0-9a-f]{40}")
_CHUNK_SIZE = 1024 * 1024


def validate_hash(contenthash: str) -> str:
    """Reject anything that is not a lowercase hex SHA-1 digest."""
    if not _CONTENT_HASH_RE.fullmatch(contenthash):
        raise ValueError(f"Invalid content hash: {contenthash!r}")
    return contenthash


def hash_path(contenthash: str) -> PurePosixPath:
    """Fan-out relative path: ab/cd/abcdef0123...

    Used for both the local directory tree and remote object keys.
    """
    validate_hash(contenthash)
    return PurePosixPath(contenthash[0:2], contenthash[2:4], contenthash)


def content_hash(path: Path) -> str:
    """Digest of a file's bytes, read in chunks."""
    digest = hashlib.new(CONTENT_HASH_ALGORITHM)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
