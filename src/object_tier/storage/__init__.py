"""Storage adapter for the local and remote tiers.

Submodules:
- layout: content hash helpers and the ab/cd/<hash> layout
- clients: remote object clients (mounted directory, S3)
- filesystem: local tier plus the delete / pull / probe operations
"""

from object_tier.storage.clients import DirectoryObjectClient, ObjectClient, S3ObjectClient
from object_tier.storage.errors import RemoteUnavailableError, StorageError
from object_tier.storage.filesystem import ObjectFileSystem, TieredFileSystem, build_filesystem
from object_tier.storage.layout import content_hash, hash_path

__all__ = [
    "DirectoryObjectClient",
    "ObjectClient",
    "ObjectFileSystem",
    "RemoteUnavailableError",
    "S3ObjectClient",
    "StorageError",
    "TieredFileSystem",
    "build_filesystem",
    "content_hash",
    "hash_path",
]
