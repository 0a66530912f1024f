"""Tests for the tiered filesystem adapter against real directories."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest
from conftest import make_hash

from object_tier.config import Settings
from object_tier.models import ObjectLocation
from object_tier.storage import (
    DirectoryObjectClient,
    RemoteUnavailableError,
    S3ObjectClient,
    TieredFileSystem,
    build_filesystem,
    content_hash,
    hash_path,
)


def put(root: Path, data: bytes, contenthash: str | None = None) -> str:
    """Store ``data`` under root in the ab/cd/<hash> layout."""
    contenthash = contenthash or make_hash(data)
    path = root / hash_path(contenthash)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return contenthash


@pytest.fixture
def local_root(tmp_path: Path) -> Path:
    root = tmp_path / "local"
    root.mkdir()
    return root


@pytest.fixture
def remote_root(tmp_path: Path) -> Path:
    root = tmp_path / "remote"
    root.mkdir()
    return root


@pytest.fixture
def fs(local_root: Path, remote_root: Path) -> TieredFileSystem:
    return TieredFileSystem(local_root, DirectoryObjectClient(remote_root))


class TestLayout:
    def test_hash_path_fan_out(self) -> None:
        h = make_hash(b"hello")
        assert str(hash_path(h)) == f"{h[0:2]}/{h[2:4]}/{h}"

    @pytest.mark.parametrize(
        "bad", ["", "../../etc/passwd", "ABCDEF", "z" * 40, "a" * 39, "a" * 40 + "\n"]
    )
    def test_hash_path_rejects_non_digests(self, bad: str) -> None:
        with pytest.raises(ValueError):
            hash_path(bad)

    def test_content_hash_matches_sha1(self, tmp_path: Path) -> None:
        path = tmp_path / "blob"
        path.write_bytes(b"some bytes")
        assert content_hash(path) == make_hash(b"some bytes")


class TestProbeActualLocation:
    def test_both_tiers(self, fs: TieredFileSystem, local_root: Path, remote_root: Path) -> None:
        h = put(local_root, b"both")
        put(remote_root, b"both")
        assert fs.probe_actual_location(h) == ObjectLocation.DUPLICATED

    def test_local_only(self, fs: TieredFileSystem, local_root: Path) -> None:
        h = put(local_root, b"local")
        assert fs.probe_actual_location(h) == ObjectLocation.LOCAL

    def test_remote_only(self, fs: TieredFileSystem, remote_root: Path) -> None:
        h = put(remote_root, b"remote")
        assert fs.probe_actual_location(h) == ObjectLocation.REMOTE

    def test_nowhere(self, fs: TieredFileSystem) -> None:
        assert fs.probe_actual_location(make_hash(b"gone")) == ObjectLocation.ERROR

    def test_malformed_hash_is_error(self, fs: TieredFileSystem) -> None:
        assert fs.probe_actual_location("not-a-hash") == ObjectLocation.ERROR

    def test_missing_remote_mount_aborts(self, local_root: Path, tmp_path: Path) -> None:
        """Losing the whole remote tier is not a per-object failure."""
        fs = TieredFileSystem(local_root, DirectoryObjectClient(tmp_path / "unmounted"))
        with pytest.raises(RemoteUnavailableError):
            fs.probe_actual_location(make_hash(b"x"))


class TestDeleteLocal:
    def test_deletes_when_remote_present(
        self, fs: TieredFileSystem, local_root: Path, remote_root: Path
    ) -> None:
        h = put(local_root, b"data")
        put(remote_root, b"data")

        assert fs.delete_local(h) is True
        assert not fs.is_local(h)
        assert fs.probe_actual_location(h) == ObjectLocation.REMOTE

    def test_refuses_when_remote_missing(self, fs: TieredFileSystem, local_root: Path) -> None:
        """Never drop the last copy."""
        h = put(local_root, b"only copy")

        assert fs.delete_local(h) is False
        assert fs.is_local(h)

    def test_already_gone_locally_is_success(
        self, fs: TieredFileSystem, remote_root: Path
    ) -> None:
        h = put(remote_root, b"remote only")
        assert fs.delete_local(h) is True


class TestCopyRemoteToLocal:
    def test_copies_and_verifies(
        self, fs: TieredFileSystem, local_root: Path, remote_root: Path
    ) -> None:
        h = put(remote_root, b"pull me")

        assert fs.copy_remote_to_local(h) is True
        assert (local_root / hash_path(h)).read_bytes() == b"pull me"
        assert fs.probe_actual_location(h) == ObjectLocation.DUPLICATED

    def test_already_local_is_success(
        self, fs: TieredFileSystem, local_root: Path, remote_root: Path
    ) -> None:
        h = put(local_root, b"here")
        put(remote_root, b"here")
        assert fs.copy_remote_to_local(h) is True

    def test_local_only_is_not_a_pull(self, fs: TieredFileSystem, local_root: Path) -> None:
        """A local copy alone does not make the object duplicated."""
        h = put(local_root, b"never uploaded")

        assert fs.copy_remote_to_local(h) is False
        assert fs.probe_actual_location(h) == ObjectLocation.LOCAL

    def test_unreadable_local_tree_fails_one_object(
        self, fs: TieredFileSystem, remote_root: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        h = put(remote_root, b"blocked")

        def denied(self: Path) -> bool:
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "is_file", denied)

        assert fs.copy_remote_to_local(h) is False

    def test_missing_remote_object_fails(self, fs: TieredFileSystem) -> None:
        h = make_hash(b"absent")
        assert fs.copy_remote_to_local(h) is False
        assert not fs.is_local(h)

    def test_corrupt_remote_bytes_discarded(
        self, fs: TieredFileSystem, local_root: Path, remote_root: Path
    ) -> None:
        """Bytes that do not hash to the content hash never land locally."""
        h = make_hash(b"expected")
        put(remote_root, b"corrupted", contenthash=h)

        assert fs.copy_remote_to_local(h) is False
        assert not fs.is_local(h)
        leftovers = [p for p in local_root.rglob("*") if p.is_file()]
        assert leftovers == []

    def test_remote_lost_mid_run_aborts(
        self, fs: TieredFileSystem, remote_root: Path
    ) -> None:
        h = put(remote_root, b"soon gone")
        shutil.rmtree(remote_root)

        with pytest.raises(RemoteUnavailableError):
            fs.copy_remote_to_local(h)


class TestBuildFilesystem:
    def test_directory_backend(self, test_settings: Settings) -> None:
        fs = build_filesystem(test_settings)
        assert isinstance(fs._remote, DirectoryObjectClient)

    def test_s3_backend(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(
            update={
                "remote_backend": "s3",
                "s3_bucket": "objects",
                "s3_access_key": "testing",
                "s3_secret_key": "testing",
            }
        )
        fs = build_filesystem(settings)
        assert isinstance(fs._remote, S3ObjectClient)
