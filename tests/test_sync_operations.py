"""Tests for sync operations."""

import os
import sys

import pytest

from pys3uploader.exceptions import CleanupError, TransferError
from pys3uploader.sync.operations import SyncOperations
from pys3uploader.sync.scanner import LocalFile
from pys3uploader.sync.target import UploadTarget


@pytest.fixture
def operations(storage):
    """Create sync operations on in-memory storage."""
    return SyncOperations(storage)


class TestUploadFile:
    """Tests for upload_file."""

    def test_upload_writes_body_and_content_type(self, operations, storage, temp_dir):
        """The file content is written under the key."""
        path = temp_dir / "style.css"
        path.write_text("body {}")

        operations.upload_file(LocalFile.from_path(path, temp_dir), "site/style.css")

        assert storage.objects["site/style.css"] == b"body {}"
        assert storage.content_types["site/style.css"] == "text/css"

    def test_unreadable_file(self, operations, storage, temp_dir):
        """A file which vanished is a transfer error."""
        path = temp_dir / "gone.txt"
        path.write_text("x")
        local_file = LocalFile.from_path(path, temp_dir)
        path.unlink()

        with pytest.raises(TransferError, match="cannot read"):
            operations.upload_file(local_file, "gone.txt")

        assert storage.calls_of("put") == []

    def test_storage_failure(self, operations, storage, temp_dir):
        """A failing write is a transfer error carrying the key."""
        path = temp_dir / "a.txt"
        path.write_text("x")
        storage.fail_put.add("a.txt")

        with pytest.raises(TransferError) as exc_info:
            operations.upload_file(LocalFile.from_path(path, temp_dir), "a.txt")

        assert exc_info.value.key == "a.txt"


class TestRemoveLocalTree:
    """Tests for remove_local_tree."""

    def test_removes_directory(self, operations, temp_dir):
        """A directory target is removed with its contents."""
        (temp_dir / "assets" / "sub").mkdir(parents=True)
        (temp_dir / "assets" / "sub" / "a.txt").write_text("a")
        (temp_dir / "keep.txt").write_text("k")

        removed = operations.remove_local_tree(UploadTarget(temp_dir, "assets"))

        assert removed == temp_dir / "assets"
        assert not (temp_dir / "assets").exists()
        assert (temp_dir / "keep.txt").exists()

    def test_removes_file(self, operations, temp_dir):
        """A file target is unlinked."""
        (temp_dir / "index.html").write_text("<html></html>")

        operations.remove_local_tree(UploadTarget(temp_dir, "index.html"))

        assert not (temp_dir / "index.html").exists()

    def test_refuses_build_directory(self, operations, temp_dir):
        """The build directory itself is never removed."""
        (temp_dir / "a.txt").write_text("a")

        with pytest.raises(CleanupError, match="not inside"):
            operations.remove_local_tree(UploadTarget(temp_dir, "."))

        assert (temp_dir / "a.txt").exists()

    def test_refuses_outside_build_directory(self, operations, temp_dir):
        """Paths resolving outside the build directory are refused."""
        build = temp_dir / "dist"
        build.mkdir()
        (temp_dir / "secrets").mkdir()

        with pytest.raises(CleanupError):
            operations.remove_local_tree(UploadTarget(build, "../secrets"))

        assert (temp_dir / "secrets").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="Symlinks need privileges")
    def test_symlink_is_unlinked_not_followed(self, operations, temp_dir):
        """A symlinked directory inside the build is unlinked, its target kept."""
        build = temp_dir / "dist"
        (build / "real").mkdir(parents=True)
        (build / "real" / "a.txt").write_text("a")
        os.symlink(build / "real", build / "link")

        operations.remove_local_tree(UploadTarget(build, "link"))

        assert not (build / "link").exists()
        assert (build / "real" / "a.txt").exists()
