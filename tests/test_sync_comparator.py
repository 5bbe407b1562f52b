"""Tests for the ExistenceResolver class."""

from unittest.mock import Mock

import pytest

from pys3uploader.exceptions import StorageError, TransferError
from pys3uploader.storage import RemoteObjectInfo, StorageClient
from pys3uploader.sync.comparator import ExistenceResolver, SyncAction


@pytest.fixture
def mock_client():
    """Create a mock storage client."""
    return Mock(spec=StorageClient)


def _remote(size, key="images/logo.png"):
    return RemoteObjectInfo(key=key, size=size)


class TestShouldUpload:
    """Tests for should_upload."""

    def test_missing_object_uploads(self, mock_client):
        """A key with no remote object must be uploaded."""
        mock_client.head.return_value = None
        resolver = ExistenceResolver(mock_client)

        assert resolver.should_upload("images/logo.png", 500, override=False) is True
        mock_client.delete.assert_not_called()

    def test_same_size_skips(self, mock_client):
        """An object with the same size is left alone."""
        mock_client.head.return_value = _remote(500)
        resolver = ExistenceResolver(mock_client)

        assert resolver.should_upload("images/logo.png", 500, override=False) is False
        mock_client.delete.assert_not_called()

    def test_same_size_with_override_replaces(self, mock_client):
        """Override deletes and re-uploads even when sizes match."""
        mock_client.head.return_value = _remote(500)
        resolver = ExistenceResolver(mock_client)

        assert resolver.should_upload("images/logo.png", 500, override=True) is True
        mock_client.delete.assert_called_once_with("images/logo.png")

    @pytest.mark.parametrize("override", [False, True])
    def test_size_mismatch_replaces(self, mock_client, override):
        """A size mismatch always triggers delete then upload by default."""
        mock_client.head.return_value = _remote(500)
        resolver = ExistenceResolver(mock_client)

        assert resolver.should_upload("images/logo.png", 800, override) is True
        mock_client.delete.assert_called_once_with("images/logo.png")

    def test_size_mismatch_skipped_when_resync_disabled(self, mock_client):
        """With resync disabled a mismatching object is treated as present."""
        mock_client.head.return_value = _remote(500)
        resolver = ExistenceResolver(mock_client, resync_on_size_mismatch=False)

        assert resolver.should_upload("images/logo.png", 800, override=False) is False
        mock_client.delete.assert_not_called()

    def test_size_mismatch_with_override_replaces_when_resync_disabled(
        self, mock_client
    ):
        """Override still replaces when resync is disabled."""
        mock_client.head.return_value = _remote(500)
        resolver = ExistenceResolver(mock_client, resync_on_size_mismatch=False)

        assert resolver.should_upload("images/logo.png", 800, override=True) is True
        mock_client.delete.assert_called_once_with("images/logo.png")


class TestResolve:
    """Tests for resolve and its decisions."""

    def test_decision_actions(self, mock_client):
        """Test the action and reason reported for each case."""
        resolver = ExistenceResolver(mock_client)

        mock_client.head.return_value = None
        decision = resolver.resolve("a.png", 10, override=False)
        assert decision.action == SyncAction.UPLOAD
        assert decision.reason == "New file"
        assert decision.remote is None

        mock_client.head.return_value = _remote(10, "a.png")
        decision = resolver.resolve("a.png", 10, override=False)
        assert decision.action == SyncAction.SKIP
        assert decision.needs_upload is False

        mock_client.head.return_value = _remote(11, "a.png")
        decision = resolver.resolve("a.png", 10, override=False)
        assert decision.action == SyncAction.REPLACE
        assert "10 vs 11" in decision.reason

    def test_unknown_remote_size_replaces(self, mock_client):
        """An object without a content length is replaced."""
        mock_client.head.return_value = _remote(None)
        resolver = ExistenceResolver(mock_client)

        decision = resolver.resolve("images/logo.png", 500, override=False)

        assert decision.action == SyncAction.REPLACE
        mock_client.delete.assert_called_once_with("images/logo.png")

    def test_dry_run_never_deletes(self, mock_client):
        """Dry run decides but does not delete."""
        mock_client.head.return_value = _remote(500)
        resolver = ExistenceResolver(mock_client, dry_run=True)

        decision = resolver.resolve("images/logo.png", 500, override=True)

        assert decision.action == SyncAction.REPLACE
        mock_client.delete.assert_not_called()

    def test_stat_failure_is_transfer_error(self, mock_client):
        """Transport and auth failures are not treated as 'not found'."""
        mock_client.head.side_effect = StorageError("Access Denied")
        resolver = ExistenceResolver(mock_client)

        with pytest.raises(TransferError) as exc_info:
            resolver.resolve("images/logo.png", 500, override=False)

        assert exc_info.value.key == "images/logo.png"

    def test_delete_failure_is_transfer_error(self, mock_client):
        """A failing delete aborts with the offending key."""
        mock_client.head.return_value = _remote(500)
        mock_client.delete.side_effect = StorageError("boom")
        resolver = ExistenceResolver(mock_client)

        with pytest.raises(TransferError, match="images/logo.png"):
            resolver.resolve("images/logo.png", 800, override=False)


class TestCompare:
    """Tests for compare (no storage access)."""

    def test_compare_does_not_touch_client(self, mock_client):
        """compare only uses the given remote info."""
        resolver = ExistenceResolver(mock_client)

        decision = resolver.compare("a.png", 5, _remote(5, "a.png"), override=False)

        assert decision.action == SyncAction.SKIP
        mock_client.head.assert_not_called()
        mock_client.delete.assert_not_called()
