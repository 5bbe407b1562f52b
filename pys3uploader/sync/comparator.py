"""Decides whether a local file must be uploaded to the bucket."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import StorageError, TransferError
from ..storage import RemoteObjectInfo, StorageClient

logger = logging.getLogger(__name__)


class SyncAction(str, Enum):
    """Actions that can be taken for a local file."""

    UPLOAD = "upload"
    """Upload local file, no remote object exists"""

    REPLACE = "replace"
    """Delete the remote object, then upload the local file"""

    SKIP = "skip"
    """Skip file (remote object is considered up to date)"""


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a file."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    key: str
    """Storage key of the file"""

    remote: Optional[RemoteObjectInfo] = None
    """Remote object (if exists)"""

    @property
    def needs_upload(self) -> bool:
        """Whether the local file has to be written to the bucket."""
        return self.action in (SyncAction.UPLOAD, SyncAction.REPLACE)


class ExistenceResolver:
    """Compares a local file with the object stored under its key.

    Only sizes are compared; there is no local index, every call asks the
    storage client.

    Policy:
        - no remote object: upload
        - same size: skip, unless ``override`` forces a replace
        - different size: replace when ``resync_on_size_mismatch`` is
          enabled (default) or ``override`` is set, otherwise skip
        - unknown remote size: replace
    """

    def __init__(
        self,
        client: StorageClient,
        resync_on_size_mismatch: bool = True,
        dry_run: bool = False,
    ):
        """Initialize the resolver.

        Args:
            client: Storage client used to stat and delete objects
            resync_on_size_mismatch: Replace objects whose size differs from
                the local file even without ``override``
            dry_run: If True, never delete stale objects
        """
        self.client = client
        self.resync_on_size_mismatch = resync_on_size_mismatch
        self.dry_run = dry_run

    def compare(
        self,
        key: str,
        local_size: int,
        remote: Optional[RemoteObjectInfo],
        override: bool,
    ) -> SyncDecision:
        """Decide the action for a key without touching the bucket.

        Args:
            key: Storage key
            local_size: Size of the local file in bytes
            remote: Remote object info, None if the object does not exist
            override: Whether to force re-upload of existing objects

        Returns:
            SyncDecision for this key
        """
        if remote is None:
            return SyncDecision(SyncAction.UPLOAD, "New file", key)

        if remote.size is None:
            return SyncDecision(SyncAction.REPLACE, "Remote size unknown", key, remote)

        if remote.size == local_size:
            if override:
                return SyncDecision(
                    SyncAction.REPLACE, "Same size, override enabled", key, remote
                )
            return SyncDecision(
                SyncAction.SKIP, "Files are identical (same size)", key, remote
            )

        reason = f"Size differs ({local_size} vs {remote.size})"
        if override or self.resync_on_size_mismatch:
            return SyncDecision(SyncAction.REPLACE, reason, key, remote)
        return SyncDecision(
            SyncAction.SKIP,
            f"{reason}, resync on size mismatch disabled",
            key,
            remote,
        )

    def resolve(self, key: str, local_size: int, override: bool) -> SyncDecision:
        """Stat the key and decide the action, deleting stale objects.

        For a REPLACE decision the remote object is deleted before returning,
        so the following upload never leaves stale content behind.

        Raises:
            TransferError: If the stat or the delete fails
        """
        try:
            remote = self.client.head(key)
        except StorageError as e:
            raise TransferError(key, str(e)) from e

        decision = self.compare(key, local_size, remote, override)
        logger.debug("%s: %s (%s)", key, decision.action.value, decision.reason)

        if decision.action == SyncAction.REPLACE and not self.dry_run:
            try:
                self.client.delete(key)
            except StorageError as e:
                raise TransferError(key, str(e)) from e

        return decision

    def should_upload(self, key: str, local_size: int, override: bool) -> bool:
        """Return True if the file has to be uploaded under ``key``.

        May delete the stale remote object as a side effect.
        """
        return self.resolve(key, local_size, override).needs_upload
