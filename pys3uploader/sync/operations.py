"""Upload and local cleanup operations used by the sync engine."""

import logging
import shutil
from pathlib import Path

from ..exceptions import CleanupError, StorageError, TransferError
from ..storage import StorageClient
from ..utils import guess_content_type
from .scanner import LocalFile
from .target import UploadTarget

logger = logging.getLogger(__name__)


class SyncOperations:
    """Operations on the bucket and on the build directory."""

    def __init__(self, client: StorageClient):
        """Initialize sync operations.

        Args:
            client: Storage client
        """
        self.client = client

    def upload_file(self, local_file: LocalFile, key: str) -> None:
        """Upload a local file to the bucket.

        The content type is guessed from the key's extension; files with an
        unknown extension are written without one.

        Args:
            local_file: Local file to upload
            key: Storage key

        Raises:
            TransferError: If the file cannot be read or written
        """
        try:
            body = local_file.path.read_bytes()
        except OSError as e:
            raise TransferError(key, f"cannot read {local_file.path}: {e}") from e

        try:
            self.client.put(key, body, content_type=guess_content_type(key))
        except StorageError as e:
            raise TransferError(key, str(e)) from e

    def remove_local_tree(self, target: UploadTarget) -> Path:
        """Remove the local copy of an uploaded target.

        Removes a single file or a whole directory tree. The resolved path
        must lie strictly inside the resolved build directory.

        Args:
            target: Upload target whose local path is removed

        Returns:
            The removed path

        Raises:
            CleanupError: If the path is outside the build directory or
                cannot be removed
        """
        root = target.root.resolve()
        path = target.local_path
        resolved = path.resolve()

        if resolved == root or root not in resolved.parents:
            raise CleanupError(
                str(target.local_path), "path is not inside the build directory"
            )

        try:
            if path.is_symlink() or not path.is_dir():
                path.unlink(missing_ok=True)
            else:
                shutil.rmtree(path)
        except OSError as e:
            raise CleanupError(str(path), str(e)) from e

        logger.debug("Removed local path %s", path)
        return path
