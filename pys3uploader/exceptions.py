"""Exceptions raised by the S3 uploader."""

from typing import Optional


class UploaderError(Exception):
    """Base exception for all uploader errors."""


class ConfigurationError(UploaderError):
    """Raised when the uploader options or upload targets are invalid.

    Always raised before any storage call is made.
    """


class InvalidPathError(ConfigurationError):
    """Raised when a path escapes the build directory (``..`` traversal)."""

    def __init__(self, path: str, message: Optional[str] = None):
        self.path = path
        super().__init__(
            message
            or f"It's not allowed to upload the parent directories: {path!r}"
        )


class ConnectivityError(UploaderError):
    """Raised when the bucket is unreachable or the credentials are rejected."""


class StorageError(UploaderError):
    """Raised when a storage operation fails for a reason other than not-found."""


class NotFoundError(StorageError):
    """Raised when an object does not exist in the bucket."""


class TransferError(UploaderError):
    """Raised when uploading or replacing a single object fails.

    A transfer error aborts the whole run. Objects uploaded before the
    failure stay in the bucket.
    """

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Failed to upload {key}: {message}")


class CleanupError(UploaderError):
    """Raised when removing the local copy of an uploaded path fails.

    The engine logs this error and keeps going.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to remove {path}: {message}")
