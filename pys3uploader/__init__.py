"""PyS3Uploader - upload static build output to S3 compatible storage."""

from .config import UploaderOptions, load_options_from_json
from .exceptions import (
    CleanupError,
    ConfigurationError,
    ConnectivityError,
    InvalidPathError,
    NotFoundError,
    StorageError,
    TransferError,
    UploaderError,
)
from .hooks import upload_build_output
from .storage import RemoteObjectInfo, S3StorageClient, StorageClient
from .sync import SyncEngine, UploadTarget, normalize_key

__all__ = [
    "S3StorageClient",
    "StorageClient",
    "RemoteObjectInfo",
    "SyncEngine",
    "UploadTarget",
    "UploaderOptions",
    "load_options_from_json",
    "normalize_key",
    "upload_build_output",
    "UploaderError",
    "ConfigurationError",
    "InvalidPathError",
    "ConnectivityError",
    "StorageError",
    "NotFoundError",
    "TransferError",
    "CleanupError",
]
