"""Sync engine for pys3uploader - upload build output to S3 compatible storage."""

from .comparator import ExistenceResolver, SyncAction, SyncDecision
from .engine import SyncEngine, SyncPhase
from .keys import check_relative_path, normalize_key
from .operations import SyncOperations
from .scanner import DirectoryScanner, LocalFile, walk
from .target import TargetDefaults, UploadTarget

__all__ = [
    "SyncEngine",
    "SyncPhase",
    "SyncOperations",
    "ExistenceResolver",
    "SyncAction",
    "SyncDecision",
    "DirectoryScanner",
    "LocalFile",
    "walk",
    "UploadTarget",
    "TargetDefaults",
    "check_relative_path",
    "normalize_key",
]
