"""Shared fixtures."""

import tempfile
import threading
from pathlib import Path
from typing import Optional

import pytest

from pys3uploader.exceptions import ConnectivityError, NotFoundError, StorageError
from pys3uploader.storage import RemoteObjectInfo, StorageClient


class InMemoryStorage(StorageClient):
    """Storage client keeping objects in a dictionary and recording calls."""

    def __init__(self, objects: Optional[dict] = None):
        self.objects: dict[str, bytes] = dict(objects or {})
        self.content_types: dict[str, Optional[str]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_put: set[str] = set()
        self.connectivity_error: Optional[Exception] = None
        self._lock = threading.Lock()

    def _record(self, name: str, key: str) -> None:
        with self._lock:
            self.calls.append((name, key))

    def calls_of(self, name: str) -> list[str]:
        return [key for call, key in self.calls if call == name]

    def stat(self, key: str) -> RemoteObjectInfo:
        self._record("stat", key)
        with self._lock:
            if key not in self.objects:
                raise NotFoundError(key)
            return RemoteObjectInfo(key=key, size=len(self.objects[key]))

    def put(self, key: str, body: bytes, content_type: Optional[str] = None) -> None:
        self._record("put", key)
        if key in self.fail_put:
            raise StorageError(f"Simulated failure for {key}")
        with self._lock:
            self.objects[key] = body
            self.content_types[key] = content_type

    def delete(self, key: str) -> None:
        self._record("delete", key)
        with self._lock:
            self.objects.pop(key, None)

    def check_connectivity(self) -> None:
        self._record("check", "")
        if self.connectivity_error is not None:
            raise self.connectivity_error


@pytest.fixture
def storage():
    """Create an empty in-memory storage client."""
    return InMemoryStorage()


@pytest.fixture
def unreachable_storage():
    """Create a storage client whose bucket cannot be reached."""
    client = InMemoryStorage()
    client.connectivity_error = ConnectivityError("The bucket 'site' doesn't exist")
    return client


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
