"""Object storage clients.

The sync engine talks to the bucket only through :class:`StorageClient`.
:class:`S3StorageClient` implements it on top of boto3 for AWS S3 and
S3 compatible services (R2, MinIO, B2, ...).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from .exceptions import ConnectivityError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

# Error codes S3 compatible services use for a missing object
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

# Error codes which mean the credentials were rejected
AUTH_ERROR_CODES = frozenset(
    {
        "403",
        "AccessDenied",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "ExpiredToken",
        "InvalidToken",
    }
)


@dataclass
class RemoteObjectInfo:
    """Metadata of an object in the bucket."""

    key: str
    """Object key"""

    size: int | None = None
    """Content length in bytes, if reported by the backend"""


class StorageClient(ABC):
    """Minimal object storage interface used by the sync engine.

    Implementations raise :class:`NotFoundError` from ``stat`` for a
    missing object and :class:`StorageError` for every other failure.
    """

    @abstractmethod
    def stat(self, key: str) -> RemoteObjectInfo:
        """Return metadata of ``key``.

        Raises:
            NotFoundError: If the object does not exist
        """

    def head(self, key: str) -> RemoteObjectInfo | None:
        """Return metadata of ``key``, or None if it does not exist."""
        try:
            return self.stat(key)
        except NotFoundError:
            return None

    @abstractmethod
    def put(self, key: str, body: bytes, content_type: str | None = None) -> None:
        """Write ``body`` to ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete ``key``."""

    @abstractmethod
    def check_connectivity(self) -> None:
        """Verify that the bucket is reachable with the configured identity.

        Raises:
            ConnectivityError: If the bucket is missing or access is denied
        """


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _status_code(error: ClientError) -> int:
    return int(error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0))


def is_not_found(error: ClientError) -> bool:
    """Check if a boto3 client error means the object does not exist."""
    return _error_code(error) in NOT_FOUND_CODES or _status_code(error) == 404


class S3StorageClient(StorageClient):
    """Storage client for S3 and S3 compatible services."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_access_key: str | None = None,
        client: Any = None,
        max_attempts: int = 3,
    ):
        """Initialize the S3 storage client.

        Args:
            bucket: Bucket name
            region: Region name ("auto" for services without regions)
            endpoint: Endpoint URL for S3 compatible services
            access_key: Access key ID (None to use the default credential chain)
            secret_access_key: Secret access key
            client: Pre-built boto3 S3 client (mainly for tests)
            max_attempts: Maximum attempts for retryable requests
        """
        self.bucket = bucket
        self.region = region
        self.endpoint = endpoint

        if client is None:
            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_access_key,
                config=BotoConfig(
                    signature_version="s3v4",
                    retries={"max_attempts": max_attempts, "mode": "standard"},
                ),
            )
        self._client = client

    def _location(self) -> str:
        location = f"bucket '{self.bucket}'"
        if self.region:
            location += f" on the region '{self.region}'"
        if self.endpoint:
            location += f" on the endpoint '{self.endpoint}'"
        return location

    def stat(self, key: str) -> RemoteObjectInfo:
        try:
            response = self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if is_not_found(e):
                raise NotFoundError(f"Object not found: {key}") from e
            raise StorageError(f"Failed to stat {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to stat {key}: {e}") from e

        size = response.get("ContentLength")
        return RemoteObjectInfo(key=key, size=int(size) if size is not None else None)

    def put(self, key: str, body: bytes, content_type: str | None = None) -> None:
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Body": body}
        if content_type is not None:
            params["ContentType"] = content_type

        try:
            self._client.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            # Already gone
            if is_not_found(e):
                logger.debug("Object %s was already deleted", key)
                return
            raise StorageError(f"Failed to delete {key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e

    def check_connectivity(self) -> None:
        try:
            self._client.head_bucket(Bucket=self.bucket)
        except NoCredentialsError as e:
            raise ConnectivityError(
                "No S3 credentials found. Provide an access key or configure "
                "the default credential chain."
            ) from e
        except ClientError as e:
            code = _error_code(e)
            if code == "NoSuchBucket" or is_not_found(e):
                raise ConnectivityError(f"The {self._location()} doesn't exist") from e
            if code in AUTH_ERROR_CODES or _status_code(e) in (401, 403):
                raise ConnectivityError(
                    f"Access to the {self._location()} was denied: {e}"
                ) from e
            raise ConnectivityError(
                f"Failed to connect to the {self._location()}: {e}"
            ) from e
        except BotoCoreError as e:
            raise ConnectivityError(
                f"Failed to connect to the {self._location()}: {e}"
            ) from e
