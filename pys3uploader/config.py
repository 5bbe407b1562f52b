"""Uploader options.

Options are read from a JSON file (or any dictionary) using camelCase keys:

.. code-block:: json

    {
        "paths": ["_astro", {"path": "images", "keep": true}],
        "bucket": "my-site",
        "endpoint": "https://<account>.r2.cloudflarestorage.com",
        "root": "blog",
        "accessKey": "...",
        "secretAccessKey": "..."
    }

Each path entry is either a string or an object with ``path``,
``recursive``, ``keep`` and ``override``; fields missing from an entry
fall back to the top-level ``recursive``/``keep``/``override`` options.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union
from urllib.parse import urlparse

from .exceptions import ConfigurationError
from .sync.target import TargetDefaults, UploadTarget
from .utils import DEFAULT_MAX_WORKERS, DEFAULT_REGION

logger = logging.getLogger(__name__)

KNOWN_KEYS = frozenset(
    {
        "enable",
        "paths",
        "recursive",
        "keep",
        "override",
        "region",
        "endpoint",
        "bucket",
        "root",
        "accessKey",
        "secretAccessKey",
        "resyncOnSizeMismatch",
        "concurrency",
    }
)

PathEntry = Union[str, dict[str, Any]]


@dataclass
class UploaderOptions:
    """Validated uploader options."""

    paths: list[PathEntry] = field(default_factory=list)
    """Path entries relative to the build directory"""

    bucket: str = ""
    """Bucket name"""

    region: Optional[str] = None
    """Region (set for AWS S3; "auto" when only an endpoint is given)"""

    endpoint: Optional[str] = None
    """Endpoint URL (set for 3rd-party S3 compatible services)"""

    root: str = ""
    """Root directory in the bucket"""

    access_key: Optional[str] = None
    """Access key ID"""

    secret_access_key: Optional[str] = None
    """Secret access key"""

    defaults: TargetDefaults = field(default_factory=TargetDefaults)
    """Defaults for path entries"""

    resync_on_size_mismatch: bool = True
    """Replace remote objects whose size differs from the local file"""

    concurrency: int = DEFAULT_MAX_WORKERS
    """Parallel uploads per path entry"""

    enable: bool = True
    """Whether uploading is enabled"""

    @property
    def has_credentials(self) -> bool:
        """Whether explicit credentials were configured."""
        return self.access_key is not None and self.secret_access_key is not None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploaderOptions":
        """Create options from a dictionary.

        Every problem found is reported, not only the first one.

        Args:
            data: Options with camelCase keys

        Returns:
            UploaderOptions instance

        Raises:
            ConfigurationError: If the options are invalid
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Uploader options must be an object")

        enable = data.get("enable", True)
        if enable is False:
            return cls(enable=False)

        issues: list[str] = []

        unknown = sorted(set(data) - KNOWN_KEYS)
        if unknown:
            issues.append(f"Unknown option(s): {', '.join(unknown)}")
        if not isinstance(enable, bool):
            issues.append("'enable' must be a boolean")

        flags: dict[str, bool] = {}
        for key, name, default in (
            ("recursive", "recursive", True),
            ("keep", "keep", False),
            ("override", "override", False),
            ("resyncOnSizeMismatch", "resync_on_size_mismatch", True),
        ):
            value = data.get(key, default)
            if not isinstance(value, bool):
                issues.append(f"'{key}' must be a boolean")
                value = default
            flags[name] = value

        defaults = TargetDefaults(
            recursive=flags["recursive"], keep=flags["keep"], override=flags["override"]
        )

        paths = data.get("paths")
        if not isinstance(paths, list) or not paths:
            issues.append("'paths' must be a list with at least one entry")
            paths = []
        for entry in paths:
            try:
                # Validates the entry shape and rejects parent directories
                UploadTarget.from_dict(entry, Path("."), defaults)
            except ConfigurationError as e:
                issues.append(str(e))

        bucket = data.get("bucket")
        if not isinstance(bucket, str) or not bucket.strip():
            issues.append("'bucket' must be a non-empty string")
            bucket = ""

        root = data.get("root", "")
        if not isinstance(root, str):
            issues.append("'root' must be a string")
            root = ""
        elif ".." in root.replace("\\", "/").split("/"):
            issues.append(f"'root' must not contain parent directories: {root!r}")

        region = _optional_string(data, "region", issues)
        endpoint = _optional_string(data, "endpoint", issues)
        if endpoint is not None:
            parsed = urlparse(endpoint)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                issues.append(f"'endpoint' must be an http(s) URL: {endpoint!r}")
        if region is None and endpoint is None:
            issues.append("Either the region or the endpoint should be provided")
        elif region is None:
            # S3 compatible services require a region even though they ignore it
            region = DEFAULT_REGION

        access_key = _optional_string(data, "accessKey", issues)
        secret_access_key = _optional_string(data, "secretAccessKey", issues)
        if (access_key is None) != (secret_access_key is None):
            issues.append("'accessKey' and 'secretAccessKey' must be set together")

        concurrency = data.get("concurrency", DEFAULT_MAX_WORKERS)
        if (
            isinstance(concurrency, bool)
            or not isinstance(concurrency, int)
            or concurrency < 1
        ):
            issues.append("'concurrency' must be a positive integer")
            concurrency = DEFAULT_MAX_WORKERS

        if issues:
            raise ConfigurationError(
                f"Uploader options validation error, there are {len(issues)} "
                "error(s):\n" + "\n".join(f"  - {issue}" for issue in issues)
            )

        return cls(
            paths=list(paths),
            bucket=bucket,
            region=region,
            endpoint=endpoint,
            root=root,
            access_key=access_key,
            secret_access_key=secret_access_key,
            defaults=defaults,
            resync_on_size_mismatch=flags["resync_on_size_mismatch"],
            concurrency=concurrency,
            enable=True,
        )

    def targets(self, build_dir: Union[Path, str]) -> list[UploadTarget]:
        """Build the upload targets for a build directory.

        Args:
            build_dir: Absolute path of the build output directory

        Returns:
            List of UploadTarget objects, in configuration order
        """
        return [
            UploadTarget.from_dict(entry, Path(build_dir), self.defaults)
            for entry in self.paths
        ]


def _optional_string(
    data: dict[str, Any], key: str, issues: list[str]
) -> Optional[str]:
    """Read an optional string option; blank strings count as missing."""
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        issues.append(f"'{key}' must be a string")
        return None
    value = value.strip()
    return value or None


def load_options_from_json(path: Union[Path, str]) -> UploaderOptions:
    """Load uploader options from a JSON file.

    Args:
        path: Path to the JSON file

    Returns:
        UploaderOptions instance

    Raises:
        ConfigurationError: If the file cannot be read or the options are invalid
    """
    path = Path(path)
    logger.debug("Loading uploader options from %s", path)

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot read options file {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in options file {path}: {e}") from e

    return UploaderOptions.from_dict(data)
