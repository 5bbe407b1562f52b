"""Entry point for build pipelines.

A static-site build calls :func:`upload_build_output` once, after the
assets have been written to the output directory.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import UploaderOptions
from .output import OutputFormatter
from .storage import S3StorageClient, StorageClient
from .sync import SyncEngine

logger = logging.getLogger(__name__)


def create_storage_client(
    options: UploaderOptions, output: OutputFormatter
) -> S3StorageClient:
    """Create the S3 storage client for the configured bucket.

    Args:
        options: Validated uploader options
        output: Output formatter for warnings

    Returns:
        S3StorageClient instance
    """
    if not options.has_credentials:
        output.warning(
            "No credentials is provided. If you are using the IAM role, "
            "you can ignore this warning."
        )

    return S3StorageClient(
        bucket=options.bucket,
        region=options.region,
        endpoint=options.endpoint,
        access_key=options.access_key,
        secret_access_key=options.secret_access_key,
    )


def upload_build_output(
    build_dir: Union[Path, str],
    options: UploaderOptions,
    output: Optional[OutputFormatter] = None,
    client: Optional[StorageClient] = None,
    dry_run: bool = False,
    max_workers: Optional[int] = None,
) -> Optional[dict]:
    """Upload the configured paths of a finished build.

    Args:
        build_dir: Build output directory
        options: Validated uploader options
        output: Output formatter (defaults to a new one)
        client: Storage client (defaults to an S3 client built from options)
        dry_run: If True, only show what would be done
        max_workers: Overrides the configured concurrency

    Returns:
        Sync statistics, or None when uploading is disabled

    Raises:
        ConfigurationError: If a path is invalid or missing
        ConnectivityError: If the bucket cannot be reached
        TransferError: If a file cannot be uploaded
    """
    output = output or OutputFormatter()

    if not options.enable:
        output.info("Skip uploading the build assets to S3 storage.")
        return None

    build_dir = Path(build_dir).resolve()
    # Resolve targets before any network activity
    targets = options.targets(build_dir)
    logger.debug("Upload targets: %s", [t.to_dict() for t in targets])

    if client is None:
        client = create_storage_client(options, output)

    engine = SyncEngine(
        client,
        output,
        root_prefix=options.root,
        resync_on_size_mismatch=options.resync_on_size_mismatch,
        max_workers=max_workers or options.concurrency,
    )

    if not output.quiet:
        output.info(
            f"Start to upload files to S3 [or S3 compatible] bucket {options.bucket}."
        )
    return engine.run(targets, dry_run=dry_run)
