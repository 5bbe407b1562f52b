"""CLI interface for the S3 uploader."""

import dataclasses
import logging
from pathlib import Path
from typing import Any, Optional

import click

from .config import UploaderOptions, load_options_from_json
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    TransferError,
    UploaderError,
)
from .hooks import create_storage_client, upload_build_output
from .output import OutputFormatter

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "uploader.json"


def _load_options(
    ctx: Any,
    config_file: str,
    access_key: Optional[str],
    secret_access_key: Optional[str],
) -> UploaderOptions:
    """Load options and apply credentials given on the command line."""
    out: OutputFormatter = ctx.obj["out"]

    try:
        options = load_options_from_json(config_file)
    except ConfigurationError as e:
        out.error(str(e))
        ctx.exit(1)

    if access_key is not None or secret_access_key is not None:
        if access_key is None or secret_access_key is None:
            out.error("--access-key and --secret-access-key must be given together")
            ctx.exit(1)
        options = dataclasses.replace(
            options, access_key=access_key, secret_access_key=secret_access_key
        )
    return options


def credential_options(func: Any) -> Any:
    """Add the credential options shared by all commands."""
    func = click.option(
        "--secret-access-key",
        envvar="PYS3UPLOADER_SECRET_ACCESS_KEY",
        help="Secret access key (overrides the options file)",
    )(func)
    func = click.option(
        "--access-key",
        envvar="PYS3UPLOADER_ACCESS_KEY",
        help="Access key ID (overrides the options file)",
    )(func)
    func = click.option(
        "--config",
        "-c",
        "config_file",
        type=click.Path(dir_okay=False),
        default=DEFAULT_CONFIG_FILE,
        show_default=True,
        help="JSON file with the uploader options",
    )(func)
    return func


@click.group()
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(package_name="pys3uploader")
@click.pass_context
def main(ctx: Any, quiet: bool, json: bool, verbose: bool) -> None:
    """PyS3Uploader - Upload static build output to S3 compatible storage."""
    ctx.ensure_object(dict)
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pys3uploader").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)


@main.command()
@click.argument(
    "build_dir", type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@credential_options
@click.option(
    "--dry-run", is_flag=True, help="Show what would be uploaded without uploading"
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Number of parallel uploads (default: 'concurrency' option or 4)",
)
@click.pass_context
def upload(
    ctx: Any,
    build_dir: Path,
    config_file: str,
    access_key: Optional[str],
    secret_access_key: Optional[str],
    dry_run: bool,
    workers: Optional[int],
) -> None:
    """Upload the configured paths of BUILD_DIR to the bucket.

    Only new or changed files are uploaded. Paths without the 'keep'
    option are removed locally once all their files were uploaded.

    Examples:
        pys3uploader upload dist                     # Uses ./uploader.json
        pys3uploader upload dist -c site.json        # Custom options file
        pys3uploader upload dist --dry-run           # Preview changes
        pys3uploader upload dist -w 8                # 8 parallel uploads
    """
    out: OutputFormatter = ctx.obj["out"]
    options = _load_options(ctx, config_file, access_key, secret_access_key)

    try:
        stats = upload_build_output(
            build_dir,
            options,
            output=out,
            dry_run=dry_run,
            max_workers=workers,
        )
    except KeyboardInterrupt:
        out.warning("\nUpload cancelled by user")
        ctx.exit(130)
    except ConfigurationError as e:
        out.error(f"Configuration error: {e}")
        ctx.exit(1)
    except ConnectivityError as e:
        out.error(f"Connection check failed: {e}")
        ctx.exit(1)
    except TransferError as e:
        out.error(f"Upload aborted: {e}")
        ctx.exit(1)
    except UploaderError as e:
        out.error(str(e))
        ctx.exit(1)

    if out.json_output:
        out.output_json(stats if stats is not None else {"enabled": False})


@main.command()
@credential_options
@click.pass_context
def check(
    ctx: Any,
    config_file: str,
    access_key: Optional[str],
    secret_access_key: Optional[str],
) -> None:
    """Validate the options file and verify the S3 credentials."""
    out: OutputFormatter = ctx.obj["out"]
    options = _load_options(ctx, config_file, access_key, secret_access_key)

    if not options.enable:
        out.info("Uploading is disabled in the options file.")
        return

    try:
        client = create_storage_client(options, out)
        out.info("Try to verify the S3 credentials.")
        client.check_connectivity()
    except UploaderError as e:
        out.error(f"Connection check failed: {e}")
        ctx.exit(1)

    if out.json_output:
        out.output_json(
            {
                "bucket": options.bucket,
                "region": options.region,
                "endpoint": options.endpoint,
                "connected": True,
            }
        )
    else:
        out.success(f"Bucket {options.bucket} is reachable.")
