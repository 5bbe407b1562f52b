"""Core sync engine for uploading build output to the bucket."""

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import CleanupError, ConfigurationError
from ..output import OutputFormatter
from ..storage import StorageClient
from ..utils import DEFAULT_MAX_WORKERS
from .comparator import ExistenceResolver, SyncAction, SyncDecision
from .keys import check_relative_path, normalize_key
from .operations import SyncOperations
from .scanner import DirectoryScanner, LocalFile
from .target import UploadTarget

logger = logging.getLogger(__name__)


class SyncPhase(str, Enum):
    """Phases of a sync run."""

    IDLE = "idle"
    VERIFYING_CREDENTIALS = "verifying-credentials"
    WALKING = "walking"
    UPLOADING = "uploading"
    """Resolving and uploading; one key is stat-ed, replaced and written
    by the same worker"""
    CLEANUP = "cleanup"
    DONE = "done"


class SyncEngine:
    """Core sync engine that uploads upload targets to the bucket."""

    def __init__(
        self,
        client: StorageClient,
        output: Optional[OutputFormatter] = None,
        root_prefix: str = "",
        resync_on_size_mismatch: bool = True,
        max_workers: int = DEFAULT_MAX_WORKERS,
        scanner: Optional[DirectoryScanner] = None,
    ):
        """Initialize sync engine.

        Args:
            client: Storage client
            output: Output formatter for displaying progress/status
            root_prefix: Root directory in the bucket
            resync_on_size_mismatch: Replace remote objects whose size differs
                from the local file even without ``override``
            max_workers: Number of parallel uploads per target (1 = sequential)
            scanner: Directory scanner used to walk the targets
        """
        self.client = client
        self.output = output or OutputFormatter()
        self.root_prefix = root_prefix
        self.resync_on_size_mismatch = resync_on_size_mismatch
        self.max_workers = max(1, max_workers)
        self.scanner = scanner or DirectoryScanner()
        self.operations = SyncOperations(client)
        self.phase = SyncPhase.IDLE

    def run(self, targets: Sequence[UploadTarget], dry_run: bool = False) -> dict:
        """Upload all targets, in order.

        Args:
            targets: Upload targets
            dry_run: If True, only show what would be done. Nothing is
                deleted, written or removed.

        Returns:
            Dictionary with sync statistics

        Raises:
            ConfigurationError: If the targets are invalid (before any
                storage call)
            ConnectivityError: If the bucket cannot be reached
            TransferError: If a file cannot be uploaded; the run stops and
                the local files of the current target are kept

        Examples:
            >>> engine = SyncEngine(S3StorageClient("my-bucket", region="auto"))
            >>> stats = engine.run([UploadTarget(Path("dist"), "assets")])
            >>> print(f"Uploaded {stats['uploads']} files")
        """
        self.phase = SyncPhase.IDLE
        self.validate_targets(targets)

        self.phase = SyncPhase.VERIFYING_CREDENTIALS
        if not self.output.quiet:
            self.output.info("Try to verify the S3 credentials.")
        self.client.check_connectivity()

        if dry_run and not self.output.quiet:
            self.output.info("Dry run: No changes will be made")

        resolver = ExistenceResolver(
            self.client,
            resync_on_size_mismatch=self.resync_on_size_mismatch,
            dry_run=dry_run,
        )
        stats = self._create_empty_stats()
        start_time = time.time()

        for target in targets:
            self._sync_target(target, resolver, stats, dry_run)
            stats["targets"] += 1

        self.phase = SyncPhase.DONE
        logger.debug("Sync finished in %.2fs", time.time() - start_time)

        if not self.output.quiet:
            self._display_summary(stats, dry_run)

        return stats

    def validate_targets(self, targets: Sequence[UploadTarget]) -> None:
        """Check the targets without touching the bucket.

        Raises:
            ConfigurationError: If there are no targets, a path escapes the
                build directory, a path does not exist, or a path lies inside
                an earlier target whose local files are removed
        """
        if not targets:
            raise ConfigurationError("At least one upload path is required")

        # Validates the prefix as well
        normalize_key(self.root_prefix, "")

        # Normalized paths of earlier targets removed after uploading
        removed_paths: list[str] = []
        for target in targets:
            path = check_relative_path(target.path)
            if not target.local_path.exists():
                raise ConfigurationError(
                    f"Upload path does not exist: {target.local_path}"
                )

            for earlier in removed_paths:
                if path == earlier or path.startswith(earlier + "/"):
                    raise ConfigurationError(
                        f"Path {path!r} is removed after uploading "
                        f"{earlier!r}; set 'keep' on {earlier!r} "
                        "or drop the duplicate entry"
                    )
            if not target.keep:
                removed_paths.append(path)

    def _create_empty_stats(self) -> dict:
        """Create an empty statistics dictionary.

        Returns:
            Dictionary with zero counts for all stat categories
        """
        return {
            "uploads": 0,
            "replaced": 0,
            "skips": 0,
            "removed": 0,
            "cleanup_failures": 0,
            "targets": 0,
        }

    def _scan_target(self, target: UploadTarget) -> list[LocalFile]:
        """Walk a target with a transient spinner.

        Args:
            target: Upload target

        Returns:
            List of local files
        """
        self.phase = SyncPhase.WALKING
        scan_start = time.time()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            disable=self.output.quiet,
        ) as progress:
            task = progress.add_task(f"Scanning {target.path}...", total=None)
            local_files = list(
                self.scanner.walk(target.root, target.path, target.recursive)
            )
            progress.update(
                task, description=f"Found {len(local_files)} local file(s)"
            )

        logger.debug(
            "Local scan of %s took %.2fs for %d files",
            target.path,
            time.time() - scan_start,
            len(local_files),
        )
        return local_files

    def _sync_target(
        self,
        target: UploadTarget,
        resolver: ExistenceResolver,
        stats: dict,
        dry_run: bool,
    ) -> None:
        """Upload one target and clean up its local files.

        Args:
            target: Upload target
            resolver: Existence resolver
            stats: Statistics dictionary (modified in place)
            dry_run: Whether this is a dry run
        """
        local_files = self._scan_target(target)

        self.phase = SyncPhase.UPLOADING
        if self.max_workers > 1 and len(local_files) > 1:
            self._sync_files_parallel(local_files, target, resolver, stats, dry_run)
        else:
            for local_file in local_files:
                decision = self._sync_file(local_file, target, resolver, dry_run)
                self._record_decision(stats, decision)

        if not target.keep:
            self.phase = SyncPhase.CLEANUP
            self._cleanup_target(target, stats, dry_run)

    def _sync_files_parallel(
        self,
        local_files: list[LocalFile],
        target: UploadTarget,
        resolver: ExistenceResolver,
        stats: dict,
        dry_run: bool,
    ) -> None:
        """Sync files in parallel using ThreadPoolExecutor.

        The first failure cancels the files which have not started yet and
        is re-raised once the running uploads have finished.
        """
        logger.debug(
            "Syncing %d files of %s with %d workers",
            len(local_files),
            target.path,
            self.max_workers,
        )

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = {
                executor.submit(self._sync_file, f, target, resolver, dry_run): f
                for f in local_files
            }
            for future in as_completed(futures):
                self._record_decision(stats, future.result())
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _sync_file(
        self,
        local_file: LocalFile,
        target: UploadTarget,
        resolver: ExistenceResolver,
        dry_run: bool,
    ) -> SyncDecision:
        """Resolve and upload a single file.

        Returns:
            The decision taken for the file
        """
        key = normalize_key(self.root_prefix, local_file.relative_path)
        decision = resolver.resolve(key, local_file.size, target.override)

        if not decision.needs_upload:
            if not self.output.quiet:
                self.output.info(f"{key} exists on backend, skip.")
            return decision

        if dry_run:
            if not self.output.quiet:
                self.output.info(
                    f"Would upload file: {key} "
                    f"({self.output.format_size(local_file.size)}, {decision.reason})"
                )
            return decision

        if not self.output.quiet:
            self.output.info(f"Start to upload file: {key}")
        start = time.time()
        self.operations.upload_file(local_file, key)
        logger.debug("Uploaded %s in %.2fs", key, time.time() - start)
        return decision

    def _record_decision(self, stats: dict, decision: SyncDecision) -> None:
        if decision.action == SyncAction.UPLOAD:
            stats["uploads"] += 1
        elif decision.action == SyncAction.REPLACE:
            stats["replaced"] += 1
        else:
            stats["skips"] += 1

    def _cleanup_target(self, target: UploadTarget, stats: dict, dry_run: bool) -> None:
        """Remove the local files of an uploaded target.

        Failures are reported and counted but never abort the run.
        """
        if dry_run:
            if not self.output.quiet:
                self.output.info(f"Would remove local path: {target.local_path}")
            return

        try:
            self.operations.remove_local_tree(target)
        except CleanupError as e:
            logger.error("Cleanup of %s failed: %s", target.local_path, e)
            self.output.error(str(e))
            stats["cleanup_failures"] += 1
            return

        stats["removed"] += 1

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        self.output.print("")
        if dry_run:
            self.output.info("Dry run summary:")
        else:
            self.output.success("Upload complete.")

        if stats["uploads"] > 0:
            self.output.info(f"  ↑ Uploaded: {stats['uploads']} file(s)")
        if stats["replaced"] > 0:
            self.output.info(f"  ↻ Replaced: {stats['replaced']} file(s)")
        if stats["skips"] > 0:
            self.output.info(f"  = Skipped: {stats['skips']} file(s)")
        if stats["removed"] > 0:
            self.output.info(f"  ✗ Removed locally: {stats['removed']} path(s)")
        if stats["cleanup_failures"] > 0:
            self.output.warning(
                f"  ⚠ Failed to remove: {stats['cleanup_failures']} path(s)"
            )
