"""Directory scanning utilities for upload targets."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..exceptions import ConfigurationError
from ..utils import is_hidden

logger = logging.getLogger(__name__)


@dataclass
class LocalFile:
    """Represents a local file with metadata."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Path relative to the build directory (forward slashes on all platforms)"""

    size: int
    """File size in bytes"""

    @classmethod
    def from_path(cls, file_path: Path, base_path: Path) -> "LocalFile":
        """Create LocalFile from a path.

        Args:
            file_path: Absolute path to the file
            base_path: Base path for calculating relative paths

        Returns:
            LocalFile instance
        """
        stat = file_path.stat()
        # Use as_posix() to ensure forward slashes on all platforms
        relative_path = file_path.relative_to(base_path).as_posix()

        return cls(
            path=file_path,
            relative_path=relative_path,
            size=stat.st_size,
        )


class DirectoryScanner:
    """Walks an upload target and yields the files to upload.

    Entries whose name starts with a dot are skipped at every level.
    Subdirectories are only entered when walking recursively. Directories
    themselves are never yielded.

    Errors are not swallowed: a missing target raises ConfigurationError
    and a permission error on any entry aborts the walk.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> for f in scanner.walk(Path("/site/dist"), "assets", recursive=True):
        ...     print(f.relative_path)
    """

    def __init__(self, skip_hidden: bool = True):
        """Initialize directory scanner.

        Args:
            skip_hidden: Whether to skip files/folders starting with a dot
        """
        self.skip_hidden = skip_hidden

    def should_skip(self, path: Path) -> bool:
        """Check if a directory entry should be skipped."""
        return self.skip_hidden and is_hidden(path.name)

    def walk(
        self, root: Path, sub_path: str, recursive: bool = True
    ) -> Iterator[LocalFile]:
        """Yield the files of ``root / sub_path``.

        The filesystem is read lazily; every call starts a new walk.

        Args:
            root: Build directory, used as the base for relative paths
            sub_path: Target path relative to ``root``
            recursive: Whether to descend into subdirectories

        Yields:
            LocalFile objects in sorted name order

        Raises:
            ConfigurationError: If ``root / sub_path`` does not exist
            PermissionError: If an entry cannot be read
        """
        target = root / sub_path
        if not target.exists():
            raise ConfigurationError(f"Upload path does not exist: {target}")

        if not target.is_dir():
            yield LocalFile.from_path(target, root)
            return

        yield from self._walk_directory(target, root, recursive)

    def _walk_directory(
        self, directory: Path, root: Path, recursive: bool
    ) -> Iterator[LocalFile]:
        for item in sorted(directory.iterdir(), key=lambda p: p.name):
            if self.should_skip(item):
                logger.debug("Skipping hidden entry: %s", item)
                continue

            if item.is_dir():
                if recursive:
                    yield from self._walk_directory(item, root, recursive)
            elif item.is_file():
                yield LocalFile.from_path(item, root)


def walk(
    root: Union[Path, str], sub_path: str, recursive: bool = True
) -> Iterator[LocalFile]:
    """Walk an upload target with the default scanner.

    Args:
        root: Build directory
        sub_path: Target path relative to ``root``
        recursive: Whether to descend into subdirectories

    Returns:
        Iterator of LocalFile objects
    """
    return DirectoryScanner().walk(Path(root), sub_path, recursive)
