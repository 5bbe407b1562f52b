"""Storage key normalization.

Local relative paths are turned into forward-slash separated object keys,
independent of the host path separator. Paths which climb out of the build
directory are rejected.
"""

from pathlib import PurePosixPath, PureWindowsPath

from ..exceptions import InvalidPathError

PARENT_DIR = ".."


def _segments(path: str) -> list[str]:
    """Split a path on both separators, dropping empty and ``.`` segments."""
    parts = path.replace("\\", "/").split("/")
    return [part for part in parts if part not in ("", ".")]


def check_relative_path(path: str) -> str:
    """Validate a configured target path.

    Args:
        path: Path relative to the build directory

    Returns:
        The path with forward slashes and without empty segments

    Raises:
        InvalidPathError: If the path is absolute or contains ``..``

    Examples:
        >>> check_relative_path("assets\\\\images")
        'assets/images'
        >>> check_relative_path("./_astro/")
        '_astro'
    """
    if PurePosixPath(path).is_absolute() or PureWindowsPath(path).is_absolute():
        raise InvalidPathError(
            path, f"Only paths relative to the build directory are allowed: {path!r}"
        )

    segments = _segments(path)
    if PARENT_DIR in segments:
        raise InvalidPathError(path)
    if not segments:
        raise InvalidPathError(
            path, f"Path must name an entry in the build directory: {path!r}"
        )
    return "/".join(segments)


def normalize_key(root_prefix: str, relative_path: str) -> str:
    """Build the storage key for a file.

    Args:
        root_prefix: Root directory in the bucket ("" for the bucket root)
        relative_path: Path of the file relative to the build directory

    Returns:
        Normalized storage key

    Raises:
        InvalidPathError: If either part contains a ``..`` segment

    Examples:
        >>> normalize_key("", "assets\\\\a.png")
        'assets/a.png'
        >>> normalize_key("/blog/", "./images//logo.png")
        'blog/images/logo.png'
    """
    prefix = _segments(root_prefix)
    segments = _segments(relative_path)

    if PARENT_DIR in segments:
        raise InvalidPathError(relative_path)
    if PARENT_DIR in prefix:
        raise InvalidPathError(root_prefix)

    return "/".join(prefix + segments)
