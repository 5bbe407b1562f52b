"""Utility functions for the S3 uploader."""

import mimetypes
from typing import Optional

# =============================================================================
# Constants
# =============================================================================

# Region used by S3 compatible services which ignore the region
DEFAULT_REGION: str = "auto"

# Number of parallel uploads per target
DEFAULT_MAX_WORKERS: int = 4

# Prefix marking hidden files and directories
HIDDEN_PREFIX: str = "."

# Content types of precompressed files, by mimetypes encoding name
ENCODING_CONTENT_TYPES: dict[str, str] = {
    "gzip": "application/gzip",
    "br": "application/x-brotli",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
}


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"


# =============================================================================
# Content type utilities
# =============================================================================


def guess_content_type(key: str) -> Optional[str]:
    """Guess the content type of an object from the extension of its key.

    Precompressed files (".gz", ".br", ...) get the type of the compression
    format, not the type of the file inside.

    Args:
        key: Storage key (e.g., "assets/logo.png")

    Returns:
        MIME type string, or None when the extension is unknown

    Examples:
        >>> guess_content_type("assets/logo.png")
        'image/png'
        >>> guess_content_type("assets/bundle.js.gz")
        'application/gzip'
        >>> guess_content_type("assets/LICENSE") is None
        True
    """
    mime_type, encoding = mimetypes.guess_type(key, strict=False)
    if encoding is not None:
        return ENCODING_CONTENT_TYPES.get(encoding)
    return mime_type


def is_hidden(name: str) -> bool:
    """Check if a file or directory name is hidden (starts with a dot).

    Examples:
        >>> is_hidden(".DS_Store")
        True
        >>> is_hidden("index.html")
        False
    """
    return name.startswith(HIDDEN_PREFIX)
