"""Upload target definitions."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from ..exceptions import ConfigurationError
from .keys import check_relative_path

TARGET_FIELDS = ("path", "recursive", "keep", "override")


@dataclass(frozen=True)
class TargetDefaults:
    """Target-level defaults applied to path entries which omit a field."""

    recursive: bool = True
    keep: bool = False
    override: bool = False


@dataclass(frozen=True)
class UploadTarget:
    """One configured path of the build directory to upload.

    Examples:
        >>> target = UploadTarget(root=Path("/site/dist"), path="_astro")
        >>> target.local_path
        PosixPath('/site/dist/_astro')
    """

    root: Path
    """Build directory the path is relative to"""

    path: str
    """Path relative to the build directory (forward slashes)"""

    recursive: bool = True
    """Whether to upload files in subdirectories"""

    keep: bool = False
    """Whether to keep the local files after uploading"""

    override: bool = False
    """Whether to replace remote objects even when the size matches"""

    @property
    def local_path(self) -> Path:
        """Absolute local path of the target."""
        return self.root / self.path

    @classmethod
    def from_dict(
        cls,
        data: Union[str, dict[str, Any]],
        root: Union[Path, str],
        defaults: Optional[TargetDefaults] = None,
    ) -> "UploadTarget":
        """Create an upload target from a path entry.

        A string entry is shorthand for ``{"path": entry}``. Fields missing
        from a dictionary entry fall back to ``defaults``.

        Args:
            data: Path entry from the options
            root: Build directory
            defaults: Target-level defaults

        Returns:
            UploadTarget instance

        Raises:
            ConfigurationError: If the entry is malformed
            InvalidPathError: If the path escapes the build directory

        Examples:
            >>> UploadTarget.from_dict("assets", "/dist").recursive
            True
            >>> UploadTarget.from_dict({"path": "img", "keep": True}, "/dist").keep
            True
        """
        defaults = defaults or TargetDefaults()

        if isinstance(data, str):
            data = {"path": data}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Path entry must be a string or an object, got {type(data).__name__}"
            )

        unknown = sorted(set(data) - set(TARGET_FIELDS))
        if unknown:
            raise ConfigurationError(
                f"Unknown field(s) in path entry: {', '.join(unknown)}"
            )

        path = data.get("path")
        if not isinstance(path, str):
            raise ConfigurationError("Path entry requires a 'path' string")

        flags: dict[str, bool] = {}
        for name in ("recursive", "keep", "override"):
            value = data.get(name)
            if value is None:
                value = getattr(defaults, name)
            if not isinstance(value, bool):
                raise ConfigurationError(
                    f"'{name}' of path {path!r} must be a boolean"
                )
            flags[name] = value

        return cls(root=Path(root), path=check_relative_path(path), **flags)

    def to_dict(self) -> dict[str, Any]:
        """Convert the target to a path entry dictionary."""
        return {
            "path": self.path,
            "recursive": self.recursive,
            "keep": self.keep,
            "override": self.override,
        }
