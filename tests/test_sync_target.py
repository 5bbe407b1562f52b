"""Tests for upload targets."""

from pathlib import Path

import pytest

from pys3uploader.exceptions import ConfigurationError, InvalidPathError
from pys3uploader.sync.target import TargetDefaults, UploadTarget


class TestUploadTarget:
    """Tests for UploadTarget."""

    def test_defaults(self):
        """Test default flags."""
        target = UploadTarget(root=Path("/dist"), path="assets")
        assert target.recursive is True
        assert target.keep is False
        assert target.override is False

    def test_local_path(self):
        """Test the local path is below the build directory."""
        target = UploadTarget(root=Path("/dist"), path="assets/img")
        assert target.local_path == Path("/dist") / "assets" / "img"

    def test_to_dict(self):
        """Test converting a target to a path entry."""
        target = UploadTarget(root=Path("/dist"), path="img", keep=True)
        assert target.to_dict() == {
            "path": "img",
            "recursive": True,
            "keep": True,
            "override": False,
        }


class TestFromDict:
    """Tests for UploadTarget.from_dict."""

    def test_string_entry(self):
        """A string entry is a path with default flags."""
        target = UploadTarget.from_dict("_astro", "/dist")
        assert target.path == "_astro"
        assert target.root == Path("/dist")
        assert target.recursive is True

    def test_dict_entry(self):
        """All fields of an object entry are read."""
        target = UploadTarget.from_dict(
            {"path": "img", "recursive": False, "keep": True, "override": True},
            "/dist",
        )
        assert target.path == "img"
        assert target.recursive is False
        assert target.keep is True
        assert target.override is True

    def test_defaults_cascade(self):
        """Missing fields fall back to the target defaults."""
        defaults = TargetDefaults(recursive=False, keep=True, override=True)

        target = UploadTarget.from_dict({"path": "img", "keep": False}, "/d", defaults)

        assert target.recursive is False
        assert target.keep is False
        assert target.override is True

    def test_path_normalized(self):
        """The path is stored with forward slashes."""
        target = UploadTarget.from_dict("assets\\images\\", "/dist")
        assert target.path == "assets/images"

    def test_parent_path_rejected(self):
        """Paths climbing out of the build directory are rejected."""
        with pytest.raises(InvalidPathError):
            UploadTarget.from_dict({"path": "../secrets"}, "/dist")

    def test_unknown_field_rejected(self):
        """Unknown fields are reported."""
        with pytest.raises(ConfigurationError, match="recurse"):
            UploadTarget.from_dict({"path": "img", "recurse": True}, "/dist")

    def test_missing_path_rejected(self):
        """An object entry needs a path."""
        with pytest.raises(ConfigurationError, match="'path'"):
            UploadTarget.from_dict({"keep": True}, "/dist")

    def test_non_boolean_flag_rejected(self):
        """Flags must be booleans."""
        with pytest.raises(ConfigurationError, match="'keep'"):
            UploadTarget.from_dict({"path": "img", "keep": "yes"}, "/dist")

    @pytest.mark.parametrize("entry", [42, None, ["img"]])
    def test_invalid_entry_type_rejected(self, entry):
        """Entries must be strings or objects."""
        with pytest.raises(ConfigurationError, match="string or an object"):
            UploadTarget.from_dict(entry, "/dist")
