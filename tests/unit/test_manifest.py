"""Tests for manifest version reading and writing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from release_flow.exceptions import ProjectError, VersionNotFoundError
from release_flow.project.manifest import (
    find_manifest,
    get_manifest_name,
    get_manifest_version,
    read_package_json,
    update_manifest_version,
)

PYPROJECT = """\
[build-system]
requires = ["hatchling"]
version = "9.9.9"

[project]
name = "demo"
# current release
version = "1.2.3"
dependencies = []

[tool.other]
version = "0.0.1"
"""


class TestFindManifest:
    """Tests for find_manifest()."""

    def test_prefers_package_json(self, tmp_path: Path):
        """package.json is checked before pyproject.toml."""
        (tmp_path / "pyproject.toml").write_text("[project]\n")
        (tmp_path / "package.json").write_text("{}")

        assert find_manifest(tmp_path) == tmp_path / "package.json"

    def test_none(self, tmp_path: Path):
        """A directory without a manifest gives None."""
        assert find_manifest(tmp_path) is None


class TestPackageJson:
    """Tests for package.json handling."""

    def test_read_version(self, tmp_path: Path):
        """The version field is read."""
        path = tmp_path / "package.json"
        path.write_text('{"name": "x", "version": "0.3.0"}')

        assert get_manifest_version(path) == "0.3.0"

    def test_read_invalid_json(self, tmp_path: Path):
        """Broken JSON is a ProjectError."""
        path = tmp_path / "package.json"
        path.write_text("{not json")

        with pytest.raises(ProjectError):
            read_package_json(path)

    def test_read_non_object(self, tmp_path: Path):
        """A JSON array is not a manifest."""
        path = tmp_path / "package.json"
        path.write_text("[]")

        with pytest.raises(ProjectError, match="JSON object"):
            read_package_json(path)

    def test_update_keeps_indent_and_newline(self, tmp_path: Path):
        """Indentation and the trailing newline survive an update."""
        path = tmp_path / "package.json"
        path.write_text(json.dumps({"name": "x", "version": "1.0.0"}, indent=4) + "\n")

        update_manifest_version(path, "1.1.0")
        content = path.read_text()

        assert json.loads(content)["version"] == "1.1.0"
        assert '\n    "version": "1.1.0"' in content
        assert content.endswith("}\n")

    def test_update_without_version(self, tmp_path: Path):
        """A manifest without a version field is not modified."""
        path = tmp_path / "package.json"
        path.write_text('{"name": "x"}')

        with pytest.raises(VersionNotFoundError):
            update_manifest_version(path, "1.0.0")


class TestPyproject:
    """Tests for pyproject.toml handling."""

    def test_read_version(self, tmp_path: Path):
        """[project].version is read."""
        path = tmp_path / "pyproject.toml"
        path.write_text(PYPROJECT)

        assert get_manifest_version(path) == "1.2.3"

    def test_read_poetry_version(self, tmp_path: Path):
        """[tool.poetry].version is the fallback."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool.poetry]\nname = "x"\nversion = "0.4.0"\n')

        assert get_manifest_version(path) == "0.4.0"

    def test_read_missing_version(self, tmp_path: Path):
        """No version anywhere raises VersionNotFoundError."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n')

        with pytest.raises(VersionNotFoundError):
            get_manifest_version(path)

    def test_update_only_project_table(self, tmp_path: Path):
        """Only the [project] version changes; comments and other tables survive."""
        path = tmp_path / "pyproject.toml"
        path.write_text(PYPROJECT)

        update_manifest_version(path, "1.3.0")
        content = path.read_text()

        assert 'version = "1.3.0"' in content
        assert 'version = "9.9.9"' in content
        assert 'version = "0.0.1"' in content
        assert "# current release" in content
        assert get_manifest_version(path) == "1.3.0"

    def test_update_missing_version(self, tmp_path: Path):
        """Dynamic versions cannot be updated."""
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\ndynamic = ["version"]\n')

        with pytest.raises(VersionNotFoundError):
            update_manifest_version(path, "1.0.0")


CARGO = """\
[package]
name = "demo"
version = "0.3.0"
edition = "2021"

[dependencies]
serde = { version = "1.0" }

[workspace.package]
version = "9.9.9"
"""

PUBSPEC = """\
name: demo_app
description: A demo.
# bumped on release
version: 1.4.0

environment:
  sdk: ">=3.0.0 <4.0.0"
"""


class TestCargoToml:
    """Tests for Cargo.toml handling."""

    def test_read(self, tmp_path: Path):
        """Name and version come from [package]."""
        path = tmp_path / "Cargo.toml"
        path.write_text(CARGO)

        assert get_manifest_name(path) == "demo"
        assert get_manifest_version(path) == "0.3.0"

    def test_update_only_package_table(self, tmp_path: Path):
        """Versions in other tables are left alone."""
        path = tmp_path / "Cargo.toml"
        path.write_text(CARGO)

        update_manifest_version(path, "0.4.0")
        content = path.read_text()

        assert get_manifest_version(path) == "0.4.0"
        assert 'serde = { version = "1.0" }' in content
        assert 'version = "9.9.9"' in content

    def test_workspace_inherited_version(self, tmp_path: Path):
        """``version.workspace = true`` is not a version of its own."""
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "x"\nversion.workspace = true\n')

        with pytest.raises(VersionNotFoundError):
            get_manifest_version(path)
        with pytest.raises(VersionNotFoundError, match=r"\[package\]\.version"):
            update_manifest_version(path, "1.0.0")


class TestPubspecYaml:
    """Tests for pubspec.yaml handling."""

    def test_read(self, tmp_path: Path):
        """Name and version are top-level keys."""
        path = tmp_path / "pubspec.yaml"
        path.write_text(PUBSPEC)

        assert get_manifest_name(path) == "demo_app"
        assert get_manifest_version(path) == "1.4.0"

    def test_update_keeps_rest_of_file(self, tmp_path: Path):
        """Only the version line changes."""
        path = tmp_path / "pubspec.yaml"
        path.write_text(PUBSPEC)

        update_manifest_version(path, "1.5.0")

        assert path.read_text() == PUBSPEC.replace("version: 1.4.0", "version: 1.5.0")

    def test_update_missing_version(self, tmp_path: Path):
        """A pubspec without a version is not modified."""
        path = tmp_path / "pubspec.yaml"
        path.write_text("name: demo_app\n")

        with pytest.raises(VersionNotFoundError):
            update_manifest_version(path, "1.0.0")

    def test_find_manifest(self, tmp_path: Path):
        """pubspec.yaml is a recognised manifest."""
        (tmp_path / "pubspec.yaml").write_text(PUBSPEC)

        assert find_manifest(tmp_path) == tmp_path / "pubspec.yaml"
