"""Package manifest version manipulation.

Reads and updates the version field of ``package.json``, ``Cargo.toml``,
``pyproject.toml`` and ``pubspec.yaml`` manifests.

TOML manifests are edited with a regex confined to the table that owns
the version (``[package]`` for Cargo, ``[project]`` or ``[tool.poetry]``
for pyproject), so formatting and comments survive. pubspec.yaml has its
first top-level ``version:`` line replaced. package.json is rewritten
through ``json`` with its original indentation.
"""

from __future__ import annotations

import json
import re
import tomllib
from typing import TYPE_CHECKING, Any

import yaml

from release_flow.exceptions import ProjectError, VersionNotFoundError

if TYPE_CHECKING:
    from pathlib import Path

MANIFEST_NAMES = ("package.json", "Cargo.toml", "pyproject.toml", "pubspec.yaml")

# Tables that carry the package version, per TOML manifest
_VERSION_TABLES = {
    "Cargo.toml": (r"\[package\]",),
    "pyproject.toml": (r"\[project\]", r"\[tool\.poetry\]"),
}

_VERSION_LINE = r'^(version\s*=\s*)["\'][^"\']+["\']'
_PUBSPEC_VERSION_LINE = re.compile(r"^version:.*$", re.MULTILINE)


def find_manifest(directory: Path) -> Path | None:
    """Return the first known manifest in ``directory``, if any."""
    for name in MANIFEST_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def read_package_json(path: Path) -> dict[str, Any]:
    """Parse a package.json file.

    Raises:
        ProjectError: If the file is missing or not a JSON object
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ProjectError(f"Could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ProjectError(f"{path} does not contain a JSON object")
    return data


def read_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML mapping such as pubspec.yaml or pnpm-workspace.yaml."""
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ProjectError(f"Could not read {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ProjectError(f"{path} does not contain a mapping")
    return data


def read_manifest(path: Path) -> dict[str, Any]:
    """Parse any supported manifest into a dictionary."""
    if path.name == "package.json":
        return read_package_json(path)
    if path.name == "pubspec.yaml":
        return read_yaml(path)
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ProjectError(f"Could not read {path}: {e}") from e


def get_manifest_name(path: Path) -> str:
    """Get the package name declared in a manifest, or an empty string."""
    data = read_manifest(path)
    if path.name == "Cargo.toml":
        name = data.get("package", {}).get("name")
    elif path.name == "pyproject.toml":
        name = data.get("project", {}).get("name") or (
            data.get("tool", {}).get("poetry", {}).get("name")
        )
    else:
        name = data.get("name")
    return str(name) if name else ""


def get_manifest_version(path: Path) -> str:
    """Get the version declared in a manifest.

    Args:
        path: Path to a supported manifest

    Returns:
        Version string

    Raises:
        VersionNotFoundError: If the manifest declares no version
        ProjectError: If the manifest cannot be read
    """
    data = read_manifest(path)
    if path.name == "Cargo.toml":
        version = data.get("package", {}).get("version")
    elif path.name == "pyproject.toml":
        version = data.get("project", {}).get("version") or (
            data.get("tool", {}).get("poetry", {}).get("version")
        )
    else:
        version = data.get("version")

    # Cargo's `version.workspace = true` parses to a table
    if not version or isinstance(version, dict):
        raise VersionNotFoundError(f"Could not find version in {path}")
    return str(version)


def update_manifest_version(path: Path, new_version: str) -> Path:
    """Set the version in a manifest.

    Args:
        path: Path to a supported manifest
        new_version: Version string to write

    Returns:
        The path written

    Raises:
        VersionNotFoundError: If no version field exists to update
        ProjectError: If the manifest cannot be read or written
    """
    if path.name == "package.json":
        _update_package_json(path, new_version)
    elif path.name == "pubspec.yaml":
        _update_pubspec(path, new_version)
    else:
        _update_toml(path, new_version)
    return path


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectError(f"Could not read {path}: {e}") from e


def _update_package_json(path: Path, new_version: str) -> None:
    text = _read_text(path)
    data = read_package_json(path)
    if "version" not in data:
        raise VersionNotFoundError(f"Could not find version to update in {path}")
    data["version"] = new_version

    indent_match = re.search(r'^([ \t]+)"', text, re.MULTILINE)
    indent = indent_match.group(1) if indent_match else 2
    content = json.dumps(data, indent=indent, ensure_ascii=False)
    if text.endswith("\n"):
        content += "\n"
    path.write_text(content, encoding="utf-8")


def _update_pubspec(path: Path, new_version: str) -> None:
    content = _read_text(path)
    if not _PUBSPEC_VERSION_LINE.search(content):
        raise VersionNotFoundError(f"Could not find version to update in {path}")
    content = _PUBSPEC_VERSION_LINE.sub(f"version: {new_version}", content, count=1)
    path.write_text(content, encoding="utf-8")


def _update_toml(path: Path, new_version: str) -> None:
    content = _read_text(path)
    tables = _VERSION_TABLES.get(path.name, ())

    def replace_version(match: re.Match[str]) -> str:
        return re.sub(
            _VERSION_LINE,
            rf'\g<1>"{new_version}"',
            match.group(0),
            count=1,
            flags=re.MULTILINE,
        )

    for table in tables:
        # Match the whole table up to the next table header or EOF
        pattern = rf"^{table}.*?(?=^\[|\Z)"
        section = re.search(pattern, content, flags=re.MULTILINE | re.DOTALL)
        if section is None or not re.search(_VERSION_LINE, section.group(0), re.MULTILINE):
            continue
        content = re.sub(
            pattern,
            replace_version,
            content,
            count=1,
            flags=re.MULTILINE | re.DOTALL,
        )
        path.write_text(content, encoding="utf-8")
        return

    expected = " or ".join(t.replace("\\", "") + ".version" for t in tables)
    raise VersionNotFoundError(
        f"Could not find version to update in {path}. Expected {expected or 'a version field'}."
    )
