"""Workspace package discovery.

Builds the package registry of a monorepo from its workspace
configuration:

- ``workspaces`` in the root package.json (array, or ``{"packages": [...]}``)
- ``packages`` in pnpm-workspace.yaml
- ``packages`` in lerna.json
- ``[tool.uv.workspace].members`` in the root pyproject.toml

Each pattern is expanded as a glob relative to the repository root, and
every matching directory with a manifest becomes a PackageDescriptor.
"""

from __future__ import annotations

import glob
import json
import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.core.version import Version
from release_flow.exceptions import (
    InvalidVersionError,
    ProjectError,
    VersionNotFoundError,
    WorkspaceError,
)
from release_flow.monorepo.models import PackageDescriptor
from release_flow.project.manifest import (
    find_manifest,
    get_manifest_name,
    get_manifest_version,
    read_package_json,
    read_yaml,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_PACKAGE_VERSION = "0.0.0"


def get_workspace_patterns(root: Path) -> list[str]:
    """Collect workspace member patterns declared at ``root``."""
    patterns: list[str] = []

    package_json = root / "package.json"
    if package_json.is_file():
        workspaces = read_package_json(package_json).get("workspaces", [])
        if isinstance(workspaces, dict):
            workspaces = workspaces.get("packages", [])
        patterns.extend(str(p) for p in workspaces)

    pnpm_workspace = root / "pnpm-workspace.yaml"
    if pnpm_workspace.is_file():
        pnpm_patterns = read_yaml(pnpm_workspace).get("packages") or []
        # Exclusion patterns ("!**/test/**") select nothing to release
        patterns.extend(str(p) for p in pnpm_patterns if not str(p).startswith("!"))

    lerna_json = root / "lerna.json"
    if lerna_json.is_file():
        try:
            lerna = json.loads(lerna_json.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ProjectError(f"Could not read {lerna_json}: {e}") from e
        patterns.extend(str(p) for p in lerna.get("packages", []))

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        try:
            with pyproject.open("rb") as f:
                doc = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ProjectError(f"Could not read {pyproject}: {e}") from e
        members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members", [])
        patterns.extend(str(p) for p in members)

    # Preserve first occurrence order
    return list(dict.fromkeys(patterns))


def expand_patterns(root: Path, patterns: Iterable[str]) -> list[Path]:
    """Expand glob patterns into package directories that contain a manifest."""
    directories: list[Path] = []
    seen: set[Path] = set()
    for pattern in patterns:
        for match in sorted(glob.glob(str(root / pattern))):
            directory = Path(match)
            if directory in seen or not directory.is_dir():
                continue
            if find_manifest(directory) is None:
                continue
            seen.add(directory)
            directories.append(directory)
    return directories


def scope_from_name(name: str, directory: Path) -> str:
    """Derive the commit scope that names a package.

    ``@org/core`` gives ``core``; an unscoped name is used as-is; a
    package without a name falls back to its directory name.
    """
    if name.startswith("@") and "/" in name:
        return name.split("/", 1)[1]
    return name or directory.name


def load_package(root: Path, directory: Path) -> PackageDescriptor:
    """Build a descriptor from the manifest in ``directory``."""
    manifest = find_manifest(directory)
    if manifest is None:
        raise WorkspaceError(f"No package manifest in {directory}")

    name = get_manifest_name(manifest)
    try:
        version_text = get_manifest_version(manifest)
    except VersionNotFoundError:
        version_text = DEFAULT_PACKAGE_VERSION
    # Only npm manifests mark packages private
    private = False
    if manifest.name == "package.json":
        private = bool(read_package_json(manifest).get("private"))

    try:
        version = Version.parse(version_text)
    except InvalidVersionError as e:
        raise WorkspaceError(f"{manifest}: {e}") from e

    return PackageDescriptor(
        name=name or directory.name,
        path=directory.relative_to(root).as_posix(),
        current_version=version,
        scope=scope_from_name(name, directory),
        is_private=private,
    )


def discover_packages(root: Path, paths: Iterable[str] | None = None) -> list[PackageDescriptor]:
    """Discover the workspace packages of the repository at ``root``.

    Args:
        root: Repository root
        paths: Explicit package directories; workspace patterns are used
            when not given

    Returns:
        Package descriptors in discovery order
    """
    root = root.resolve()
    patterns = list(paths) if paths else get_workspace_patterns(root)
    if not patterns:
        logger.warning("No workspace patterns found in %s", root)
        return []

    packages = [load_package(root, d) for d in expand_patterns(root, patterns)]
    for package in packages:
        private = " (private)" if package.is_private else ""
        logger.debug("  %s %s (%s)%s", package.name, package.current_version, package.path, private)
    logger.info("Detected %d workspace packages", len(packages))
    return packages
