"""Project manifests and workspace discovery."""

from __future__ import annotations

from release_flow.project.manifest import (
    find_manifest,
    get_manifest_version,
    update_manifest_version,
)
from release_flow.project.workspace import discover_packages

__all__ = [
    "discover_packages",
    "find_manifest",
    "get_manifest_version",
    "update_manifest_version",
]
