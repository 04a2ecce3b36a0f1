"""Data models for monorepo releases.

A monorepo is described by a registry of PackageDescriptor records
(produced by workspace discovery). Routing and aggregation turn a commit
history into one PackageBumpResult per registered package.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from release_flow.core.version import BumpType, Version


class RoutingMode(StrEnum):
    """Signals used to attribute a commit to monorepo packages."""

    SCOPE = "scope"
    PATH = "path"
    BOTH = "both"

    @property
    def uses_scope(self) -> bool:
        return self in (RoutingMode.SCOPE, RoutingMode.BOTH)

    @property
    def uses_path(self) -> bool:
        return self in (RoutingMode.PATH, RoutingMode.BOTH)


@dataclass(frozen=True)
class PackageDescriptor:
    """Metadata for a single package in the workspace.

    Attributes:
        name: Package name as published (e.g. ``@org/core``)
        path: Repo-relative package directory, without trailing slash
        current_version: Version the package is currently at
        scope: Commit scope naming this package (may be empty)
        is_private: Private packages never receive bumps or tags
    """

    name: str
    path: str
    current_version: Version
    scope: str = ""
    is_private: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", self.path.rstrip("/"))


@dataclass(frozen=True)
class PackageBumpResult:
    """The release decision for one package.

    Attributes:
        package: The package this result belongs to
        bump_type: Bump applied to the package
        new_version: Version after the bump (unchanged when bump is NONE)
        tag: Scoped tag ``<name>@<version>``, empty when nothing is released
    """

    package: PackageDescriptor
    bump_type: BumpType
    new_version: Version
    tag: str = field(default="")

    @property
    def updated(self) -> bool:
        return self.bump_type != BumpType.NONE

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.package.name,
            "path": self.package.path,
            "private": self.package.is_private,
            "oldVersion": str(self.package.current_version),
            "version": str(self.new_version),
            "bumpType": str(self.bump_type),
            "tag": self.tag or None,
        }
