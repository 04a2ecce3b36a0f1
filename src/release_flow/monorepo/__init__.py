"""Monorepo support: package routing and per-package bumps."""

from __future__ import annotations

from release_flow.monorepo.aggregate import aggregate, scoped_tag, updated_packages
from release_flow.monorepo.models import PackageBumpResult, PackageDescriptor, RoutingMode
from release_flow.monorepo.router import route, route_commits, validate_registry

__all__ = [
    "PackageBumpResult",
    "PackageDescriptor",
    "RoutingMode",
    "aggregate",
    "route",
    "route_commits",
    "scoped_tag",
    "updated_packages",
    "validate_registry",
]
