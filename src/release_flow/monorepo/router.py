"""Commit-to-package routing for monorepos.

A commit is attributed to packages from two independent signals:

- its scope (``feat(core): ...``), looked up in the explicit scope mapping
  first and then against each package's own scope;
- the files it changed, each assigned to the most specific package
  directory containing it.

The two signals are combined as a union. A commit that matches nothing is
assumed to affect every package, so no commit is ever dropped. Private
packages never receive commits from routing.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

from release_flow.exceptions import WorkspaceError
from release_flow.monorepo.models import RoutingMode

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from release_flow.core.commits import ClassifiedCommit
    from release_flow.monorepo.models import PackageDescriptor

logger = logging.getLogger(__name__)


def validate_registry(registry: Sequence[PackageDescriptor]) -> None:
    """Check that package paths are unique.

    Duplicate scopes are tolerated (which package wins a scope match is
    then unspecified) but logged.

    Raises:
        WorkspaceError: If two descriptors share a path
    """
    paths = Counter(p.path for p in registry)
    duplicates = sorted(path for path, count in paths.items() if count > 1)
    if duplicates:
        raise WorkspaceError(f"Duplicate package paths in registry: {', '.join(duplicates)}")

    scopes = Counter(p.scope for p in registry if p.scope)
    for scope, count in scopes.items():
        if count > 1:
            logger.warning(
                "Scope %r is shared by %d packages; scope routing is ambiguous", scope, count
            )


def _public_paths(registry: Iterable[PackageDescriptor]) -> list[str]:
    return [p.path for p in registry if not p.is_private]


def _match_scope(
    scope: str,
    registry: Sequence[PackageDescriptor],
    scope_override: Mapping[str, str],
) -> str | None:
    override = scope_override.get(scope)
    if override is not None:
        return override.rstrip("/")
    for package in registry:
        if package.scope == scope:
            return package.path
    return None


def _match_path(file_path: str, registry: Sequence[PackageDescriptor]) -> str | None:
    """Return the longest package path that contains ``file_path``."""
    best: str | None = None
    for package in registry:
        path = package.path
        if file_path == path or file_path.startswith(path + "/"):
            if best is None or len(path) > len(best):
                best = path
    return best


def route(
    commit: ClassifiedCommit,
    changed_files: Sequence[str],
    registry: Sequence[PackageDescriptor],
    scope_override: Mapping[str, str] | None = None,
    mode: RoutingMode = RoutingMode.BOTH,
) -> set[str]:
    """Determine which packages a commit affects.

    Args:
        commit: Classified commit
        changed_files: Repo-relative paths the commit touched
        registry: Known packages
        scope_override: Explicit scope to package path mapping
        mode: Which signals to use

    Returns:
        Paths of the affected non-private packages. Never empty unless the
        registry has no public packages.
    """
    scope_override = scope_override or {}
    private = {p.path for p in registry if p.is_private}
    known = {p.path for p in registry}
    matched: set[str] = set()

    if mode.uses_scope and commit.scope:
        path = _match_scope(commit.scope, registry, scope_override)
        if path is not None and path in known:
            matched.add(path)
        elif path is not None:
            logger.debug("Scope %r maps to unknown package path %r", commit.scope, path)

    if mode.uses_path:
        for file_path in changed_files:
            path = _match_path(file_path, registry)
            if path is not None:
                matched.add(path)

    matched -= private

    if not matched:
        logger.debug("Commit %s matched no package, routing to all", commit.short_sha)
        return set(_public_paths(registry))

    logger.debug("Commit %s routed to %s", commit.short_sha, ", ".join(sorted(matched)))
    return matched


def route_commits(
    commits: Iterable[ClassifiedCommit],
    registry: Sequence[PackageDescriptor],
    scope_override: Mapping[str, str] | None = None,
    mode: RoutingMode = RoutingMode.BOTH,
) -> dict[str, list[ClassifiedCommit]]:
    """Route every commit and collect each package's commit subset.

    Args:
        commits: Classified commits, each carrying its changed files
        registry: Known packages
        scope_override: Explicit scope to package path mapping
        mode: Which signals to use

    Returns:
        Mapping of package path to its commits, one key per non-private
        package in registry order. Commit order is preserved.
    """
    routed: dict[str, list[ClassifiedCommit]] = {path: [] for path in _public_paths(registry)}
    for commit in commits:
        for path in route(commit, commit.changed_files, registry, scope_override, mode):
            routed[path].append(commit)
    return routed
