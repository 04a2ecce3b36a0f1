"""Per-package version bumps for monorepos.

In independent mode each package is bumped from its own routed commits.
In unified mode one bump, given by the caller or computed from every
routed commit, is applied to all public packages so they move together.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from release_flow.core.commits import calculate_bump
from release_flow.core.version import BumpType
from release_flow.monorepo.models import PackageBumpResult

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from release_flow.config.models import ConventionConfig
    from release_flow.core.commits import ClassifiedCommit
    from release_flow.core.version import Version
    from release_flow.monorepo.models import PackageDescriptor

logger = logging.getLogger(__name__)


def scoped_tag(name: str, version: Version) -> str:
    """Build the ``<package-name>@<version>`` tag for a package."""
    return f"{name}@{version}"


def _union(routed: Mapping[str, Sequence[ClassifiedCommit]]) -> list[ClassifiedCommit]:
    seen: set[str] = set()
    commits: list[ClassifiedCommit] = []
    for subset in routed.values():
        for commit in subset:
            if commit.sha not in seen:
                seen.add(commit.sha)
                commits.append(commit)
    return commits


def aggregate(
    routed: Mapping[str, Sequence[ClassifiedCommit]],
    registry: Sequence[PackageDescriptor],
    config: ConventionConfig,
    *,
    unified: bool = False,
    shared_bump: BumpType | None = None,
    prerelease: str | None = None,
) -> list[PackageBumpResult]:
    """Compute the bump result of every package in the registry.

    Args:
        routed: Package path to routed commits (see ``route_commits``)
        registry: Known packages; one result is produced per entry
        config: Convention configuration with the bump rules
        unified: Apply one shared bump to every public package
        shared_bump: Bump applied in unified mode; computed from the union
            of routed commits when not given
        prerelease: Display suffix appended to bumped versions and tags

    Returns:
        Results in registry order. Private packages always get NONE.
    """
    if not unified:
        shared_bump = None
    elif shared_bump is None:
        shared_bump = calculate_bump(_union(routed), config)
    if shared_bump is not None:
        logger.debug("Unified bump: %s", shared_bump)

    results: list[PackageBumpResult] = []
    for package in registry:
        if package.is_private:
            bump = BumpType.NONE
        elif shared_bump is not None:
            bump = shared_bump
        else:
            bump = calculate_bump(routed.get(package.path, ()), config)

        if bump == BumpType.NONE:
            results.append(PackageBumpResult(package, bump, package.current_version))
            continue

        new_version = package.current_version.bump(bump).with_prerelease(prerelease)
        results.append(
            PackageBumpResult(package, bump, new_version, scoped_tag(package.name, new_version))
        )
        logger.debug(
            "%s: %s -> %s (%s)", package.name, package.current_version, new_version, bump
        )
    return results


def updated_packages(results: Iterable[PackageBumpResult]) -> list[PackageBumpResult]:
    """Return the results that carry a release (bump other than NONE)."""
    return [r for r in results if r.updated]
