"""Release planning.

Ties the pure building blocks together: skip-release filtering,
classification, bump calculation, changelog rendering and, for monorepos,
routing and per-package aggregation. Nothing here touches git, the file
system or the network; the result is a ReleasePlan that command modules
act on.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from release_flow.core.changelog import render_entry
from release_flow.core.commits import calculate_bump, filter_skip_release_commits, parse_commits
from release_flow.core.sections import count_by_section
from release_flow.core.version import BumpType, Version
from release_flow.monorepo.aggregate import aggregate, updated_packages
from release_flow.monorepo.router import route_commits, validate_registry

if TYPE_CHECKING:
    from collections.abc import Collection, Mapping, Sequence

    from release_flow.config.models import ReleaseFlowConfig
    from release_flow.core.commits import ClassifiedCommit, RawCommit
    from release_flow.monorepo.models import PackageBumpResult, PackageDescriptor

logger = logging.getLogger(__name__)

_MAJOR_TAG_RE = re.compile(r"^([^0-9]*)([0-9]+)\.[0-9]+\.[0-9]+(.*)$")


@dataclass
class ReleasePlan:
    """Everything decided about a release before any side effect.

    Attributes:
        previous_version: Version of the latest release, None on first release
        previous_tag: Tag of the latest release, None on first release
        bump_type: Repo-wide bump
        version: Version to release (equal to previous when bump is NONE)
        tag: Tag for ``version``, empty when nothing is released
        commits: Classified commits considered for this release
        changelog_entry: Rendered repo-wide entry, empty when nothing is released
        section_counts: Commits per changelog section plus ``total``
        packages: Per-package results in monorepo mode
        package_changelogs: Package path to rendered entry for updated packages
    """

    previous_version: Version | None
    previous_tag: str | None
    bump_type: BumpType
    version: Version
    tag: str
    commits: list[ClassifiedCommit] = field(default_factory=list)
    changelog_entry: str = ""
    section_counts: dict[str, int] = field(default_factory=dict)
    packages: list[PackageBumpResult] = field(default_factory=list)
    package_changelogs: dict[str, str] = field(default_factory=dict)

    @property
    def has_release(self) -> bool:
        return self.bump_type != BumpType.NONE

    @property
    def is_first_release(self) -> bool:
        return self.previous_version is None

    @property
    def updated_packages(self) -> list[PackageBumpResult]:
        return updated_packages(self.packages)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable view of the plan."""
        return {
            "version": str(self.version),
            "versionTag": self.tag,
            "previousVersion": str(self.previous_version) if self.previous_version else "",
            "previousTag": self.previous_tag or "",
            "versionBumpType": str(self.bump_type),
            "commitCount": self.section_counts.get("total", 0),
            "sectionCounts": {k: v for k, v in self.section_counts.items() if k != "total"},
            "commits": [c.to_dict() for c in self.commits if c.section],
            "changelogEntry": self.changelog_entry,
            "packages": [p.to_dict() for p in self.packages],
            "packagesUpdated": [p.to_dict() for p in self.updated_packages],
        }


def determine_next_version(
    previous: Version | None,
    bump: BumpType,
    initial_version: Version,
    *,
    has_commits: bool,
) -> tuple[Version, BumpType]:
    """Apply the first-release policy and compute the next version.

    Without a previous release, the initial version is used as-is and the
    release counts as a patch, provided there is at least one commit.
    With no commits at all, nothing is released.

    Returns:
        The next version and the effective bump type
    """
    if previous is None:
        if not has_commits:
            return initial_version, BumpType.NONE
        return initial_version, BumpType.PATCH
    return previous.bump(bump), bump


def render_release_name(template: str, version: str, date: str | None = None) -> str:
    """Fill ``{version}`` and ``{date}`` placeholders in a release name."""
    date = date or _today()
    return template.replace("{version}", version).replace("{date}", date)


def major_tag(tag: str) -> str:
    """Return the floating major tag for a version tag.

    ``v1.2.3`` gives ``v1`` and ``pkg@2.0.0`` gives ``pkg@2``. A tag
    without a version triple gives an empty string.
    """
    match = _MAJOR_TAG_RE.match(tag)
    if not match:
        return ""
    return f"{match.group(1)}{match.group(2)}"


def _today() -> str:
    return datetime.now(UTC).strftime("%Y-%m-%d")


def plan_release(
    raw_commits: Sequence[RawCommit],
    *,
    previous_version: Version | None,
    config: ReleaseFlowConfig,
    previous_tag: str | None = None,
    registry: Sequence[PackageDescriptor] | None = None,
    unreleased: Mapping[str, Collection[str]] | None = None,
    date: str | None = None,
) -> ReleasePlan:
    """Decide what to release from the commits since the previous release.

    Args:
        raw_commits: Commits since the previous release tag
        previous_version: Version of the previous release, None if there is none
        config: Release configuration
        previous_tag: Tag of the previous release
        registry: Workspace packages; required for monorepo planning
        unreleased: Package path to the SHAs made after that package's own
            latest tag. Routed commits outside the set were already
            released for the package and are dropped. Packages without an
            entry keep every routed commit.
        date: Release date for changelog headers (defaults to today, UTC)

    Returns:
        The release plan
    """
    date = date or _today()
    commits_config = config.commits

    kept = filter_skip_release_commits(raw_commits, commits_config.skip_release_patterns)
    commits = parse_commits(kept, commits_config)

    bump = calculate_bump(commits, commits_config)
    initial = Version.parse(config.version.initial_version)
    version, bump = determine_next_version(
        previous_version, bump, initial, has_commits=bool(commits)
    )
    if bump == BumpType.NONE:
        version = previous_version or initial
    else:
        version = version.with_prerelease(config.version.pre_release)

    logger.info(
        "Bump: %s (%s -> %s)",
        bump,
        previous_version or "none",
        version if bump != BumpType.NONE else "unchanged",
    )

    plan = ReleasePlan(
        previous_version=previous_version,
        previous_tag=previous_tag,
        bump_type=bump,
        version=version,
        tag=f"{config.effective_tag_prefix}{version}" if bump != BumpType.NONE else "",
        commits=commits,
        section_counts=count_by_section(commits),
    )
    if plan.has_release:
        plan.changelog_entry = render_entry(str(version), date, commits)

    if config.is_monorepo and registry:
        _plan_packages(plan, registry, config, date, unreleased or {})

    return plan


def _plan_packages(
    plan: ReleasePlan,
    registry: Sequence[PackageDescriptor],
    config: ReleaseFlowConfig,
    date: str,
    unreleased: Mapping[str, Collection[str]],
) -> None:
    validate_registry(registry)
    packages_config = config.packages
    routed = route_commits(
        plan.commits,
        registry,
        packages_config.scope_mapping,
        packages_config.routing,
    )
    for path, shas in unreleased.items():
        if path in routed:
            routed[path] = [c for c in routed[path] if c.sha in shas]

    # Without package tags the repo-wide bump, first-release policy included,
    # is the shared bump.
    shared_bump = plan.bump_type if packages_config.unified and not unreleased else None
    plan.packages = aggregate(
        routed,
        registry,
        config.commits,
        unified=packages_config.unified,
        shared_bump=shared_bump,
        prerelease=config.version.pre_release,
    )
    for result in plan.updated_packages:
        subset = routed.get(result.package.path, [])
        entry = render_entry(str(result.new_version), date, subset)
        if not any(c.section for c in subset):
            entry += f"\n\n**Note:** Version bump only for package {result.package.name}"
        plan.package_changelogs[result.package.path] = entry
