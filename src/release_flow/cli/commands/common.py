"""Plan preparation shared by the ``check`` and ``release`` commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.config import load_config
from release_flow.core.release import ReleasePlan, plan_release
from release_flow.core.version import Version
from release_flow.project import discover_packages
from release_flow.vcs import GitRepository

if TYPE_CHECKING:
    from release_flow.config import ReleaseFlowConfig
    from release_flow.monorepo.models import PackageDescriptor

logger = logging.getLogger(__name__)


@dataclass
class PreparedRelease:
    """Configuration, repository and plan for one invocation."""

    config: ReleaseFlowConfig
    repo: GitRepository
    plan: ReleasePlan
    registry: list[PackageDescriptor] = field(default_factory=list)


def prepare_release(path: str | None, prerelease: str | None = None) -> PreparedRelease:
    """Load configuration, read git history and plan the release.

    Args:
        path: Optional path to project directory
        prerelease: Pre-release label overriding ``[version].pre_release``

    Returns:
        The prepared release

    Raises:
        ReleaseFlowError: If configuration, git or workspace discovery fails
    """
    project_path = Path(path) if path else Path.cwd()

    config = load_config(project_path)
    if prerelease:
        config = config.model_copy(
            update={"version": config.version.model_copy(update={"pre_release": prerelease})}
        )

    repo = GitRepository(project_path)

    prefix = config.effective_tag_prefix
    latest_tag = repo.get_latest_tag(prefix)
    previous_version = Version.parse(latest_tag, prefix) if latest_tag else None
    logger.debug("Latest tag: %s", latest_tag or "none")

    registry: list[PackageDescriptor] = []
    if config.is_monorepo:
        registry = discover_packages(repo.path, config.packages.paths or None)

    commits = repo.get_commits_since_tag(latest_tag, include_files=config.is_monorepo)
    logger.debug("Found %d commits since %s", len(commits), latest_tag or "the beginning")

    unreleased = _unreleased_by_package(repo, registry)

    plan = plan_release(
        commits,
        previous_version=previous_version,
        previous_tag=latest_tag,
        config=config,
        registry=registry,
        unreleased=unreleased,
    )
    return PreparedRelease(config=config, repo=repo, plan=plan, registry=registry)


def _unreleased_by_package(
    repo: GitRepository, registry: list[PackageDescriptor]
) -> dict[str, set[str]]:
    """Map each tagged package to the commits made after its latest tag."""
    unreleased: dict[str, set[str]] = {}
    for package in registry:
        if package.is_private:
            continue
        package_tag = repo.get_latest_tag(f"{package.name}@")
        if package_tag is None:
            continue
        commits = repo.get_commits_since_tag(package_tag)
        logger.debug("%s: %d commits since %s", package.name, len(commits), package_tag)
        unreleased[package.path] = {c.sha for c in commits}
    return unreleased
