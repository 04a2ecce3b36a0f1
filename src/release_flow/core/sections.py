"""Changelog section mapping.

Commit types are mapped onto the six Keep a Changelog sections. Types with
no mapping, excluded types and excluded scopes produce no section and are
left out of the changelog without being treated as errors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from release_flow.config.models import ConventionConfig
    from release_flow.core.commits import ClassifiedCommit

logger = logging.getLogger(__name__)


class Section(StrEnum):
    ADDED = "Added"
    CHANGED = "Changed"
    DEPRECATED = "Deprecated"
    REMOVED = "Removed"
    FIXED = "Fixed"
    SECURITY = "Security"


# Display order of sections in a changelog entry.
SECTION_ORDER: tuple[str, ...] = tuple(s.value for s in Section)

DEFAULT_TYPE_TO_SECTION: dict[str, str] = {
    "feat": Section.ADDED,
    "new": Section.ADDED,
    "add": Section.ADDED,
    "fix": Section.FIXED,
    "bugfix": Section.FIXED,
    "revert": Section.FIXED,
    "security": Section.SECURITY,
    "perf": Section.CHANGED,
    "refactor": Section.CHANGED,
    "update": Section.CHANGED,
    "change": Section.CHANGED,
    "chore": Section.CHANGED,
    "setup": Section.CHANGED,
    "deprecate": Section.DEPRECATED,
    "remove": Section.REMOVED,
    "delete": Section.REMOVED,
}


def map_to_section(
    commit_type: str,
    scope: str,
    config: ConventionConfig,
    *,
    is_breaking: bool = False,
) -> str | None:
    """Map a classified commit onto a changelog section.

    Exclusions are checked first. A breaking commit that survives them is
    always filed under Changed, whatever its type maps to.

    Args:
        commit_type: Classified commit type
        scope: Classified scope (may be empty)
        config: Convention configuration
        is_breaking: Whether the commit is a breaking change

    Returns:
        Section name, or None if the commit is excluded from the changelog
    """
    if commit_type in (config.exclude_types or ()):
        logger.debug("Excluding type %r from changelog", commit_type)
        return None
    if scope and scope in config.exclude_scopes:
        logger.debug("Excluding scope %r from changelog", scope)
        return None
    if is_breaking:
        return Section.CHANGED.value
    section = config.type_to_section.get(commit_type)
    if section is None:
        logger.debug("No section mapping for type %r", commit_type)
        return None
    return str(section)


def count_by_section(commits: Iterable[ClassifiedCommit]) -> dict[str, int]:
    """Count commits per changelog section.

    Every section is present in the result (possibly zero), plus a
    ``total`` of all commits that landed in some section.
    """
    counts = dict.fromkeys(SECTION_ORDER, 0)
    for commit in commits:
        if commit.section in counts:
            counts[commit.section] += 1
    counts["total"] = sum(counts.values())
    return counts
