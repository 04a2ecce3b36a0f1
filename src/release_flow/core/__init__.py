"""Core business logic for release-flow.

This module contains the fundamental building blocks:
- Semantic version parsing and bump arithmetic
- Commit classification (Conventional Commits and Clean Commit)
- Changelog section mapping and entry rendering

Release planning (which also covers monorepo routing) lives in
``release_flow.core.release``.
"""

from __future__ import annotations

from release_flow.core.changelog import insert_entry, render_entry, write_changelog
from release_flow.core.commits import (
    ClassifiedCommit,
    RawCommit,
    calculate_bump,
    classify,
    classify_commit,
    filter_skip_release_commits,
    format_commit_for_changelog,
    get_breaking_changes,
    group_commits_by_section,
    parse_commits,
)
from release_flow.core.sections import Section, count_by_section, map_to_section
from release_flow.core.version import BumpType, Version, apply_bump, parse_version

__all__ = [
    # Version
    "BumpType",
    # Commits
    "ClassifiedCommit",
    "RawCommit",
    # Sections
    "Section",
    "Version",
    "apply_bump",
    "calculate_bump",
    "classify",
    "classify_commit",
    "count_by_section",
    "filter_skip_release_commits",
    "format_commit_for_changelog",
    "get_breaking_changes",
    "group_commits_by_section",
    # Changelog
    "insert_entry",
    "map_to_section",
    "parse_commits",
    "parse_version",
    "render_entry",
    "write_changelog",
]
