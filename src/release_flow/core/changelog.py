"""Changelog rendering in Keep a Changelog format.

Classified commits are grouped into the six standard sections and
rendered as one entry per version. Entries are inserted into an existing
CHANGELOG.md directly below its ``## [Unreleased]`` heading.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from release_flow.core.commits import format_commit_for_changelog, group_commits_by_section
from release_flow.core.sections import SECTION_ORDER
from release_flow.exceptions import ChangelogError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from release_flow.core.commits import ClassifiedCommit

logger = logging.getLogger(__name__)

CHANGELOG_HEADER = """\
# Changelog

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]
"""

_UNRELEASED_RE = re.compile(r"^## \[Unreleased\][ \t]*$", re.MULTILINE)


def render_entry(version: str, date: str, commits: Sequence[ClassifiedCommit]) -> str:
    """Render the changelog entry for one version.

    Sections appear in the fixed order Added, Changed, Deprecated, Removed,
    Fixed, Security; empty sections are omitted. Items keep the order of
    ``commits``.

    Args:
        version: Version label for the header
        date: Release date (YYYY-MM-DD)
        commits: Classified commits; those without a section are skipped

    Returns:
        Entry text starting with ``## [version] - date``
    """
    grouped = group_commits_by_section(commits)

    lines = [f"## [{version}] - {date}"]
    for section in SECTION_ORDER:
        items = grouped.get(section)
        if not items:
            continue
        lines.append("")
        lines.append(f"### {section}")
        lines.append("")
        lines.extend(f"- {format_commit_for_changelog(c)}" for c in items)

    return "\n".join(lines)


def insert_entry(existing: str | None, entry: str) -> str:
    """Insert ``entry`` below the ``## [Unreleased]`` heading.

    Blank lines directly after the heading are consumed so the document
    keeps a single blank line on either side of the new entry.

    Args:
        existing: Current changelog text, or None to start a new document
        entry: Rendered entry (see :func:`render_entry`)

    Returns:
        Updated changelog text

    Raises:
        ChangelogError: If the document has no Unreleased heading
    """
    document = existing if existing else CHANGELOG_HEADER

    match = _UNRELEASED_RE.search(document)
    if match is None:
        raise ChangelogError("Could not find '## [Unreleased]' section in changelog")

    head = document[: match.end()]
    rest = document[match.end() :].lstrip("\n")

    updated = f"{head}\n\n{entry.strip()}\n"
    if rest:
        updated += f"\n{rest}"
    return updated


def write_changelog(path: Path, entry: str) -> Path:
    """Insert ``entry`` into the changelog at ``path``, creating it if needed.

    Args:
        path: Changelog file path
        entry: Rendered entry

    Returns:
        The path written

    Raises:
        ChangelogError: If the file cannot be read, updated or written
    """
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else None
    except OSError as e:
        raise ChangelogError(f"Could not read {path}: {e}") from e

    if existing is None:
        logger.info("Creating %s", path)

    content = insert_entry(existing, entry)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Could not write {path}: {e}") from e
    return path
