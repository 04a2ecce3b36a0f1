"""Commit classification and bump calculation.

Two commit conventions are understood and normalised into one shape:

- Conventional Commits: ``feat(api)!: description``
- Clean Commit, which prefixes the same structure with an emoji:
  ``📦 new (api): description``

Leading non-letter characters are stripped before matching, so the
classifier does not need to know which convention produced a message.
Anything that does not match is classified as type ``other``.
"""

from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, NamedTuple

from release_flow.core.sections import map_to_section
from release_flow.core.version import BumpType

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from release_flow.config.models import ConventionConfig

logger = logging.getLogger(__name__)

# Leading emoji, pictographs, punctuation and the whitespace after them.
_PREFIX_RE = re.compile(r"^[^A-Za-z]+")

COMMIT_PATTERN = re.compile(
    r"^(?P<type>[a-z]+)"
    r"\s*(?:\((?P<scope>[^)]*)\))?"
    r"(?P<breaking>!)?"
    r": (?P<description>.*)$"
)

BREAKING_BODY_PATTERN = re.compile(r"BREAKING[- ]CHANGE")

OTHER_TYPE = "other"


@dataclass(frozen=True)
class RawCommit:
    """A commit as read from git.

    Attributes:
        sha: Full commit SHA
        subject: First line of the message
        body: Remainder of the message (may be empty)
        changed_files: Repo-relative paths touched by the commit
    """

    sha: str
    subject: str
    body: str = ""
    changed_files: tuple[str, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


class Classification(NamedTuple):
    """Structured form of a commit message."""

    type: str
    scope: str
    is_breaking: bool
    description: str


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit decomposed into type, scope, breaking flag and description.

    Attributes:
        sha: Full commit SHA
        type: Commit type (``other`` when the subject did not match)
        scope: Commit scope, empty when absent
        is_breaking: Whether the commit is a breaking change
        description: Description text after the ``type(scope): `` header
        section: Changelog section, empty when excluded from the changelog
        subject: Original subject line
        body: Original body
        changed_files: Paths touched by the commit
    """

    sha: str
    type: str
    scope: str
    is_breaking: bool
    description: str
    section: str = ""
    subject: str = ""
    body: str = ""
    changed_files: tuple[str, ...] = field(default_factory=tuple)

    @property
    def message(self) -> str:
        """Subject and body joined with a space, as scanned for keywords."""
        if self.body:
            return f"{self.subject} {self.body}"
        return self.subject

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    def to_dict(self) -> dict[str, str]:
        return {
            "sha": self.sha,
            "type": self.type,
            "scope": self.scope,
            "section": self.section,
            "description": format_commit_for_changelog(self),
        }


def classify(subject: str, body: str = "") -> Classification:
    """Parse a commit message into its structured classification.

    Args:
        subject: Commit subject line, possibly emoji-prefixed
        body: Commit body

    Returns:
        The classification; never raises
    """
    cleaned = _PREFIX_RE.sub("", subject, count=1)
    match = COMMIT_PATTERN.match(cleaned)

    if match:
        commit_type = match.group("type")
        scope = match.group("scope") or ""
        is_breaking = match.group("breaking") is not None
        description = match.group("description")
    else:
        commit_type = OTHER_TYPE
        scope = ""
        is_breaking = False
        description = subject

    if body and BREAKING_BODY_PATTERN.search(body):
        is_breaking = True

    return Classification(commit_type, scope, is_breaking, description)


def classify_commit(commit: RawCommit, config: ConventionConfig) -> ClassifiedCommit:
    """Classify a raw commit and assign its changelog section."""
    result = classify(commit.subject, commit.body)
    section = map_to_section(
        result.type,
        result.scope,
        config,
        is_breaking=result.is_breaking,
    )
    if section is None:
        logger.debug("Commit %s not in changelog (type: %s)", commit.short_sha, result.type)
    return ClassifiedCommit(
        sha=commit.sha,
        type=result.type,
        scope=result.scope,
        is_breaking=result.is_breaking,
        description=result.description,
        section=section or "",
        subject=commit.subject,
        body=commit.body,
        changed_files=tuple(commit.changed_files),
    )


def parse_commits(commits: Iterable[RawCommit], config: ConventionConfig) -> list[ClassifiedCommit]:
    """Classify a sequence of commits, preserving order."""
    return [classify_commit(c, config) for c in commits]


def filter_skip_release_commits(
    commits: Iterable[RawCommit],
    patterns: Sequence[str],
) -> list[RawCommit]:
    """Drop commits whose message contains a skip-release marker.

    Markers are matched case-insensitively anywhere in subject or body.
    """
    if not patterns:
        return list(commits)

    lowered = [p.lower() for p in patterns]
    kept: list[RawCommit] = []
    for commit in commits:
        message = commit.message.lower()
        if any(p in message for p in lowered):
            logger.debug("Skipping commit %s (skip release marker)", commit.short_sha)
            continue
        kept.append(commit)
    return kept


def calculate_bump(commits: Iterable[ClassifiedCommit], config: ConventionConfig) -> BumpType:
    """Determine the version bump warranted by a set of commits.

    For each commit, in precedence order:

    1. any major keyword found literally in subject + body gives MAJOR;
    2. a breaking commit gives MAJOR;
    3. a type listed in ``minor_keywords`` gives MINOR;
    4. a type listed in ``patch_keywords`` gives PATCH.

    MAJOR is the ceiling, so the scan stops at the first one.

    Args:
        commits: Classified commits
        config: Convention configuration with the keyword rules

    Returns:
        Highest bump observed, NONE for an empty or unversioned set
    """
    major_keywords = config.major_keywords or []
    minor_types = set(config.minor_keywords or [])
    patch_types = set(config.patch_keywords or [])

    bump = BumpType.NONE
    for commit in commits:
        message = commit.message
        if any(keyword in message for keyword in major_keywords):
            logger.debug("Commit %s matches a major keyword", commit.short_sha)
            return BumpType.MAJOR
        if commit.is_breaking:
            logger.debug("Commit %s is marked breaking", commit.short_sha)
            return BumpType.MAJOR
        if commit.type in minor_types:
            bump = max(bump, BumpType.MINOR)
        elif commit.type in patch_types:
            bump = max(bump, BumpType.PATCH)
    return bump


def get_breaking_changes(commits: Iterable[ClassifiedCommit]) -> list[ClassifiedCommit]:
    """Return only the breaking commits."""
    return [c for c in commits if c.is_breaking]


def group_commits_by_section(
    commits: Iterable[ClassifiedCommit],
) -> dict[str, list[ClassifiedCommit]]:
    """Group commits by changelog section, skipping excluded ones."""
    grouped: dict[str, list[ClassifiedCommit]] = defaultdict(list)
    for commit in commits:
        if commit.section:
            grouped[commit.section].append(commit)
    return dict(grouped)


def format_commit_for_changelog(
    commit: ClassifiedCommit,
    *,
    include_scope: bool = False,
    include_sha: bool = False,
) -> str:
    """Format a commit as changelog item text (without the leading dash).

    Args:
        commit: Classified commit
        include_scope: Prefix the description with ``**scope:**``
        include_sha: Append the short SHA in parentheses

    Returns:
        Item text; breaking changes carry a ``**BREAKING:**`` marker
    """
    parts = []
    if commit.is_breaking:
        parts.append("**BREAKING:**")
    if include_scope and commit.scope:
        parts.append(f"**{commit.scope}:**")
    parts.append(commit.description)
    text = " ".join(parts)
    if include_sha:
        text = f"{text} ({commit.short_sha})"
    return text
