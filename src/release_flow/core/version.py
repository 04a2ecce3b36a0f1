"""Semantic version model and bump arithmetic.

Versions are plain MAJOR.MINOR.PATCH triples. A pre-release label may be
attached for display (``1.2.0-beta``), but it is never parsed back from a
tag and bumping always starts from the numeric triple alone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import IntEnum

from release_flow.exceptions import InvalidVersionError

_SEMVER_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


class BumpType(IntEnum):
    """Magnitude of a version increment.

    The integer values give the total order none < patch < minor < major,
    so ``max()`` over a collection of bumps picks the strongest one.
    """

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_str(cls, value: str) -> BumpType:
        """Parse ``"major"``, ``"minor"``, ``"patch"`` or ``"none"``."""
        try:
            return cls[value.strip().upper()]
        except KeyError as e:
            raise ValueError(f"Unknown bump type: {value!r}") from e


@dataclass(frozen=True)
class Version:
    """A semantic version.

    Attributes:
        major: Major component
        minor: Minor component
        patch: Patch component
        prerelease: Optional display suffix (never used for bumping)
    """

    major: int
    minor: int
    patch: int
    prerelease: str | None = None

    def __post_init__(self) -> None:
        for part in (self.major, self.minor, self.patch):
            if part < 0:
                raise InvalidVersionError(f"Version components must be non-negative: {self.core}")

    @classmethod
    def parse(cls, text: str, prefix: str = "") -> Version:
        """Parse a ``MAJOR.MINOR.PATCH`` string.

        Args:
            text: Version or tag text
            prefix: Tag prefix to strip first (e.g. ``"v"``)

        Returns:
            Parsed version

        Raises:
            InvalidVersionError: If the text is not a plain version triple
        """
        value = text.strip()
        if prefix and value.startswith(prefix):
            value = value[len(prefix) :]
        match = _SEMVER_RE.match(value)
        if not match:
            raise InvalidVersionError(f"Invalid version: {text!r} (expected MAJOR.MINOR.PATCH)")
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    @property
    def core(self) -> str:
        """The numeric triple without any pre-release label."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, bump_type: BumpType) -> Version:
        """Return the next version for ``bump_type``.

        A pre-release label on the current version is dropped, not
        interpreted.
        """
        if bump_type == BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if bump_type == BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if bump_type == BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def with_prerelease(self, label: str | None) -> Version:
        """Return a copy carrying ``label`` as its display suffix."""
        return replace(self, prerelease=label or None)

    def __str__(self) -> str:
        if self.prerelease:
            return f"{self.core}-{self.prerelease}"
        return self.core


def parse_version(text: str, prefix: str = "") -> Version:
    """Parse a version string. See :meth:`Version.parse`."""
    return Version.parse(text, prefix)


def apply_bump(current: Version, bump: BumpType) -> Version:
    """Apply ``bump`` to ``current`` with ordinary semver arithmetic.

    Zero-major versions are not special-cased.
    """
    return current.bump(bump)
