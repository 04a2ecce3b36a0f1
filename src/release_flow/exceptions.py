"""Exception hierarchy for release-flow.

All errors raised by release-flow derive from ReleaseFlowError so that
command modules can catch a single base class and report it cleanly.

Commit classification, section mapping, bump calculation and package
routing never raise for unusual input: malformed or unknown commits are
classified as ``other`` and unroutable commits fall back to every package.
The errors below belong to the glue around that core (configuration,
versions read from tags or manifests, git, the changelog file and the
hosting API).
"""

from __future__ import annotations


class ReleaseFlowError(Exception):
    """Base class for all release-flow errors."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ReleaseFlowError):
    """Base class for configuration problems."""


class ConfigNotFoundError(ConfigError):
    """pyproject.toml could not be located or read."""


class ConfigValidationError(ConfigError):
    """Configuration values failed validation."""


# =============================================================================
# Versions
# =============================================================================


class VersionError(ReleaseFlowError):
    """Base class for version problems."""


class InvalidVersionError(VersionError):
    """A version string is not a plain MAJOR.MINOR.PATCH triple."""


# =============================================================================
# Collaborators
# =============================================================================


class GitError(ReleaseFlowError):
    """A git command failed.

    Attributes:
        stderr: Captured standard error of the failed command, if any.
    """

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}\n{self.stderr.strip()}"
        return base


class ChangelogError(ReleaseFlowError):
    """The changelog document could not be updated."""


class ProjectError(ReleaseFlowError):
    """A project manifest could not be read or written."""


class VersionNotFoundError(ProjectError):
    """No version field was found in a manifest."""


class WorkspaceError(ProjectError):
    """The package registry is inconsistent."""


class GitHubError(ReleaseFlowError):
    """The release-hosting API rejected a request.

    Attributes:
        status_code: HTTP status code of the failed response, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
