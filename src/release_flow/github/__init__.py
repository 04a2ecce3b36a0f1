"""Release-hosting API integration."""

from __future__ import annotations

from release_flow.github.client import GitHubClient, ReleaseInfo

__all__ = ["GitHubClient", "ReleaseInfo"]
