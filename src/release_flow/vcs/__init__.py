"""Version control integration."""

from __future__ import annotations

from release_flow.vcs.git import GitRepository

__all__ = ["GitRepository"]
