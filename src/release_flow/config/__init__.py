"""Configuration management for release-flow."""

from __future__ import annotations

from release_flow.config.loader import load_config
from release_flow.config.models import (
    ChangelogConfig,
    Convention,
    ConventionConfig,
    GitHubConfig,
    PackagesConfig,
    ReleaseFlowConfig,
    VersionConfig,
)

__all__ = [
    "ChangelogConfig",
    "Convention",
    "ConventionConfig",
    "GitHubConfig",
    "PackagesConfig",
    "ReleaseFlowConfig",
    "VersionConfig",
    "load_config",
]
