"""Configuration models for release-flow.

These Pydantic models describe the ``[tool.release-flow]`` table in
pyproject.toml. Every model has complete defaults, so an empty table (or
no table at all) yields a working configuration.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from release_flow.core.sections import DEFAULT_TYPE_TO_SECTION, SECTION_ORDER
from release_flow.core.version import Version
from release_flow.exceptions import InvalidVersionError
from release_flow.monorepo.models import RoutingMode


class Convention(StrEnum):
    """Commit-message surface syntax used by a repository."""

    CONVENTIONAL = "conventional"
    CLEAN_COMMIT = "clean-commit"


MAJOR_KEYWORDS = ["BREAKING CHANGE", "BREAKING-CHANGE", "breaking"]

# Per-convention defaults for fields left unset by the user.
CONVENTION_DEFAULTS: dict[Convention, dict[str, list[str]]] = {
    Convention.CONVENTIONAL: {
        "major_keywords": MAJOR_KEYWORDS,
        "minor_keywords": ["feat", "new", "add"],
        "patch_keywords": ["fix", "bugfix", "security", "perf"],
        "exclude_types": ["docs", "style", "test", "ci", "build"],
    },
    Convention.CLEAN_COMMIT: {
        "major_keywords": MAJOR_KEYWORDS,
        "minor_keywords": ["new", "add", "feat"],
        "patch_keywords": [
            "update",
            "remove",
            "security",
            "setup",
            "chore",
            "fix",
            "bugfix",
            "perf",
        ],
        "exclude_types": ["docs", "test", "release"],
    },
}


class ConventionConfig(BaseModel):
    """Commit classification and bump rules.

    Keyword lists left as ``None`` are filled from the selected
    convention's defaults after validation.

    Attributes:
        convention: Commit-message convention selecting the defaults
        major_keywords: Literal phrases that force a major bump anywhere in a message
        minor_keywords: Commit types that trigger a minor bump
        patch_keywords: Commit types that trigger a patch bump
        exclude_types: Commit types left out of the changelog
        exclude_scopes: Commit scopes left out of the changelog
        type_to_section: Commit type to changelog section mapping
        skip_release_patterns: Markers that drop a commit from the release entirely
    """

    model_config = ConfigDict(extra="forbid")

    convention: Convention = Convention.CONVENTIONAL
    major_keywords: list[str] | None = None
    minor_keywords: list[str] | None = None
    patch_keywords: list[str] | None = None
    exclude_types: list[str] | None = None
    exclude_scopes: list[str] = Field(default_factory=list)
    type_to_section: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TYPE_TO_SECTION))
    skip_release_patterns: list[str] = Field(
        default_factory=lambda: ["[skip release]", "[release skip]", "[no release]"]
    )

    @field_validator("type_to_section")
    @classmethod
    def _check_sections(cls, value: dict[str, str]) -> dict[str, str]:
        unknown = sorted({s for s in value.values() if s not in SECTION_ORDER})
        if unknown:
            raise ValueError(
                f"Unknown changelog section(s) {unknown}; expected one of {list(SECTION_ORDER)}"
            )
        return value

    @model_validator(mode="after")
    def _fill_convention_defaults(self) -> ConventionConfig:
        defaults = CONVENTION_DEFAULTS[self.convention]
        for name, default in defaults.items():
            if getattr(self, name) is None:
                setattr(self, name, list(default))
        return self


class VersionConfig(BaseModel):
    """Version numbering configuration."""

    model_config = ConfigDict(extra="forbid")

    tag_prefix: str = "v"
    initial_version: str = "0.1.0"
    pre_release: str | None = None

    @field_validator("initial_version")
    @classmethod
    def _check_initial_version(cls, value: str) -> str:
        try:
            Version.parse(value)
        except InvalidVersionError as e:
            raise ValueError(str(e)) from e
        return value


class ChangelogConfig(BaseModel):
    """Changelog file configuration."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    path: Path = Path("CHANGELOG.md")
    per_package: bool = True


class GitHubConfig(BaseModel):
    """Release-hosting API configuration."""

    model_config = ConfigDict(extra="forbid")

    api_url: str = "https://api.github.com"
    repository: str | None = None
    release_name_template: str = "Release {version}"
    draft: bool = False
    prerelease: bool = False
    update_major_tag: bool = False

    @field_validator("repository")
    @classmethod
    def _check_repository(cls, value: str | None) -> str | None:
        if value is not None and value.count("/") != 1:
            raise ValueError(f"repository must look like 'owner/name', got {value!r}")
        return value


class PackagesConfig(BaseModel):
    """Monorepo configuration.

    Attributes:
        enabled: Treat the repository as a monorepo
        paths: Explicit package directories; empty means workspace discovery
        independent: Version packages independently (False means unified)
        routing: Signals used to attribute commits to packages
        scope_mapping: Explicit commit scope to package path overrides
        root_release: Also tag the repository-wide version, which marks where
            the next run starts reading history
    """

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False
    paths: list[str] = Field(default_factory=list)
    independent: bool = True
    routing: RoutingMode = RoutingMode.BOTH
    scope_mapping: dict[str, str] = Field(default_factory=dict)
    root_release: bool = True

    @field_validator("paths")
    @classmethod
    def _strip_trailing_slash(cls, value: list[str]) -> list[str]:
        return [p.rstrip("/") for p in value]

    @property
    def unified(self) -> bool:
        return not self.independent


class ReleaseFlowConfig(BaseModel):
    """Top-level release-flow configuration."""

    model_config = ConfigDict(extra="forbid")

    default_branch: str = "main"
    allow_dirty: bool = False
    push: bool = True
    commits: ConventionConfig = Field(default_factory=ConventionConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    packages: PackagesConfig = Field(default_factory=PackagesConfig)

    @property
    def effective_tag_prefix(self) -> str:
        return self.version.tag_prefix

    @property
    def effective_changelog_path(self) -> Path:
        return self.changelog.path

    @property
    def is_monorepo(self) -> bool:
        return self.packages.enabled or bool(self.packages.paths)
