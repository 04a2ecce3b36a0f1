"""Shared fixtures for release-flow tests."""

from __future__ import annotations

import shutil
import subprocess
from typing import TYPE_CHECKING

import pytest

from release_flow.config.models import ConventionConfig, ReleaseFlowConfig
from release_flow.core.commits import RawCommit, classify_commit
from release_flow.core.version import Version
from release_flow.monorepo.models import PackageDescriptor

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def convention() -> ConventionConfig:
    return ConventionConfig()


@pytest.fixture
def config() -> ReleaseFlowConfig:
    return ReleaseFlowConfig()


@pytest.fixture
def make_commit(convention):
    """Factory building classified commits from a subject line."""
    counter = iter(range(1, 10_000))

    def _make(subject: str, body: str = "", files: tuple[str, ...] = (), sha: str | None = None):
        raw = RawCommit(
            sha=sha or f"{next(counter):040x}",
            subject=subject,
            body=body,
            changed_files=files,
        )
        return classify_commit(raw, convention)

    return _make


@pytest.fixture
def feat_commit(make_commit):
    return make_commit("feat: add auth")


@pytest.fixture
def fix_commit(make_commit):
    return make_commit("fix: fix leak")


@pytest.fixture
def breaking_commit(make_commit):
    return make_commit("feat(api)!: drop v1 endpoints")


@pytest.fixture
def registry() -> list[PackageDescriptor]:
    return [
        PackageDescriptor("@acme/core", "packages/core", Version(1, 0, 0), scope="core"),
        PackageDescriptor("@acme/cli", "packages/cli", Version(2, 0, 0), scope="cli"),
        PackageDescriptor(
            "@acme/internal",
            "packages/internal",
            Version(0, 1, 0),
            scope="internal",
            is_private=True,
        ),
    ]


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path):
    """An initialised git repository with a committer identity configured."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    _git(tmp_path, "init", "-q", "-b", "main")
    _git(tmp_path, "config", "user.name", "Test")
    _git(tmp_path, "config", "user.email", "test@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _git(tmp_path, "config", "tag.gpgsign", "false")
    return tmp_path


@pytest.fixture
def commit_file(git_repo):
    """Write a file and commit it with the given message."""

    def _commit(relpath: str, message: str, content: str | None = None) -> str:
        target = git_repo / relpath
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content if content is not None else f"{message}\n", encoding="utf-8")
        _git(git_repo, "add", "--", relpath)
        _git(git_repo, "commit", "-q", "-m", message)
        return _git(git_repo, "rev-parse", "HEAD")

    return _commit


@pytest.fixture
def tag(git_repo):
    def _tag(name: str) -> None:
        _git(git_repo, "tag", "-a", name, "-m", name)

    return _tag
