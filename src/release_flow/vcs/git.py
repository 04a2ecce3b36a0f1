"""Git operations via subprocess.

GitRepository wraps the handful of git commands release-flow needs:
finding the latest version tag, reading commits (optionally with their
changed files) and creating and pushing tags.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from release_flow.core.commits import RawCommit
from release_flow.core.version import Version
from release_flow.exceptions import GitError, InvalidVersionError

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)

# Record and field separators for ``git log`` output.
_RS = "\x1e"
_FS = "\x1f"


class GitRepository:
    """A git working copy.

    Args:
        path: Any directory inside the working copy

    Raises:
        GitError: If ``path`` is not inside a git repository
    """

    def __init__(self, path: Path | str = ".") -> None:
        start = Path(path)
        try:
            top = self._run_in(start, "rev-parse", "--show-toplevel")
        except GitError as e:
            raise GitError(f"Not a git repository: {start}", stderr=e.stderr) from e
        self.path = Path(top)

    @staticmethod
    def _run_in(cwd: Path, *args: str, check: bool = True) -> str:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=check,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"git {' '.join(args)} failed with exit code {e.returncode}",
                stderr=e.stderr,
            ) from e
        return result.stdout.strip()

    def run(self, *args: str, check: bool = True) -> str:
        """Run a git command in the repository and return stripped stdout."""
        return self._run_in(self.path, *args, check=check)

    def is_dirty(self) -> bool:
        """Whether the working tree has uncommitted changes."""
        return bool(self.run("status", "--porcelain"))

    def get_latest_tag(self, prefix: str = "v") -> str | None:
        """Return the highest ``<prefix>MAJOR.MINOR.PATCH`` tag.

        Tags that are not a plain version triple after the prefix (for
        example pre-release tags) are ignored.
        """
        output = self.run("tag", "--list", f"{prefix}*")
        best: tuple[tuple[int, int, int], str] | None = None
        for tag in output.splitlines():
            tag = tag.strip()
            try:
                version = Version.parse(tag[len(prefix) :]) if tag.startswith(prefix) else None
            except InvalidVersionError:
                continue
            if version is None:
                continue
            key = (version.major, version.minor, version.patch)
            if best is None or key > best[0]:
                best = (key, tag)
        return best[1] if best else None

    def get_commits_since_tag(
        self,
        tag: str | None,
        *,
        include_files: bool = False,
    ) -> list[RawCommit]:
        """Read non-merge commits after ``tag`` (all history if None).

        Args:
            tag: Exclusive lower bound, or None for the whole history
            include_files: Also read the paths each commit changed

        Returns:
            Commits, newest first
        """
        args = ["log", "--no-merges", f"--format={_RS}%H{_FS}%s{_FS}%b{_FS}"]
        if include_files:
            args.append("--name-only")
        if tag:
            args.append(f"{tag}..HEAD")
        else:
            if not self.run("rev-parse", "--verify", "--quiet", "HEAD", check=False):
                return []
            args.append("HEAD")

        output = self.run(*args)
        return _parse_log(output)

    def create_tag(self, name: str, message: str | None = None, *, force: bool = False) -> None:
        """Create an annotated tag at HEAD."""
        args = ["tag", "-a", name, "-m", message or f"Release {name}"]
        if force:
            args.append("-f")
        logger.info("Creating tag %s", name)
        self.run(*args)

    def push_head(self, *, remote: str = "origin") -> None:
        """Push the current branch to ``remote``."""
        self.run("push", remote, "HEAD")

    def push_tags(
        self,
        names: Sequence[str],
        *,
        remote: str = "origin",
        force: bool = False,
    ) -> None:
        """Push tags to ``remote``."""
        if not names:
            return
        args = ["push", remote, *names]
        if force:
            args.append("--force")
        self.run(*args)

    def commit_files(self, paths: Sequence[Path | str], message: str) -> None:
        """Stage ``paths`` and commit them."""
        self.run("add", "--", *(str(p) for p in paths))
        self.run("commit", "-m", message)


def _parse_log(output: str) -> list[RawCommit]:
    commits: list[RawCommit] = []
    for record in output.split(_RS):
        if not record.strip():
            continue
        # Trailing empty fields of the last record are lost to stripping.
        fields = record.split(_FS)
        sha, subject, body, files = (*fields, "", "", "")[:4]
        changed = tuple(line.strip() for line in files.splitlines() if line.strip())
        commits.append(
            RawCommit(
                sha=sha.strip(),
                subject=subject.strip(),
                body=body.strip(),
                changed_files=changed,
            )
        )
    return commits
