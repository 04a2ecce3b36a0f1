"""Implementation of the 'release' command.

Dry-run by default. With ``--execute`` the command writes changelog
entries, syncs package manifest versions, commits them, creates tags,
pushes and publishes GitHub releases.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel

from release_flow.cli.commands.common import PreparedRelease, prepare_release
from release_flow.core.changelog import write_changelog
from release_flow.core.release import major_tag, render_release_name
from release_flow.exceptions import ReleaseFlowError, VersionNotFoundError
from release_flow.github import GitHubClient
from release_flow.project import find_manifest, update_manifest_version

if TYPE_CHECKING:
    from pathlib import Path

    from rich.console import Console

PACKAGE_CHANGELOG = "CHANGELOG.md"


def run_release(
    path: str | None,
    execute: bool,
    prerelease: str | None,
    token: str | None,
    push: bool,
    console: Console,
    err_console: Console,
) -> None:
    """Run the release command.

    Args:
        path: Optional path to project directory
        execute: Whether to actually apply changes
        prerelease: Pre-release identifier (e.g., "alpha", "beta", "rc")
        token: GitHub token; releases are not published without one
        push: Whether to push the release commit and tags
        console: Console for standard output
        err_console: Console for error output
    """
    try:
        prepared = prepare_release(path, prerelease)
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    config, repo, plan = prepared.config, prepared.repo, prepared.plan

    if not plan.has_release:
        console.print("[yellow]No releasable changes found. Nothing to do.[/]")
        return

    if not config.allow_dirty and repo.is_dirty():
        err_console.print(
            "[red]Error:[/] Repository has uncommitted changes.\n"
            "Commit or stash them, or use [cyan]allow_dirty = true[/] in config."
        )
        raise SystemExit(1)

    tags = _release_tags(prepared)
    if not tags:
        console.print("[yellow]No public package needs a release. Nothing to do.[/]")
        return

    mode_str = "[green]EXECUTING[/]" if execute else "[yellow]DRY-RUN[/]"
    if plan.is_first_release:
        console.print(f"\n{mode_str} - First release: [green]{plan.version}[/]\n")
    else:
        console.print(
            f"\n{mode_str} - Releasing [cyan]{plan.previous_version}[/] -> "
            f"[green]{plan.version}[/] ({plan.bump_type})\n"
        )

    if not execute:
        lines = ["[bold]Would make the following changes:[/]", ""]
        if config.changelog.enabled:
            lines.append(f"  • Update [cyan]{config.effective_changelog_path}[/]")
        for result in plan.updated_packages:
            lines.append(
                f"  • Bump [cyan]{result.package.name}[/] "
                f"{result.package.current_version} -> {result.new_version}"
            )
        lines.extend(f"  • Create tag [cyan]{tag}[/]" for tag in tags)
        if push and config.push:
            lines.append("  • Push commit and tags")
        if config.github.repository:
            lines.append(f"  • Publish GitHub release(s) on [cyan]{config.github.repository}[/]")
        console.print(
            Panel("\n".join(lines), title="[yellow]Dry Run Preview[/]", border_style="yellow")
        )
        console.print("\n[dim]Run with [cyan]--execute[/] to apply these changes.[/]")
        return

    try:
        written = _write_files(prepared, console)
        if written:
            repo.commit_files(written, f"chore(release): {', '.join(tags)}")
            console.print("  [green]✓[/] Committed release changes")

        for tag in tags:
            repo.create_tag(tag)
            console.print(f"  [green]✓[/] Created tag {tag}")

        floating = _major_tags(prepared, tags)
        for tag in floating:
            repo.create_tag(tag, force=True)
            console.print(f"  [green]✓[/] Moved tag {tag}")

        if push and config.push:
            if written:
                repo.push_head()
            repo.push_tags(tags)
            repo.push_tags(floating, force=True)
            console.print("  [green]✓[/] Pushed tags")

        _publish(prepared, token, console, err_console)
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    console.print(
        Panel(
            f"[green]Released {', '.join(tags)}![/]",
            title="[green]Release Complete[/]",
            border_style="green",
        )
    )


def _release_tags(prepared: PreparedRelease) -> list[str]:
    """Per-package tags in monorepo mode, otherwise the repo tag.

    With ``packages.root_release`` the repo tag leads the package tags.
    """
    plan = prepared.plan
    if not plan.packages:
        return [plan.tag]
    tags = [result.tag for result in plan.updated_packages]
    if prepared.config.packages.root_release:
        tags.insert(0, plan.tag)
    return tags


def _major_tags(prepared: PreparedRelease, tags: list[str]) -> list[str]:
    if not prepared.config.github.update_major_tag or prepared.plan.version.prerelease:
        return []
    return [t for t in (major_tag(tag) for tag in tags) if t]


def _write_files(prepared: PreparedRelease, console: Console) -> list[Path]:
    """Write changelogs and manifest versions; return the touched paths."""
    config, repo, plan = prepared.config, prepared.repo, prepared.plan
    written: list[Path] = []

    if config.changelog.enabled:
        changelog_path = repo.path / config.effective_changelog_path
        written.append(write_changelog(changelog_path, plan.changelog_entry))
        console.print(f"  [green]✓[/] Updated {config.effective_changelog_path}")

    if not plan.packages:
        manifest = find_manifest(repo.path)
        if manifest is not None:
            written.extend(_sync_manifest(manifest, str(plan.version), console))
        return written

    for result in plan.updated_packages:
        package_dir = repo.path / result.package.path
        if config.changelog.enabled and config.changelog.per_package:
            entry = plan.package_changelogs.get(result.package.path, "")
            if entry:
                written.append(write_changelog(package_dir / PACKAGE_CHANGELOG, entry))
        manifest = find_manifest(package_dir)
        if manifest is not None:
            written.extend(_sync_manifest(manifest, str(result.new_version), console))
    return written


def _sync_manifest(manifest: Path, version: str, console: Console) -> list[Path]:
    try:
        update_manifest_version(manifest, version)
    except VersionNotFoundError:
        console.print(f"  [dim]No version field in {manifest.name}, skipped[/]")
        return []
    console.print(f"  [green]✓[/] Set {manifest.parent.name}/{manifest.name} to {version}")
    return [manifest]


def _publish(
    prepared: PreparedRelease,
    token: str | None,
    console: Console,
    err_console: Console,
) -> None:
    config, plan = prepared.config, prepared.plan
    github = config.github
    if not github.repository:
        return
    if not token:
        err_console.print("[yellow]Warning:[/] No GitHub token, skipping GitHub release")
        return

    releases: list[tuple[str, str, str]] = []
    if not plan.packages or config.packages.root_release:
        releases.append((plan.tag, str(plan.version), plan.changelog_entry))
    if plan.packages:
        for result in plan.updated_packages:
            body = plan.package_changelogs.get(result.package.path, "")
            releases.append((result.tag, result.tag, body))

    prerelease = github.prerelease or plan.version.prerelease is not None
    with GitHubClient(token, github.repository, github.api_url) as client:
        for tag, version, body in releases:
            info = client.create_release(
                tag,
                render_release_name(github.release_name_template, version),
                body,
                draft=github.draft,
                prerelease=prerelease,
            )
            console.print(f"  [green]✓[/] Published {info.html_url or tag}")
