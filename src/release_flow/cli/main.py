"""CLI entry point for release-flow."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from release_flow.cli.commands.check import run_check
from release_flow.cli.commands.release import run_release

console = Console()
err_console = Console(stderr=True)

path_option = click.option(
    "--path",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project directory (defaults to the current directory).",
)
prerelease_option = click.option(
    "--prerelease",
    default=None,
    help="Pre-release label to attach to the version (e.g. beta).",
)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(package_name="release-flow")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Automated semantic releases from commit history."""
    _setup_logging(verbose)


@cli.command()
@path_option
@prerelease_option
@click.option("--json", "as_json", is_flag=True, help="Print the release plan as JSON.")
def check(path: str | None, prerelease: str | None, as_json: bool) -> None:
    """Show what the next release would be."""
    run_check(path, as_json, prerelease, console, err_console)


@cli.command()
@path_option
@prerelease_option
@click.option("--execute", is_flag=True, help="Apply changes (default is a dry run).")
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    default=None,
    help="GitHub token for publishing releases [env: GITHUB_TOKEN].",
)
@click.option("--no-push", is_flag=True, help="Do not push the release commit and tags.")
def release(
    path: str | None,
    prerelease: str | None,
    execute: bool,
    token: str | None,
    no_push: bool,
) -> None:
    """Cut a release: changelog, versions, tags and GitHub releases."""
    run_release(
        path,
        execute=execute,
        prerelease=prerelease,
        token=token,
        push=not no_push,
        console=console,
        err_console=err_console,
    )
