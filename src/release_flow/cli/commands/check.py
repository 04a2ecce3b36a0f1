"""Implementation of the 'check' command.

The check command computes the release plan without touching anything and
prints it as tables, or as JSON for consumption by CI.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.table import Table

from release_flow.cli.commands.common import prepare_release
from release_flow.core.sections import SECTION_ORDER
from release_flow.exceptions import ReleaseFlowError

if TYPE_CHECKING:
    from rich.console import Console

    from release_flow.core.release import ReleasePlan


def run_check(
    path: str | None,
    as_json: bool,
    prerelease: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the check command.

    Args:
        path: Optional path to project directory
        as_json: Emit the plan as JSON instead of tables
        prerelease: Pre-release identifier (e.g., "alpha", "beta", "rc")
        console: Console for standard output
        err_console: Console for error output
    """
    try:
        prepared = prepare_release(path, prerelease)
    except ReleaseFlowError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise SystemExit(1) from e

    plan = prepared.plan
    if as_json:
        console.out(json.dumps(plan.to_dict(), indent=2), highlight=False)
        return

    _print_summary(plan, console)


def _print_summary(plan: ReleasePlan, console: Console) -> None:
    previous = plan.previous_tag or "[dim]none[/]"
    if not plan.has_release:
        console.print(f"[yellow]No release needed.[/] Latest release: {previous}")
    elif plan.is_first_release:
        console.print(f"First release: [green]{plan.tag}[/]")
    else:
        console.print(f"Next release: {previous} -> [green]{plan.tag}[/] ({plan.bump_type})")

    sections = Table(title="Changes")
    sections.add_column("Section")
    sections.add_column("Commits", justify="right")
    for section in SECTION_ORDER:
        count = plan.section_counts.get(section, 0)
        if count:
            sections.add_row(section, str(count))
    sections.add_row("[bold]Total[/]", str(plan.section_counts.get("total", 0)))
    console.print(sections)

    if not plan.packages:
        return

    packages = Table(title="Packages")
    packages.add_column("Package")
    packages.add_column("Path", style="dim")
    packages.add_column("Current")
    packages.add_column("Bump")
    packages.add_column("Next")
    for result in plan.packages:
        name = result.package.name
        if result.package.is_private:
            name += " [dim](private)[/]"
        style = "green" if result.updated else "dim"
        packages.add_row(
            name,
            result.package.path,
            str(result.package.current_version),
            str(result.bump_type),
            f"[{style}]{result.new_version}[/]",
        )
    console.print(packages)
