"""Implementation of the 'changelog' command.

The changelog command writes release notes for a tag.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel

from changelog_py.config import load_config
from changelog_py.core.changelog import generate_changelog
from changelog_py.exceptions import ChangelogPyError, ChangelogSkipped
from changelog_py.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_changelog(
    path: str | None,
    tag: str | None,
    previous_tag: str | None,
    output: str | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the changelog command.

    Args:
        path: Optional path to the repository
        tag: Tag to generate notes for (defaults to latest tag on HEAD)
        previous_tag: Explicit previous reference, bypassing tag discovery
        output: Output file, overriding ``changelog.output``; a relative path
            is taken from the current directory
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    # Load configuration
    try:
        config = load_config(project_path)
    except ChangelogPyError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if output:
        # relative to where the command runs, not to --path
        config.changelog.output = Path(output).resolve()

    repo = GitRepository(project_path)

    try:
        notes = generate_changelog(repo, config, tag=tag, previous_tag=previous_tag)
    except ChangelogSkipped as e:
        console.print(f"[yellow]Skipped:[/] {escape(str(e))}")
        return
    except ChangelogPyError as e:
        err_console.print(f"[red]Error generating changelog:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    if notes.path is None:
        console.print("[green]✓[/] Using pre-written release notes")
        return

    console.print(
        Panel(
            f"[green]Changelog written to[/] [cyan]{notes.path}[/]",
            title="[green]Changelog Complete[/]",
            border_style="green",
        )
    )
