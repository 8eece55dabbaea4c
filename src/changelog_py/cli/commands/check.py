"""Implementation of the 'check-commits' command.

Checks the most recent commit subjects against the commit convention
and lists every offender, not just the first.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from rich.markup import escape

from changelog_py.config import load_config
from changelog_py.core.commits import ALLOWED_TYPES
from changelog_py.core.validation import check_recent_commits
from changelog_py.exceptions import ChangelogPyError, CommitValidationError
from changelog_py.vcs import GitRepository

if TYPE_CHECKING:
    from rich.console import Console


def run_check_commits(
    path: str | None,
    max_count: int | None,
    console: Console,
    err_console: Console,
) -> None:
    """Run the check-commits command.

    Args:
        path: Optional path to the repository
        max_count: Number of commits to check, overriding ``commits.max_count``
        console: Console for standard output
        err_console: Console for error output
    """
    project_path = Path(path) if path else Path.cwd()

    try:
        config = load_config(project_path)
    except ChangelogPyError as e:
        err_console.print(f"[red]Error loading config:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    count = max_count or config.commits.max_count
    try:
        result = check_recent_commits(GitRepository(project_path), count)
    except CommitValidationError as e:
        err_console.print("[red]Commits not following the commit convention:[/]")
        for entry in e.rejected:
            err_console.print(f"  [red]✗[/] {escape(entry)}", highlight=False)
        err_console.print(
            "\n[dim]Expected format: type(scope): description, "
            f"with type one of {', '.join(sorted(ALLOWED_TYPES))}[/]"
        )
        raise SystemExit(1) from e
    except ChangelogPyError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}")
        raise SystemExit(1) from e

    console.print(f"[green]✓[/] {len(result.checked)} commits passed")
