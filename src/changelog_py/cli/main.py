"""Command line entry point."""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from changelog_py import __version__
from changelog_py.cli.commands.changelog import run_changelog
from changelog_py.cli.commands.check import run_check_commits

PREVIOUS_TAG_ENV = "CHANGELOG_PY_PREVIOUS_TAG"

console = Console()
err_console = Console(stderr=True)


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # keep request logs out of normal runs
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.version_option(version=__version__, prog_name="changelog-py")
def cli(verbose: bool) -> None:
    """Release notes from git history, and commit message checks."""
    setup_logging(verbose)


@cli.command()
@click.option("--path", "-p", type=click.Path(exists=True, file_okay=False), help="Repository path")
@click.option("--tag", "-t", help="Tag to generate notes for (default: latest tag on HEAD)")
@click.option(
    "--previous-tag",
    envvar=PREVIOUS_TAG_ENV,
    help=f"Start of the commit range, skipping tag discovery [env: {PREVIOUS_TAG_ENV}]",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file, relative to the current directory (default: changelog.output in the repository)",
)
def changelog(path: str | None, tag: str | None, previous_tag: str | None, output: str | None) -> None:
    """Write the changelog for a tag."""
    run_changelog(path, tag, previous_tag, output, console, err_console)


@cli.command("check-commits")
@click.option("--path", "-p", type=click.Path(exists=True, file_okay=False), help="Repository path")
@click.option(
    "--max-count", "-n", type=click.IntRange(min=1), help="Number of recent commits to check"
)
def check_commits(path: str | None, max_count: int | None) -> None:
    """Check recent commit subjects against the commit convention."""
    run_check_commits(path, max_count, console, err_console)


if __name__ == "__main__":
    cli()
