"""Changelog generation from git history.

The changelog for a tag is built in stages:

    resolve tag range -> git log -> exclude filters -> classify
        -> fetch commit metadata -> render sections -> sort -> write

Configuration problems (bad sort direction, bad exclude pattern) are
caught before git or the forge is touched, and any failure after that
aborts the whole build; a partial changelog is never written.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from changelog_py.core.commits import (
    Category,
    ClassifiedCommit,
    classify_commits,
    compile_exclude_patterns,
    filter_commits,
)
from changelog_py.core.enrichment import enrich_commits
from changelog_py.exceptions import (
    ChangelogError,
    ChangelogSkipped,
    ConfigValidationError,
    InvalidSortDirectionError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from pathlib import Path

    from changelog_py.config.models import ChangelogPyConfig
    from changelog_py.forge.base import CommitMetadata, ForgeClient
    from changelog_py.vcs.git import GitRepository

logger = logging.getLogger(__name__)

VALID_SORT_DIRECTIONS = ("", "asc", "desc")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

SECTION_HEADERS: dict[Category, str] = {
    Category.FIX: "### 🐛Bug fixes",
    Category.FEATURE: "### 🚀Features",
    Category.CHORE: "### 🔧Chores and Improvements",
    Category.OTHER: "### 📦Other",
}
SECTION_DIVIDER = "***"
SECTION_BREAK = "<br/>\n"

AVATAR_TEMPLATE = (
    '<span style="display: inline-block;"> '
    '<img src="{src}" width="20" height="20" title="{title}"/></span>'
)

# GitLab and Gitea markdown only breaks a line after two trailing spaces
_SPACED_JOINER_PROVIDERS = frozenset({"gitlab", "gitea"})


@dataclass(frozen=True)
class RenderedEntry:
    """A changelog line split into its link prefix and sortable body."""

    sha: str
    link: str
    body: str

    @property
    def line(self) -> str:
        return f"* {self.link} {self.body}"


@dataclass(frozen=True)
class ReleaseNotes:
    """Final release notes and where they were written (None if not written)."""

    content: str
    path: Path | None = None


def check_sort_direction(direction: str) -> None:
    """Raise InvalidSortDirectionError unless direction is "", "asc" or "desc"."""
    if direction not in VALID_SORT_DIRECTIONS:
        raise InvalidSortDirectionError(direction)


def commit_url(metadata: CommitMetadata, owner: str, name: str) -> str:
    return f"{metadata.base_url}/{owner}/{name}/commit/{metadata.id}"


def render_entry(
    commit: ClassifiedCommit,
    metadata: CommitMetadata,
    owner: str,
    name: str,
) -> RenderedEntry:
    """Render one changelog entry as markdown.

    The line links the abbreviated hash to the commit page, emphasises
    the description, shows the author's avatar and the commit time.
    """
    avatar = AVATAR_TEMPLATE.format(src=metadata.avatar_url, title=metadata.committer_email)
    at = metadata.committed_date.strftime(TIMESTAMP_FORMAT)
    return RenderedEntry(
        sha=commit.sha,
        link=f"__[{commit.sha}]({commit_url(metadata, owner, name)})__",
        body=f"___{commit.description}___ created by {avatar}\n*at:{at}*\n",
    )


def sort_entries(entries: Sequence[RenderedEntry], direction: str) -> list[RenderedEntry]:
    """Order entries by their body text, ignoring the hash link.

    An empty direction keeps the given (log) order. The sort is stable,
    so entries with identical bodies keep their relative order in both
    directions.
    """
    check_sort_direction(direction)
    if not direction:
        return list(entries)
    return sorted(entries, key=lambda e: e.body, reverse=direction == "desc")


def format_sections(
    commits: Sequence[ClassifiedCommit],
    rendered: Sequence[RenderedEntry],
    direction: str = "",
) -> list[str]:
    """Bucket rendered entries by category and lay out the sections.

    Sections come out in the order of SECTION_HEADERS. Each is its
    header, a divider, the entries and a line break; empty sections are
    left out entirely.
    """
    buckets: dict[Category, list[RenderedEntry]] = {category: [] for category in SECTION_HEADERS}
    for commit, entry in zip(commits, rendered, strict=True):
        buckets[commit.category].append(entry)

    lines: list[str] = []
    for category, header in SECTION_HEADERS.items():
        entries = buckets[category]
        if not entries:
            continue
        lines.append(header)
        lines.append(SECTION_DIVIDER)
        lines.extend(e.line for e in sort_entries(entries, direction))
        lines.append(SECTION_BREAK)
    return lines


def section_joiner(provider: str) -> str:
    return "  \n" if provider in _SPACED_JOINER_PROVIDERS else "\n"


def compose_release_notes(
    *,
    version: str,
    sections: Sequence[str],
    generated_at: datetime,
    joiner: str = "\n",
    header: str | None = None,
    footer: str | None = None,
) -> str:
    """Assemble the release notes document.

    Blocks are separated by a blank line: optional header, version
    heading, generation time, divider, the sections, optional footer.
    """
    blocks = [
        header,
        f"## Version {version}",
        generated_at.strftime(TIMESTAMP_FORMAT),
        "</br>\n",
        joiner.join(sections),
        footer,
    ]
    return "\n\n".join(block for block in blocks if block is not None)


def generation_time(clock: Callable[[], datetime] | None = None) -> datetime:
    """Timestamp for the notes; SOURCE_DATE_EPOCH wins for reproducible builds.

    Raises:
        ConfigValidationError: SOURCE_DATE_EPOCH is set but not a Unix timestamp
    """
    epoch = os.environ.get("SOURCE_DATE_EPOCH")
    if epoch:
        try:
            return datetime.fromtimestamp(int(epoch), tz=UTC)
        except (ValueError, OverflowError, OSError) as e:
            raise ConfigValidationError(f"invalid SOURCE_DATE_EPOCH {epoch!r}: {e}") from e
    return (clock or datetime.now)()


def build_changelog_sections(
    repo: GitRepository,
    client: ForgeClient,
    config: ChangelogPyConfig,
    *,
    tag: str,
    previous_tag: str | None = None,
) -> list[str]:
    """Run the git, filter, enrichment and formatting stages for ``tag``.

    Raises:
        InvalidSortDirectionError: Bad ``changelog.sort``
        InvalidFilterPatternError: Bad ``changelog.filters.exclude`` entry
        GitError: A git command failed
        CommitMetadataError: A commit lookup failed
    """
    changelog_config = config.changelog
    check_sort_direction(changelog_config.sort)
    patterns = compile_exclude_patterns(changelog_config.filters.exclude)

    tag_range = repo.resolve_tag_range(tag, previous_tag)
    logger.info("collecting commits in %s", tag_range.revision_range)
    commits = repo.get_log(tag_range)

    kept = filter_commits(commits, patterns)
    if len(kept) != len(commits):
        logger.info("excluded %d of %d commits", len(commits) - len(kept), len(commits))

    classified = classify_commits(kept)
    metadata = enrich_commits(
        [c.sha for c in classified], client, workers=changelog_config.enrich_workers
    )
    owner, name = config.forge.owner or "", config.forge.name or ""
    rendered = [render_entry(c, m, owner, name) for c, m in zip(classified, metadata, strict=True)]
    return format_sections(classified, rendered, changelog_config.sort)


def generate_changelog(
    repo: GitRepository,
    config: ChangelogPyConfig,
    *,
    tag: str | None = None,
    previous_tag: str | None = None,
    client: ForgeClient | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ReleaseNotes:
    """Produce the release notes for ``tag`` and write them to disk.

    Args:
        repo: Git repository; relative paths in the config resolve against it
        config: Loaded configuration
        tag: Tag being released (defaults to the latest tag on HEAD)
        previous_tag: Explicit start of the range; skips tag discovery
        client: Forge client (created from ``config.forge`` when omitted)
        clock: Source of the generation timestamp

    Returns:
        ReleaseNotes with the content and the path it was written to.
        Pre-written notes (``changelog.release_notes``) are returned as is
        and nothing is written.

    Raises:
        ChangelogSkipped: ``changelog.skip`` is set
        ChangelogError: A notes, header or footer file cannot be read, or
            the output cannot be written
        ConfigValidationError: Bad sort direction, exclude pattern or
            SOURCE_DATE_EPOCH, reported before any git or network work
    """
    changelog_config = config.changelog

    if changelog_config.release_notes is not None:
        notes_path = repo.path / changelog_config.release_notes
        notes = _read_text(notes_path, "release notes")
        logger.info("loaded custom release notes from %s", notes_path)
        logger.debug("custom release notes:\n%s", notes)
        return ReleaseNotes(content=notes)

    if changelog_config.skip:
        raise ChangelogSkipped("changelog generation is disabled (changelog.skip)")

    header = footer = None
    if changelog_config.header is not None:
        header = _read_text(repo.path / changelog_config.header, "changelog header")
    if changelog_config.footer is not None:
        footer = _read_text(repo.path / changelog_config.footer, "changelog footer")

    # fail on bad configuration before any git or network work
    check_sort_direction(changelog_config.sort)
    compile_exclude_patterns(changelog_config.filters.exclude)
    generated_at = generation_time(clock)

    owned = None
    if client is None:
        from changelog_py.forge import new_client

        owned = client = new_client(config.forge)

    try:
        current_tag = tag or repo.get_current_tag()
        sections = build_changelog_sections(
            repo, client, config, tag=current_tag, previous_tag=previous_tag
        )
    finally:
        if owned is not None:
            owned.close()

    content = compose_release_notes(
        version=config.version_from_tag(current_tag),
        sections=sections,
        generated_at=generated_at,
        joiner=section_joiner(config.forge.provider),
        header=header,
        footer=footer,
    )
    output = repo.path / changelog_config.output
    write_release_notes(output, content)
    return ReleaseNotes(content=content, path=output)


def write_release_notes(path: Path, content: str) -> None:
    logger.info("writing changelog to %s", path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Could not write changelog to {path}: {e}") from e


def _read_text(path: Path, what: str) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise ChangelogError(f"Could not read {what} file {path}: {e}") from e
