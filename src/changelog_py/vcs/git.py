"""Git operations via subprocess.

Every git call goes through GitRepository._run so failures surface as
GitError with the command's stderr attached.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from changelog_py.exceptions import GitError

logger = logging.getLogger(__name__)

LOG_FORMAT_ARGS = ("--pretty=oneline", "--abbrev-commit", "--no-decorate", "--no-color")

_SHA1_RE = re.compile(r"^[a-fA-F0-9]{40}$")
_ABBREV_SHA_RE = re.compile(r"^[a-fA-F0-9]{7,40}$")

# describe stderr fragments meaning "there is no earlier tag"
_NO_TAG_MARKERS = (
    "No names found",
    "No tags can describe",
    "cannot describe anything",
    # the tag is known to exist, so it sits on the root commit and "<tag>^" does not
    "Not a valid object name",
)


def is_sha1(ref: str) -> bool:
    """Return True if ``ref`` is a full 40 character commit id."""
    return bool(_SHA1_RE.match(ref))


@dataclass(frozen=True)
class Commit:
    """One line of ``git log --pretty=oneline --abbrev-commit``."""

    sha: str
    subject: str

    @classmethod
    def from_log_line(cls, line: str) -> Commit:
        sha, _, subject = line.partition(" ")
        if not _ABBREV_SHA_RE.match(sha):
            raise GitError(f"Unexpected git log line: {line!r}")
        return cls(sha=sha, subject=subject)

    @property
    def raw(self) -> str:
        return f"{self.sha} {self.subject}"


@dataclass(frozen=True)
class TagRange:
    """The pair of references bounding a changelog.

    ``previous_ref`` is a tag name, or the repository root commit id when
    the current tag has no ancestor tag. ``qualified`` is set when the
    previous tag was discovered by git, so both ends can be written as
    ``tags/<name>``; an explicit override is used exactly as given.
    """

    previous_ref: str
    current_ref: str
    qualified: bool = True

    @property
    def is_root(self) -> bool:
        return is_sha1(self.previous_ref)

    @property
    def revision_range(self) -> str:
        if self.is_root or not self.qualified:
            return f"{self.previous_ref}..{self.current_ref}"
        return f"tags/{self.previous_ref}..tags/{self.current_ref}"


class GitRepository:
    """Thin wrapper around the git command line for one repository."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()

    def _run(self, *args: str, step: str) -> str:
        cmd = ["git", *args]
        logger.debug("running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"{step} failed (git exit code {e.returncode})", stderr=e.stderr) from e
        return result.stdout

    def get_current_tag(self) -> str:
        """Return the most recent tag reachable from HEAD."""
        return self._run("describe", "--tags", "--abbrev=0", step="finding current tag").strip()

    def tag_exists(self, tag: str) -> bool:
        """Return True if ``tag`` is a tag pointing (directly or not) at a commit."""
        try:
            self._run(
                "rev-parse", "--verify", "--quiet", f"refs/tags/{tag}^{{commit}}", step="verifying tag"
            )
        except GitError as e:
            # --quiet fails silently for a missing ref; anything on stderr is a real error
            if e.stderr and e.stderr.strip():
                raise
            return False
        return True

    def get_previous_tag(self, tag: str) -> str | None:
        """Return the nearest tag before ``tag``, or None if there is none.

        Raises:
            GitError: If ``tag`` is not a tag, or describe fails for any
                reason other than a missing earlier tag
        """
        if not self.tag_exists(tag):
            raise GitError(f"unknown tag {tag!r}")
        try:
            return self._run(
                "describe", "--tags", "--abbrev=0", f"tags/{tag}^", step="finding previous tag"
            ).strip()
        except GitError as e:
            if e.stderr and any(marker in e.stderr for marker in _NO_TAG_MARKERS):
                return None
            raise

    def get_root_commit(self) -> str:
        """Return the id of the repository's root commit."""
        output = self._run("rev-list", "--max-parents=0", "HEAD", step="finding root commit")
        roots = output.split()
        if not roots:
            raise GitError("finding root commit failed: repository has no commits")
        return roots[0]

    def resolve_tag_range(self, tag: str, previous_tag: str | None = None) -> TagRange:
        """Work out which references bound the changelog for ``tag``.

        Args:
            tag: The tag being released
            previous_tag: Explicit previous reference; skips tag discovery

        Returns:
            TagRange ending at ``tag``
        """
        if previous_tag:
            logger.info("using previous tag override %s", previous_tag)
            return TagRange(previous_ref=previous_tag, current_ref=tag, qualified=False)

        previous = self.get_previous_tag(tag)
        if previous is None:
            root = self.get_root_commit()
            logger.info("no tag before %s, using history since root commit %s", tag, root[:7])
            return TagRange(previous_ref=root, current_ref=tag)

        return TagRange(previous_ref=previous, current_ref=tag)

    def get_log(self, tag_range: TagRange) -> list[Commit]:
        """Return commits in ``tag_range``, most recent first."""
        output = self._run("log", *LOG_FORMAT_ARGS, tag_range.revision_range, step="reading git log")
        return _parse_log(output)

    def get_recent_log(self, max_count: int = 20) -> list[Commit]:
        """Return the ``max_count`` most recent commits on HEAD."""
        output = self._run(
            "log", *LOG_FORMAT_ARGS, f"--max-count={max_count}", step="reading recent git log"
        )
        return _parse_log(output)


def _parse_log(output: str) -> list[Commit]:
    lines = output.split("\n")
    # git terminates the last line with a newline
    if lines and lines[-1] == "":
        lines = lines[:-1]
    return [Commit.from_log_line(line) for line in lines]
