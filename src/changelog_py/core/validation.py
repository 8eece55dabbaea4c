"""Conventional commit checks over the most recent commits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from changelog_py.core.commits import validate_commit_subject
from changelog_py.exceptions import CommitValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from changelog_py.vcs.git import Commit, GitRepository

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Commits checked and the ones that failed, in log order."""

    checked: list[Commit] = field(default_factory=list)
    rejected: list[Commit] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.rejected


def validate_commits(commits: Iterable[Commit]) -> ValidationResult:
    """Check every commit subject; keep going after a failure."""
    result = ValidationResult()
    for commit in commits:
        result.checked.append(commit)
        outcome = validate_commit_subject(commit.subject)
        if outcome.is_valid:
            logger.debug("%s passed", commit.raw)
        else:
            logger.debug("%s rejected: %s", commit.raw, outcome.error)
            result.rejected.append(commit)
    return result


def check_recent_commits(repo: GitRepository, max_count: int = 20) -> ValidationResult:
    """Validate the ``max_count`` most recent commits on HEAD.

    Raises:
        CommitValidationError: Listing every rejected log entry, if any
        GitError: If the log cannot be read
    """
    result = validate_commits(repo.get_recent_log(max_count))
    if not result.passed:
        raise CommitValidationError([c.raw for c in result.rejected])
    logger.info("%d commits follow the commit convention", len(result.checked))
    return result
