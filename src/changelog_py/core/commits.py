"""Commit subject classification and filtering.

Two passes share the same type vocabulary but differ in rigour:

- classify_commit() buckets a subject for the changelog. It only looks at
  the text before the first colon and never fails; anything it does not
  recognise lands in OTHER.
- validate_commit_subject() gates commits. It needs a full grammar match
  (or a merge subject) and rejects everything else.

A changelog must build even when a commit message is malformed, while a
validation run must reject every malformed commit, so the two are kept
as separate functions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from changelog_py.exceptions import InvalidFilterPatternError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from changelog_py.vcs.git import Commit

ALLOWED_TYPES: frozenset[str] = frozenset(
    {"feat", "fix", "docs", "doc", "style", "refactor", "test", "chore", "perf", "hotfix"}
)

MERGE_PREFIXES: tuple[str, ...] = ("Merge branch", "Merge remote")

COMMIT_MESSAGE_PATTERN = re.compile(
    r"^(?:fixup!\s*)?(?P<type>\w*)(?:\((?P<scope>[\w$.*/-].*)\))?: (?P<description>.*)"
)

_SCOPE_SUFFIX = re.compile(r"\(.*\)$")


class Category(StrEnum):
    """Changelog section a commit is filed under."""

    FIX = "fix"
    FEATURE = "feature"
    CHORE = "chore"
    OTHER = "other"


# "pref" is a long-standing misspelling of "perf" in commit histories
_LENIENT_TYPES: dict[str, Category] = {
    "fix": Category.FIX,
    "feat": Category.FEATURE,
    "chore": Category.CHORE,
    "pref": Category.CHORE,
}


@dataclass(frozen=True)
class ClassifiedCommit:
    """A commit filed under a changelog category."""

    sha: str
    raw_subject: str
    category: Category
    description: str

    @classmethod
    def from_commit(cls, commit: Commit) -> ClassifiedCommit:
        category, description = classify_commit(commit.subject)
        return cls(
            sha=commit.sha,
            raw_subject=commit.subject,
            category=category,
            description=description,
        )


def classify_commit(subject: str) -> tuple[Category, str]:
    """Bucket a subject by its prefix before the first colon.

    ``fix`` goes to FIX, ``feat`` to FEATURE, ``chore`` and ``pref`` to
    CHORE. A parenthesised scope after the type is ignored. Everything
    else, including subjects without a colon, is OTHER and keeps its
    full text as the description.
    """
    prefix, sep, rest = subject.partition(":")
    if sep:
        commit_type = _SCOPE_SUFFIX.sub("", prefix.strip())
        category = _LENIENT_TYPES.get(commit_type)
        if category is not None:
            return category, _clean_description(rest)
    return Category.OTHER, _clean_description(subject)


def classify_commits(commits: Iterable[Commit]) -> list[ClassifiedCommit]:
    return [ClassifiedCommit.from_commit(c) for c in commits]


def _clean_description(text: str) -> str:
    text = text.strip()
    if text.endswith("."):
        text = text[:-1].rstrip()
    return text


@dataclass(frozen=True)
class SubjectValidation:
    """Outcome of checking one subject against the commit convention."""

    is_valid: bool
    error: str | None = None
    commit_type: str | None = None
    scope: str | None = None
    description: str | None = None
    is_merge: bool = False


def is_merge_subject(subject: str) -> bool:
    return subject.startswith(MERGE_PREFIXES)


def validate_commit_subject(subject: str) -> SubjectValidation:
    """Check a subject against ``type(scope): description``.

    The type must be one of ALLOWED_TYPES (case-sensitive). Merge commit
    subjects always pass.

    Returns:
        SubjectValidation with is_valid set and, on failure, an error message
    """
    if is_merge_subject(subject):
        return SubjectValidation(is_valid=True, is_merge=True)

    match = COMMIT_MESSAGE_PATTERN.match(subject)
    if match is None:
        return SubjectValidation(
            is_valid=False,
            error=f"[{subject}] does not follow conventional commit format 'type(scope): description'",
        )

    commit_type = match.group("type")
    if commit_type not in ALLOWED_TYPES:
        allowed = ", ".join(sorted(ALLOWED_TYPES))
        return SubjectValidation(
            is_valid=False,
            error=f"[{subject}] Invalid commit type '{commit_type}'. Allowed types: {allowed}",
            commit_type=commit_type or None,
        )

    return SubjectValidation(
        is_valid=True,
        commit_type=commit_type,
        scope=match.group("scope"),
        description=match.group("description"),
    )


def compile_exclude_patterns(patterns: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile exclude filters up front.

    Raises:
        InvalidFilterPatternError: On the first pattern that does not compile
    """
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise InvalidFilterPatternError(pattern, str(e)) from e
    return compiled


def filter_commits(commits: Sequence[Commit], patterns: Iterable[re.Pattern[str]]) -> list[Commit]:
    """Drop commits whose subject matches any exclude pattern.

    Patterns run one after another, each over the survivors of the
    previous one. Relative order is preserved.
    """
    remaining = list(commits)
    for pattern in patterns:
        remaining = [c for c in remaining if not pattern.search(c.subject)]
    return remaining
