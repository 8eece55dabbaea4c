"""Core business logic for changelog-py.

This module contains the fundamental building blocks:
- Conventional commit classification (lenient) and validation (strict)
- Exclude filters over the git log
- Per-commit metadata lookup
- Changelog rendering, sorting and composition
"""

from __future__ import annotations

from changelog_py.core.changelog import (
    ReleaseNotes,
    RenderedEntry,
    build_changelog_sections,
    check_sort_direction,
    compose_release_notes,
    format_sections,
    generate_changelog,
    render_entry,
    sort_entries,
)
from changelog_py.core.commits import (
    ALLOWED_TYPES,
    Category,
    ClassifiedCommit,
    SubjectValidation,
    classify_commit,
    classify_commits,
    compile_exclude_patterns,
    filter_commits,
    validate_commit_subject,
)
from changelog_py.core.enrichment import enrich_commits
from changelog_py.core.validation import ValidationResult, check_recent_commits, validate_commits

__all__ = [
    # Commits
    "ALLOWED_TYPES",
    "Category",
    "ClassifiedCommit",
    # Changelog
    "ReleaseNotes",
    "RenderedEntry",
    "SubjectValidation",
    # Validation
    "ValidationResult",
    "build_changelog_sections",
    "check_recent_commits",
    "check_sort_direction",
    "classify_commit",
    "classify_commits",
    "compile_exclude_patterns",
    "compose_release_notes",
    "enrich_commits",
    "filter_commits",
    "format_sections",
    "generate_changelog",
    "render_entry",
    "sort_entries",
    "validate_commit_subject",
    "validate_commits",
]
