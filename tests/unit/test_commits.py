"""Tests for commit classification, validation and filtering."""

from __future__ import annotations

import pytest

from changelog_py.core.commits import (
    ALLOWED_TYPES,
    COMMIT_MESSAGE_PATTERN,
    Category,
    ClassifiedCommit,
    classify_commit,
    classify_commits,
    compile_exclude_patterns,
    filter_commits,
    validate_commit_subject,
)
from changelog_py.exceptions import InvalidFilterPatternError
from changelog_py.vcs.git import Commit


class TestClassifyCommit:
    """Tests for the lenient classify_commit()."""

    @pytest.mark.parametrize(
        ("subject", "category", "description"),
        [
            ("fix: null pointer", Category.FIX, "null pointer"),
            ("feat: add login", Category.FEATURE, "add login"),
            ("chore: cleanup", Category.CHORE, "cleanup"),
            ("pref: faster parsing", Category.CHORE, "faster parsing"),
        ],
    )
    def test_known_prefixes(self, subject: str, category: Category, description: str):
        """fix, feat, chore and pref map to their sections."""
        assert classify_commit(subject) == (category, description)

    def test_scope_is_stripped(self):
        """A scope after the type does not change the category."""
        category, description = classify_commit("fix(api): handle empty body")

        assert category == Category.FIX
        assert description == "handle empty body"

    def test_unstructured_subject_is_other(self):
        """A subject without a type prefix keeps its full text."""
        assert classify_commit("update readme") == (Category.OTHER, "update readme")

    def test_other_types_are_other(self):
        """Valid but unbucketed types (docs, perf, ...) land in OTHER unchanged."""
        assert classify_commit("docs: explain config") == (Category.OTHER, "docs: explain config")
        assert classify_commit("perf: cache lookups") == (Category.OTHER, "perf: cache lookups")

    def test_case_sensitive(self):
        """Upper-case types are not recognised."""
        category, _ = classify_commit("FIX: shouting")
        assert category == Category.OTHER

    def test_trailing_period_and_whitespace_trimmed(self):
        """Surrounding whitespace and a trailing period are removed."""
        assert classify_commit("feat:   add export.  ") == (Category.FEATURE, "add export")

    @pytest.mark.parametrize("subject", ["", ":", "fix:", "(((:", "Merge branch 'main'"])
    def test_never_raises(self, subject: str):
        """Odd subjects still get a category."""
        category, _ = classify_commit(subject)
        assert isinstance(category, Category)

    def test_classified_commit_from_commit(self):
        """ClassifiedCommit keeps sha and raw subject."""
        classified = ClassifiedCommit.from_commit(Commit("abc1234", "feat: add login"))

        assert classified.sha == "abc1234"
        assert classified.raw_subject == "feat: add login"
        assert classified.category == Category.FEATURE
        assert classified.description == "add login"

    def test_classify_commits_preserves_order(self, sample_commits: list[Commit]):
        """classify_commits() keeps log order."""
        classified = classify_commits(sample_commits)

        assert [c.sha for c in classified] == [c.sha for c in sample_commits]


class TestValidateCommitSubject:
    """Tests for the strict validate_commit_subject()."""

    def test_valid_feat(self):
        """Valid feat: subject passes."""
        result = validate_commit_subject("feat: add user authentication")

        assert result.is_valid
        assert result.error is None
        assert result.commit_type == "feat"
        assert result.description == "add user authentication"

    def test_valid_with_scope(self):
        """Scope is captured."""
        result = validate_commit_subject("fix(api): handle null responses")

        assert result.is_valid
        assert result.scope == "api"
        assert result.description == "handle null responses"

    def test_fixup_prefix_accepted(self):
        """fixup! prefixes are allowed in front of the type."""
        result = validate_commit_subject("fixup! fix: typo in handler")

        assert result.is_valid
        assert result.commit_type == "fix"

    def test_all_allowed_types_valid(self):
        """Every type in the vocabulary passes."""
        for commit_type in ALLOWED_TYPES:
            result = validate_commit_subject(f"{commit_type}: some change")
            assert result.is_valid, f"Type '{commit_type}' should be valid"

    @pytest.mark.parametrize(
        "subject",
        ["Merge branch 'feature/x' into main", "Merge remote-tracking branch 'origin/main'"],
    )
    def test_merge_subjects_pass(self, subject: str):
        """Merge commits are always accepted."""
        result = validate_commit_subject(subject)

        assert result.is_valid
        assert result.is_merge

    def test_merge_pull_request_rejected(self):
        """Only 'Merge branch' and 'Merge remote' are exempt."""
        assert not validate_commit_subject("Merge pull request #12 from x/y").is_valid

    def test_non_conventional_rejected(self):
        """Free-form subjects fail with a format error."""
        result = validate_commit_subject("Added a new feature")

        assert not result.is_valid
        assert "conventional commit format" in result.error

    def test_unknown_type_rejected(self):
        """Types outside the vocabulary fail."""
        result = validate_commit_subject("feature: add login")

        assert not result.is_valid
        assert "Invalid commit type 'feature'" in result.error

    def test_pref_typo_rejected(self):
        """The lenient 'pref' alias is not accepted by the strict check."""
        assert not validate_commit_subject("pref: faster").is_valid

    def test_case_sensitive(self):
        """Upper-case types are rejected."""
        assert not validate_commit_subject("FEAT: uppercase type").is_valid

    def test_missing_space_after_colon_rejected(self):
        """The colon must be followed by a space."""
        assert not validate_commit_subject("fix:no space").is_valid

    def test_pattern_is_shared_constant(self):
        """The grammar is compiled once at import time."""
        assert COMMIT_MESSAGE_PATTERN.match("docs(readme): typo") is not None


class TestExcludeFilters:
    """Tests for compile_exclude_patterns() and filter_commits()."""

    def test_invalid_pattern_raises(self):
        """A pattern that does not compile aborts with its text in the error."""
        with pytest.raises(InvalidFilterPatternError, match=r"\[unclosed"):
            compile_exclude_patterns(["^docs:", "[unclosed"])

    def test_filter_matches_subject_only(self):
        """Patterns never see the hash."""
        commits = [Commit("abc1234", "feat: add login"), Commit("def4567", "fix: bug")]
        patterns = compile_exclude_patterns(["^abc"])

        assert filter_commits(commits, patterns) == commits

    def test_filter_applies_every_pattern(self, sample_commits: list[Commit]):
        """Each pattern removes its matches; survivors keep their order."""
        patterns = compile_exclude_patterns(["^docs:", "readme"])
        filtered = filter_commits(sample_commits, patterns)

        assert [c.sha for c in filtered] == ["abc1234", "def4567", "bbb2222"]

    def test_search_semantics(self):
        """Patterns match anywhere in the subject."""
        commits = [Commit("abc1234", "fix: typo in docs"), Commit("def4567", "feat: export")]
        filtered = filter_commits(commits, compile_exclude_patterns(["typo"]))

        assert [c.sha for c in filtered] == ["def4567"]

    def test_no_patterns_keeps_everything(self, sample_commits: list[Commit]):
        """Without patterns the input comes back unchanged."""
        assert filter_commits(sample_commits, []) == sample_commits
