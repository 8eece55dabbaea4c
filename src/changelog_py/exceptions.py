"""Exception hierarchy for changelog-py.

Library code raises these; the CLI turns any ChangelogPyError into a
red message on stderr and a non-zero exit code.
"""

from __future__ import annotations

from collections.abc import Sequence


class ChangelogPyError(Exception):
    """Base class for all changelog-py errors."""


# Configuration


class ConfigError(ChangelogPyError):
    """Configuration could not be loaded or is invalid."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml could be found or read."""


class ConfigValidationError(ConfigError):
    """A configuration value is invalid."""


class InvalidSortDirectionError(ConfigValidationError):
    """Changelog sort direction is not one of "", "asc" or "desc"."""

    def __init__(self, direction: str) -> None:
        super().__init__(f"invalid sort direction: {direction!r} (expected '', 'asc' or 'desc')")
        self.direction = direction


class InvalidFilterPatternError(ConfigValidationError):
    """An exclude filter is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid exclude pattern {pattern!r}: {reason}")
        self.pattern = pattern


# Git


class GitError(ChangelogPyError):
    """A git command failed."""

    def __init__(self, message: str, *, stderr: str | None = None) -> None:
        detail = f"{message}: {stderr.strip()}" if stderr and stderr.strip() else message
        super().__init__(detail)
        self.stderr = stderr


# Changelog


class ChangelogError(ChangelogPyError):
    """Changelog generation failed."""


class ChangelogSkipped(ChangelogPyError):
    """Changelog generation was disabled by configuration."""


# Forge clients


class ForgeError(ChangelogPyError):
    """A request to the forge API failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CommitMetadataError(ForgeError):
    """Commit metadata could not be fetched for an entry."""


# Validation


class CommitValidationError(ChangelogPyError):
    """One or more commit subjects do not follow the commit convention.

    The message lists every rejected raw log entry, one per line.
    """

    def __init__(self, rejected: Sequence[str]) -> None:
        super().__init__("\n".join(rejected))
        self.rejected = list(rejected)
