"""Version control access."""

from __future__ import annotations

from changelog_py.vcs.git import Commit, GitRepository, TagRange, is_sha1

__all__ = ["Commit", "GitRepository", "TagRange", "is_sha1"]
