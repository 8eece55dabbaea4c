"""changelog-py: release notes from git history.

Turns the commits between two tags into a categorized markdown changelog,
enriched with authorship data from GitHub, GitLab or Gitea, and checks
recent commit subjects against a conventional commit grammar.
"""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
