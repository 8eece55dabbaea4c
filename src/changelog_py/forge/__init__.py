"""Forge clients (GitHub, GitLab, Gitea).

The pipeline only talks to the ForgeClient interface; new_client() picks
the variant once, from configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_py.forge.base import CommitMetadata, ForgeClient, HttpForgeClient
from changelog_py.forge.gitea import GiteaClient
from changelog_py.forge.github import GitHubClient
from changelog_py.forge.gitlab import GitLabClient

if TYPE_CHECKING:
    import httpx

    from changelog_py.config.models import ForgeConfig

_CLIENTS: dict[str, type[HttpForgeClient]] = {
    "github": GitHubClient,
    "gitlab": GitLabClient,
    "gitea": GiteaClient,
}


def new_client(config: ForgeConfig, *, transport: httpx.BaseTransport | None = None) -> HttpForgeClient:
    """Create the client for ``config.provider``."""
    return _CLIENTS[config.provider](config, transport=transport)


__all__ = [
    "CommitMetadata",
    "ForgeClient",
    "GitHubClient",
    "GitLabClient",
    "GiteaClient",
    "HttpForgeClient",
    "new_client",
]
