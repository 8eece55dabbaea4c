"""Configuration models.

All settings live under ``[tool.changelog-py]`` in pyproject.toml and
map onto these pydantic models. Every field has a default, so an empty
section (or none at all) yields a usable configuration.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ForgeProvider = Literal["github", "gitlab", "gitea"]

DEFAULT_API_URLS: dict[str, str] = {
    "github": "https://api.github.com",
    "gitlab": "https://gitlab.com/api/v4",
}

DEFAULT_BASE_URLS: dict[str, str] = {
    "github": "https://github.com",
    "gitlab": "https://gitlab.com",
}

DEFAULT_TOKEN_ENVS: dict[str, str] = {
    "github": "GITHUB_TOKEN",
    "gitlab": "GITLAB_TOKEN",
    "gitea": "GITEA_TOKEN",
}


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid")


class FiltersConfig(_Model):
    """Changelog entry filters."""

    exclude: list[str] = Field(
        default_factory=list,
        description="Regular expressions; matching commit subjects are left out",
    )


class ChangelogConfig(_Model):
    """Changelog generation settings."""

    skip: bool = False
    sort: str = Field(
        default="",
        description='Entry order inside a section: "" (log order), "asc" or "desc"',
    )
    filters: FiltersConfig = Field(default_factory=FiltersConfig)
    output: Path = Path("dist/CHANGELOG.md")
    header: Path | None = None
    footer: Path | None = None
    release_notes: Path | None = Field(
        default=None,
        description="Pre-written release notes; when set nothing is generated",
    )
    enrich_workers: int = Field(
        default=1,
        ge=1,
        description="Concurrent commit lookups; 1 fetches one commit at a time",
    )


class ForgeConfig(_Model):
    """Forge (GitHub, GitLab, Gitea) connection settings."""

    provider: ForgeProvider = "github"
    owner: str | None = None
    name: str | None = None
    api_url: str | None = None
    base_url: str | None = None
    token_env: str | None = None
    timeout: float = Field(default=30.0, gt=0)
    retries: int = Field(default=0, ge=0)

    @property
    def effective_api_url(self) -> str | None:
        url = self.api_url or DEFAULT_API_URLS.get(self.provider)
        # Gitea is always self-hosted; its API lives under the web root
        if url is None and self.provider == "gitea" and self.base_url:
            url = f"{self.base_url.rstrip('/')}/api/v1"
        return url.rstrip("/") if url else None

    @property
    def effective_base_url(self) -> str | None:
        url = self.base_url or DEFAULT_BASE_URLS.get(self.provider)
        return url.rstrip("/") if url else None

    @property
    def effective_token_env(self) -> str:
        return self.token_env or DEFAULT_TOKEN_ENVS[self.provider]

    @property
    def token(self) -> str | None:
        return os.environ.get(self.effective_token_env) or None


class CommitsConfig(_Model):
    """Commit message validation settings."""

    max_count: int = Field(
        default=20,
        ge=1,
        description="Number of most recent commits checked by check-commits",
    )


class ChangelogPyConfig(_Model):
    """Root configuration for changelog-py."""

    tag_prefix: str = "v"
    changelog: ChangelogConfig = Field(default_factory=ChangelogConfig)
    forge: ForgeConfig = Field(default_factory=ForgeConfig)
    commits: CommitsConfig = Field(default_factory=CommitsConfig)

    def version_from_tag(self, tag: str) -> str:
        """Strip the configured tag prefix from a tag name."""
        if self.tag_prefix and tag.startswith(self.tag_prefix):
            return tag[len(self.tag_prefix) :]
        return tag
