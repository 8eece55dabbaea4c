"""Forge client interface and shared HTTP plumbing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol, Self

import httpx

from changelog_py.exceptions import CommitMetadataError, ConfigValidationError, ForgeError

if TYPE_CHECKING:
    from pathlib import Path

    from changelog_py.config.models import ForgeConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommitMetadata:
    """Authorship and link data for one commit, as reported by the forge."""

    id: str
    short_id: str
    committed_date: datetime
    author_email: str
    committer_email: str
    avatar_url: str
    base_url: str


class ForgeClient(Protocol):
    """Operations every forge variant provides."""

    def create_release(self, tag: str, name: str, body: str) -> str: ...

    def create_file(self, path: str, content: bytes, message: str, branch: str) -> None: ...

    def upload(self, release_id: str, path: Path) -> None: ...

    def get_commit_info(self, sha: str) -> CommitMetadata: ...


class HttpForgeClient:
    """Base for REST-backed forge clients.

    Holds one httpx.Client with the configured timeout and connection
    retries. Subclasses supply auth headers and the endpoint layouts.
    """

    provider = "forge"

    def __init__(
        self,
        config: ForgeConfig,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not config.owner or not config.name:
            raise ConfigValidationError(
                f"forge.owner and forge.name are required for {config.provider}"
            )
        api_url = config.effective_api_url
        base_url = config.effective_base_url
        if not api_url or not base_url:
            raise ConfigValidationError(
                f"forge.api_url and forge.base_url are required for {config.provider}"
            )

        self.owner = config.owner
        self.name = config.name
        self.base_url = base_url
        self._client = httpx.Client(
            base_url=api_url,
            headers=self._auth_headers(config.token),
            timeout=config.timeout,
            transport=transport or httpx.HTTPTransport(retries=config.retries),
        )

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        return {}

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s %s", self.provider, method, url)
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ForgeError(f"{self.provider} request {method} {url} failed: {e}") from e
        if response.is_error:
            raise ForgeError(
                f"{self.provider} API error {response.status_code} for {method} {url}: "
                f"{_error_message(response)}",
                status_code=response.status_code,
            )
        return response

    def _json(self, method: str, url: str, **kwargs: Any) -> Any:
        return self._request(method, url, **kwargs).json()

    def _commit_path(self, sha: str) -> str:
        raise NotImplementedError

    def _commit_metadata(self, payload: dict[str, Any]) -> CommitMetadata:
        raise NotImplementedError

    def get_commit_info(self, sha: str) -> CommitMetadata:
        """Fetch authorship and link data for ``sha``.

        Raises:
            CommitMetadataError: If the request fails or the payload is unusable
        """
        try:
            payload = self._json("GET", self._commit_path(sha))
        except ForgeError as e:
            raise CommitMetadataError(
                f"fetching commit {sha} failed: {e}", status_code=e.status_code
            ) from e
        try:
            return self._commit_metadata(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise CommitMetadataError(
                f"unexpected {self.provider} response for commit {sha}: {e!r}"
            ) from e


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or payload)
    return str(payload)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp as returned by forge APIs."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def metadata_from_git_commit(payload: dict[str, Any], base_url: str) -> CommitMetadata:
    """Build CommitMetadata from a GitHub/Gitea style commit payload.

    Both APIs nest the git data under ``commit`` and the linked account
    (if the email maps to one) under ``author``.
    """
    git_commit = payload["commit"]
    account = payload.get("author") or {}
    sha = payload["sha"]
    return CommitMetadata(
        id=sha,
        short_id=sha[:7],
        committed_date=parse_timestamp(git_commit["committer"]["date"]),
        author_email=git_commit["author"].get("email", ""),
        committer_email=git_commit["committer"].get("email", ""),
        avatar_url=account.get("avatar_url", ""),
        base_url=base_url,
    )
