"""GitLab REST API (v4) client."""

from __future__ import annotations

import base64
import hashlib
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from changelog_py.exceptions import ForgeError
from changelog_py.forge.base import CommitMetadata, HttpForgeClient, parse_timestamp

if TYPE_CHECKING:
    from pathlib import Path


def gravatar_url(email: str) -> str:
    """GitLab's default avatar for an email address, computed locally."""
    digest = hashlib.md5(email.strip().lower().encode(), usedforsecurity=False).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?s=80&d=identicon"


class GitLabClient(HttpForgeClient):
    """GitLab.com or self-hosted GitLab client."""

    provider = "gitlab"

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        return {"PRIVATE-TOKEN": token} if token else {}

    @property
    def _project_path(self) -> str:
        return f"/projects/{quote(f'{self.owner}/{self.name}', safe='')}"

    def _commit_path(self, sha: str) -> str:
        return f"{self._project_path}/repository/commits/{sha}"

    def _commit_metadata(self, payload: dict[str, Any]) -> CommitMetadata:
        author_email = payload.get("author_email", "")
        return CommitMetadata(
            id=payload["id"],
            short_id=payload.get("short_id") or payload["id"][:8],
            committed_date=parse_timestamp(payload["committed_date"]),
            author_email=author_email,
            committer_email=payload.get("committer_email", ""),
            avatar_url=gravatar_url(author_email),
            base_url=self.base_url,
        )

    def create_release(self, tag: str, name: str, body: str) -> str:
        release = self._json(
            "POST",
            f"{self._project_path}/releases",
            json={"tag_name": tag, "name": name, "description": body},
        )
        return release["tag_name"]

    def create_file(self, path: str, content: bytes, message: str, branch: str) -> None:
        url = f"{self._project_path}/repository/files/{quote(path, safe='')}"
        data = {
            "branch": branch,
            "encoding": "base64",
            "content": base64.b64encode(content).decode(),
            "commit_message": message,
        }
        try:
            self._request("POST", url, json=data)
        except ForgeError as e:
            # 400 means the file already exists
            if e.status_code != 400:
                raise
            self._request("PUT", url, json=data)

    def upload(self, release_id: str, path: Path) -> None:
        with path.open("rb") as f:
            uploaded = self._json(
                "POST", f"{self._project_path}/uploads", files={"file": (path.name, f)}
            )
        link = uploaded.get("full_path") or f"/{self.owner}/{self.name}{uploaded['url']}"
        self._request(
            "POST",
            f"{self._project_path}/releases/{quote(release_id, safe='')}/assets/links",
            json={"name": path.name, "url": f"{self.base_url}{link}"},
        )
