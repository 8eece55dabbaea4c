"""GitHub REST API client."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from changelog_py.exceptions import ForgeError
from changelog_py.forge.base import CommitMetadata, HttpForgeClient, metadata_from_git_commit

if TYPE_CHECKING:
    from pathlib import Path


class GitHubClient(HttpForgeClient):
    """GitHub (and GitHub Enterprise) client."""

    provider = "github"

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"

    def _commit_path(self, sha: str) -> str:
        return f"{self._repo_path}/commits/{sha}"

    def _commit_metadata(self, payload: dict[str, Any]) -> CommitMetadata:
        return metadata_from_git_commit(payload, self.base_url)

    def create_release(self, tag: str, name: str, body: str) -> str:
        release = self._json(
            "POST",
            f"{self._repo_path}/releases",
            json={"tag_name": tag, "name": name, "body": body},
        )
        return str(release["id"])

    def create_file(self, path: str, content: bytes, message: str, branch: str) -> None:
        data: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode(),
            "branch": branch,
        }
        existing = self._existing_file_sha(path, branch)
        if existing:
            data["sha"] = existing
        self._request("PUT", f"{self._repo_path}/contents/{path}", json=data)

    def _existing_file_sha(self, path: str, branch: str) -> str | None:
        try:
            payload = self._json("GET", f"{self._repo_path}/contents/{path}", params={"ref": branch})
        except ForgeError as e:
            if e.status_code == 404:
                return None
            raise
        return payload.get("sha")

    def upload(self, release_id: str, path: Path) -> None:
        release = self._json("GET", f"{self._repo_path}/releases/{release_id}")
        # upload_url is a URI template: ".../assets{?name,label}"
        upload_url = release["upload_url"].split("{", 1)[0]
        self._request(
            "POST",
            upload_url,
            params={"name": path.name},
            content=path.read_bytes(),
            headers={"Content-Type": "application/octet-stream"},
        )
