"""Gitea REST API (v1) client."""

from __future__ import annotations

import base64
from typing import TYPE_CHECKING, Any

from changelog_py.exceptions import ForgeError
from changelog_py.forge.base import CommitMetadata, HttpForgeClient, metadata_from_git_commit

if TYPE_CHECKING:
    from pathlib import Path


class GiteaClient(HttpForgeClient):
    provider = "gitea"

    def _auth_headers(self, token: str | None) -> dict[str, str]:
        return {"Authorization": f"token {token}"} if token else {}

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"

    def _commit_path(self, sha: str) -> str:
        return f"{self._repo_path}/git/commits/{sha}"

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
        url = f"{self._repo_path}/contents/{path}"
        data: dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content).decode(),
            "branch": branch,
        }
        try:
            existing = self._json("GET", url, params={"ref": branch})
        except ForgeError as e:
            if e.status_code != 404:
                raise
            self._request("POST", url, json=data)
        else:
            data["sha"] = existing["sha"]
            self._request("PUT", url, json=data)

    def upload(self, release_id: str, path: Path) -> None:
        with path.open("rb") as f:
            self._request(
                "POST",
                f"{self._repo_path}/releases/{release_id}/assets",
                params={"name": path.name},
                files={"attachment": (path.name, f)},
            )
