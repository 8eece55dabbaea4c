"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from datetime import datetime
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from changelog_py.config.models import ChangelogPyConfig, ForgeConfig
from changelog_py.exceptions import CommitMetadataError
from changelog_py.forge.base import CommitMetadata
from changelog_py.vcs.git import Commit, GitRepository

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0)


class FakeForgeClient:
    """In-memory forge client returning canned metadata per sha."""

    def __init__(self, fail_on: set[str] | None = None) -> None:
        self.fail_on = fail_on or set()
        self.requested: list[str] = []

    def get_commit_info(self, sha: str) -> CommitMetadata:
        self.requested.append(sha)
        if sha in self.fail_on:
            raise CommitMetadataError(f"fetching commit {sha} failed: 404")
        return make_metadata(sha)

    def create_release(self, tag: str, name: str, body: str) -> str:
        return "1"

    def create_file(self, path: str, content: bytes, message: str, branch: str) -> None:
        return None

    def upload(self, release_id: str, path: Path) -> None:
        return None


def make_metadata(sha: str) -> CommitMetadata:
    full = (sha * 40)[:40]
    return CommitMetadata(
        id=full,
        short_id=sha[:7],
        committed_date=datetime(2024, 2, 29, 8, 30, 15),
        author_email=f"{sha}@example.com",
        committer_email=f"committer-{sha}@example.com",
        avatar_url=f"https://avatars.example.com/{sha}.png",
        base_url="https://github.com",
    )


@pytest.fixture
def fake_client() -> FakeForgeClient:
    return FakeForgeClient()


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def config() -> ChangelogPyConfig:
    """Configuration pointing at a GitHub repository acme/widgets."""
    return ChangelogPyConfig(forge=ForgeConfig(provider="github", owner="acme", name="widgets"))


@pytest.fixture
def sample_commits() -> list[Commit]:
    """Log entries in git log order (most recent first)."""
    return [
        Commit("abc1234", "feat: add login"),
        Commit("def4567", "fix: null pointer"),
        Commit("aaa1111", "update readme"),
        Commit("bbb2222", "chore(deps): bump httpx"),
        Commit("ccc3333", "docs: explain config"),
    ]


@pytest.fixture
def mock_repo(tmp_path: Path, sample_commits: list[Commit]) -> MagicMock:
    """A GitRepository whose log returns ``sample_commits``."""
    repo = MagicMock(spec=GitRepository)
    repo.path = tmp_path
    repo.get_log.return_value = sample_commits
    repo.get_current_tag.return_value = "v1.1.0"
    return repo


def _git(path: Path, *args: str) -> str:
    return subprocess.run(
        ["git", *args], cwd=path, check=True, capture_output=True, text=True
    ).stdout


@pytest.fixture
def run_git() -> Callable[..., str]:
    """Run a git command in a directory: run_git(path, "tag", "v1.0.0")."""
    return _git


@pytest.fixture
def git_commit() -> Callable[[Path, str], None]:
    def commit(path: Path, message: str) -> None:
        with (path / "history.txt").open("a") as f:
            f.write(message + "\n")
        _git(path, "add", "history.txt")
        _git(path, "commit", "-q", "-m", message)

    return commit


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """An empty git repository with a committer identity configured."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.name", "Test User")
    _git(tmp_path, "config", "user.email", "test@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _git(tmp_path, "config", "tag.gpgsign", "false")
    return tmp_path


@pytest.fixture
def temp_git_repo_with_pyproject(tmp_path: Path) -> Path:
    """A project directory holding a pyproject.toml with a changelog-py section."""
    (tmp_path / "pyproject.toml").write_text(
        """\
[project]
name = "test-project"
version = "1.0.0"

[tool.changelog-py]
tag_prefix = "v"

[tool.changelog-py.changelog]
sort = "asc"

[tool.changelog-py.changelog.filters]
exclude = ["^docs:"]

[tool.changelog-py.forge]
provider = "gitlab"
owner = "acme"
name = "widgets"
"""
    )
    return tmp_path
