from pathlib import Path
from types import SimpleNamespace
from typing import Generator
from unittest.mock import MagicMock

import git
import pytest

from ups.config import Config


def make_response(content):
    """Build an object shaped like a chat-completion response."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture(autouse=True)
def isolate_git(monkeypatch, tmp_path):
    """Keep git from walking above the test directory or reading user config."""
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("HOME", str(tmp_path))


def _init_repo(path: Path) -> git.Repo:
    repo = git.Repo.init(path)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")
    return repo


@pytest.fixture
def empty_repo(tmp_path, monkeypatch) -> git.Repo:
    """A repository with no commits, used as the working directory."""
    repo_dir = tmp_path / "fresh_repo"
    repo_dir.mkdir()
    repo = _init_repo(repo_dir)
    monkeypatch.chdir(repo_dir)
    return repo


@pytest.fixture
def repo_with_commit(tmp_path, monkeypatch) -> Generator[git.Repo, None, None]:
    """A repository with one commit and a bare ``origin`` remote."""
    remote_dir = tmp_path / "remote.git"
    git.Repo.init(remote_dir, bare=True)

    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    repo = _init_repo(repo_dir)

    (repo_dir / "math_utils.py").write_text("def add(a, b):\n    return a + b\n")
    repo.index.add(["math_utils.py"])
    repo.index.commit("Initial commit")
    repo.create_remote("origin", str(remote_dir))

    monkeypatch.chdir(repo_dir)
    yield repo
    repo.close()


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(output_dir=tmp_path / "artifacts")


@pytest.fixture
def response_factory():
    return make_response


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.chat.completions.create.return_value = make_response("feat: add line")
    return client
