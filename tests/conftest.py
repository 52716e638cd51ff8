"""Pytest fixtures for git-sync-keeper tests"""
import tempfile
from pathlib import Path
from unittest.mock import Mock

import git
import pytest

from git_sync_keeper.models.repository import LogResult, RawStatus, Remote
from git_sync_keeper.services.git import GitOperations
from git_sync_keeper.services.settings_service import ConfigChannel, MemorySettingsStore, SettingsStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def git_env(monkeypatch, tmp_path):
    """Give git a commit identity and keep settings out of the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    return home


def _configure_user(repo):
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")
        writer.set_value("commit", "gpgsign", "false")


def commit_file(repo, name, content, message=None):
    """Write a file in the repository's working tree and commit it."""
    path = Path(repo.working_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.git.add("--", name)
    repo.git.commit("-m", message or f"Update {name}")
    return path


@pytest.fixture
def make_commit():
    """Commit helper: make_commit(repo, name, content, message=None)."""
    return commit_file


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository with one commit on main and no remote."""
    repo_path = temp_dir / "test_repo"
    repo_path.mkdir()

    repo = git.Repo.init(repo_path)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    _configure_user(repo)

    commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")

    yield repo

    repo.close()


@pytest.fixture
def bare_remote(temp_dir):
    """Create an empty bare repository to act as 'origin'."""
    remote_path = temp_dir / "remote.git"
    repo = git.Repo.init(remote_path, bare=True)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")

    yield repo

    repo.close()


@pytest.fixture
def published_repo(git_repo, bare_remote):
    """git_repo with main pushed to bare_remote and tracking origin/main."""
    git_repo.create_remote("origin", bare_remote.git_dir)
    git_repo.git.push("-u", "origin", "main")
    return git_repo


@pytest.fixture
def second_clone(published_repo, bare_remote, temp_dir):
    """Another working copy of the published repository."""
    repo = git.Repo.clone_from(bare_remote.git_dir, temp_dir / "second_clone")
    _configure_user(repo)

    yield repo

    repo.close()


@pytest.fixture
def channel():
    return ConfigChannel()


@pytest.fixture
def settings_store(temp_dir, channel):
    """Settings store for test_repo, kept under the temporary directory."""
    return SettingsStore(temp_dir / "test_repo", settings_dir=temp_dir / "settings", channel=channel)


@pytest.fixture
def memory_settings(channel):
    return MemorySettingsStore(channel=channel)


@pytest.fixture
def mock_git_ops():
    """GitOperations double describing a published, clean repository."""
    git_ops = Mock(spec=GitOperations)
    git_ops.repo_path = "/fake/repo/path"
    git_ops.is_installed.return_value = True
    git_ops.is_repository.return_value = True
    git_ops.status.return_value = RawStatus(current="main", tracking="origin/main")
    git_ops.log.return_value = LogResult(total=1)
    git_ops.list_remotes.return_value = [
        Remote(name="origin", fetch_url="git@example.com:notes.git", push_url="git@example.com:notes.git")
    ]
    git_ops.current_branch.return_value = "main"
    git_ops.is_merging.return_value = False
    return git_ops
