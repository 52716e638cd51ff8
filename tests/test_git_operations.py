"""Tests for GitOperations against real repositories"""
from pathlib import Path
from unittest.mock import patch

import git
import pytest

from git_sync_keeper.exceptions import (
    GitOperationError,
    NetworkOrAuthError,
    NotARepositoryError,
    RemoteBranchMissingError,
    ToolMissingError,
)
from git_sync_keeper.services.git import GitOperations


class TestEnvironment:
    """Test installation and repository detection."""

    def test_is_installed(self, temp_dir):
        """Test git is found on PATH."""
        assert GitOperations(temp_dir).is_installed() is True

    def test_is_installed_without_git(self, temp_dir):
        """Test detection when git is missing."""
        with patch("git.cmd.Git.version", side_effect=git.exc.GitCommandNotFound("git", "not found"), create=True):
            assert GitOperations(temp_dir).is_installed() is False

    def test_is_repository(self, git_repo, temp_dir):
        """Test repository detection."""
        assert GitOperations(git_repo.working_dir).is_repository() is True
        assert GitOperations(temp_dir).is_repository() is False

    def test_status_on_plain_directory(self, temp_dir):
        """Test status outside a repository."""
        with pytest.raises(NotARepositoryError):
            GitOperations(temp_dir).status()

    def test_missing_git_executable(self, git_repo):
        """Test a missing executable raises ToolMissingError."""
        ops = GitOperations(git_repo.working_dir)
        with patch.object(ops, "_get_repo", side_effect=git.exc.GitCommandNotFound("git", "not found")):
            with pytest.raises(ToolMissingError):
                ops.status()


class TestInit:
    """Test repository initialization."""

    def test_init_creates_main_branch(self, temp_dir):
        """Test init creates an unborn main branch."""
        repo_path = temp_dir / "notes"
        ops = GitOperations(repo_path)
        ops.init()

        assert (repo_path / ".git").exists()
        status = ops.status()
        assert status.current == "main"
        assert status.tracking is None

    def test_init_existing_repository_keeps_branch(self, git_repo):
        """Test init leaves an existing repository alone."""
        ops = GitOperations(git_repo.working_dir)
        ops.init()
        assert ops.current_branch() == "main"
        assert ops.log(1).total == 1


class TestQueries:
    """Test read-only queries."""

    def test_status_reports_changes(self, git_repo):
        """Test status reports untracked and modified files."""
        repo_path = Path(git_repo.working_dir)
        (repo_path / "new.md").write_text("new\n")
        (repo_path / "README.md").write_text("changed\n")

        status = GitOperations(repo_path).status()
        by_path = {entry.path: entry for entry in status.files}

        assert by_path["new.md"].is_untracked
        assert by_path["README.md"].is_unstaged
        assert status.current == "main"

    def test_status_lists_files_inside_untracked_folders(self, git_repo):
        """Test untracked folders are listed file by file."""
        folder = Path(git_repo.working_dir) / "folder-1762232030505"
        folder.mkdir()
        (folder / "note.md").write_text("x\n")

        paths = [entry.path for entry in GitOperations(git_repo.working_dir).status().files]
        assert paths == ["folder-1762232030505/note.md"]

    def test_log(self, git_repo, make_commit):
        """Test reading the commit history."""
        make_commit(git_repo, "a.md", "a\n", "Add a")
        make_commit(git_repo, "b.md", "b\n", "Add b")

        result = GitOperations(git_repo.working_dir).log(max_count=2)

        assert result.total == 3
        assert [entry.summary for entry in result.entries] == ["Add b", "Add a"]
        assert result.latest.author_name == "Test User"
        assert len(result.latest.short_sha) == 7

    def test_log_without_commits(self, temp_dir):
        """Test history of an empty repository."""
        ops = GitOperations(temp_dir / "empty")
        ops.init()

        result = ops.log()
        assert result.total == 0
        assert result.entries == []

    def test_list_remotes(self, published_repo, bare_remote):
        """Test listing configured remotes."""
        remotes = GitOperations(published_repo.working_dir).list_remotes()

        assert [remote.name for remote in remotes] == ["origin"]
        assert remotes[0].fetch_url == bare_remote.git_dir
        assert remotes[0].push_url == bare_remote.git_dir

    def test_list_remotes_empty(self, git_repo):
        """Test listing remotes when none exist."""
        assert GitOperations(git_repo.working_dir).list_remotes() == []

    def test_has_remote_branch(self, published_repo):
        """Test detecting existing remote branch."""
        ops = GitOperations(published_repo.working_dir)
        assert ops.has_remote_branch("origin", "main") is True
        assert ops.has_remote_branch("origin", "nope") is False


class TestAddAndCommit:
    """Test staging and committing."""

    def test_add_all_and_commit(self, git_repo):
        """Test staging everything, including deletions."""
        repo_path = Path(git_repo.working_dir)
        (repo_path / "note.md").write_text("hello\n")
        (repo_path / "README.md").unlink()

        ops = GitOperations(repo_path)
        ops.add(".")
        ops.commit("Update notes")

        assert ops.status().files == ()
        assert ops.log(1).latest.summary == "Update notes"

    def test_commit_only_given_paths(self, git_repo):
        """Test committing a subset of staged paths."""
        repo_path = Path(git_repo.working_dir)
        (repo_path / "a.md").write_text("a\n")
        (repo_path / "b.md").write_text("b\n")

        ops = GitOperations(repo_path)
        ops.add(["a.md", "b.md"])
        ops.commit("Only a", paths=["a.md"])

        remaining = [entry.path for entry in ops.status().files]
        assert remaining == ["b.md"]

    def test_commit_requires_message(self, git_repo):
        """Test commit rejects a blank message."""
        with pytest.raises(ValueError):
            GitOperations(git_repo.working_dir).commit("   ")

    def test_commit_with_nothing_staged(self, git_repo):
        """Test commit with nothing staged."""
        with pytest.raises(GitOperationError):
            GitOperations(git_repo.working_dir).commit("Nothing here")

    def test_add_recovers_from_stale_index_lock(self, git_repo):
        """Test add removes a stale index.lock and retries."""
        repo_path = Path(git_repo.working_dir)
        (repo_path / ".git" / "index.lock").write_text("")
        (repo_path / "note.md").write_text("hello\n")

        ops = GitOperations(repo_path)
        ops.add(".")

        assert not (repo_path / ".git" / "index.lock").exists()
        assert ops.status().files[0].is_staged


class TestPushAndPull:
    """Test remote synchronization against a local bare remote."""

    def test_first_push_sets_upstream(self, git_repo, bare_remote):
        """Test the first push creates the tracking branch."""
        git_repo.create_remote("origin", bare_remote.git_dir)
        ops = GitOperations(git_repo.working_dir)

        ops.push("origin")

        status = ops.status()
        assert status.tracking == "origin/main"
        assert bare_remote.head.commit.hexsha == git_repo.head.commit.hexsha

    def test_push_to_tracking_branch(self, published_repo, bare_remote, make_commit):
        """Test pushing new commits to the tracking branch."""
        make_commit(published_repo, "note.md", "hello\n")
        ops = GitOperations(published_repo.working_dir)
        assert ops.status().ahead == 1

        ops.push()

        assert ops.status().ahead == 0
        assert bare_remote.head.commit.hexsha == published_repo.head.commit.hexsha

    def test_push_without_remote(self, git_repo):
        """Test pushing with no remote configured."""
        with pytest.raises(NetworkOrAuthError):
            GitOperations(git_repo.working_dir).push("origin")

    def test_pull_fast_forwards(self, published_repo, second_clone, make_commit):
        """Test pulling new remote commits."""
        make_commit(second_clone, "remote-note.md", "from elsewhere\n")
        second_clone.git.push("origin", "main")

        ops = GitOperations(published_repo.working_dir)
        ops.pull()

        assert (Path(published_repo.working_dir) / "remote-note.md").exists()
        assert ops.status().behind == 0

    def test_pull_when_up_to_date(self, published_repo):
        """Test pull leaves HEAD alone when up to date."""
        ops = GitOperations(published_repo.working_dir)
        head = published_repo.head.commit.hexsha

        ops.pull()

        assert published_repo.head.commit.hexsha == head

    def test_pull_without_upstream_merges_remote_branch(self, git_repo, bare_remote, second_clone, make_commit):
        """A local branch without tracking config still pulls via fetch and merge."""
        make_commit(second_clone, "remote-note.md", "from elsewhere\n")
        second_clone.git.push("origin", "main")
        git_repo.git.branch("--unset-upstream")

        ops = GitOperations(git_repo.working_dir)
        assert ops.status().tracking is None
        ops.pull("origin")

        assert (Path(git_repo.working_dir) / "remote-note.md").exists()

    def test_pull_missing_remote_branch(self, git_repo, bare_remote):
        """Test pulling a branch the remote does not have."""
        git_repo.create_remote("origin", bare_remote.git_dir)

        with pytest.raises(RemoteBranchMissingError) as exc_info:
            GitOperations(git_repo.working_dir).pull("origin")
        assert "doesn't exist on remote" in exc_info.value.message

    def test_conflicting_pull_can_be_aborted(self, published_repo, second_clone, make_commit):
        """Test a conflicting pull leaves a merge that abort_merge rolls back."""
        make_commit(second_clone, "README.md", "remote edit\n")
        second_clone.git.push("origin", "main")
        make_commit(published_repo, "README.md", "local edit\n")
        ops = GitOperations(published_repo.working_dir)
        ops.fetch("origin")

        with pytest.raises(GitOperationError):
            ops.pull("origin")
        assert ops.is_merging() is True
        assert any(entry.is_unmerged for entry in ops.status().files)

        ops.abort_merge()

        assert ops.is_merging() is False
        assert ops.status().files == ()
        assert (Path(published_repo.working_dir) / "README.md").read_text() == "local edit\n"

    def test_fetch_updates_behind_counter(self, published_repo, second_clone, make_commit):
        """Test fetch updates the behind counter."""
        make_commit(second_clone, "remote-note.md", "from elsewhere\n")
        second_clone.git.push("origin", "main")

        ops = GitOperations(published_repo.working_dir)
        assert ops.status().behind == 0
        ops.fetch("origin")
        assert ops.status().behind == 1


class TestRemotes:
    """Test remote management and connection checks."""

    def test_add_set_url_and_remove(self, git_repo):
        """Test the remote add, set-url and remove commands."""
        ops = GitOperations(git_repo.working_dir)

        ops.add_remote("origin", "https://example.com/a.git")
        ops.set_remote_url("origin", "https://example.com/b.git")
        assert ops.list_remotes()[0].fetch_url == "https://example.com/b.git"

        ops.remove_remote("origin")
        assert ops.list_remotes() == []

    def test_add_duplicate_remote(self, published_repo):
        """Test adding a remote name twice."""
        with pytest.raises(GitOperationError) as exc_info:
            GitOperations(published_repo.working_dir).add_remote("origin", "https://example.com/x.git")
        assert "already configured" in exc_info.value.message

    def test_connection_to_reachable_remote(self, published_repo):
        """Test checking a reachable remote."""
        result = GitOperations(published_repo.working_dir).test_connection("origin")
        assert result.success is True

    def test_connection_to_empty_remote(self, git_repo, bare_remote):
        """Test checking a remote with no branches."""
        git_repo.create_remote("origin", bare_remote.git_dir)

        result = GitOperations(git_repo.working_dir).test_connection("origin")

        assert result.success is True
        assert "no branches yet" in result.message

    def test_connection_to_missing_remote_never_raises(self, git_repo, temp_dir):
        """Test checking an unreachable remote returns a failure."""
        git_repo.create_remote("origin", str(temp_dir / "does-not-exist.git"))

        result = GitOperations(git_repo.working_dir).test_connection("origin")

        assert result.success is False
        assert result.message
