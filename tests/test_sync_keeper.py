"""Integration tests for the SyncKeeper facade"""
from datetime import datetime, timezone
from pathlib import Path

import pytest

from git_sync_keeper.core import SyncKeeper
from git_sync_keeper.exceptions import NetworkOrAuthError, NothingToPushError
from git_sync_keeper.models.sync import SyncState

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def keeper_factory(settings_store):
    """Build keepers on the shared settings store and close them afterwards."""
    created = []

    def make(path, **kwargs):
        keeper = SyncKeeper(path, settings_store=settings_store, clock=lambda: NOW, **kwargs)
        created.append(keeper)
        return keeper

    yield make

    for keeper in created:
        keeper.close()


class TestFirstRunLifecycle:
    """Walk a fresh directory from init to a published, auto-synced branch."""

    def test_init_commit_publish(self, temp_dir, bare_remote, keeper_factory):
        """Test the path from an empty directory to a published branch."""
        notes = temp_dir / "notes"
        keeper = keeper_factory(notes)
        assert keeper.metadata.is_repository is False

        keeper.init()
        for name in ("a.md", "b.md", "c.md"):
            (notes / name).write_text(f"{name}\n")
        keeper.on_file_changed()

        summary = keeper.summary()
        assert summary.state == SyncState.NO_COMMITS
        assert summary.total_uncommitted_count == 3

        keeper.commit("First notes")
        assert keeper.summary().state == SyncState.UNPUBLISHED
        assert keeper.metadata.has_commits is True

        keeper.add_or_update_remote(bare_remote.git_dir)
        assert keeper.metadata.get_remote("origin") is not None

        result = keeper.push()

        assert result.published is True
        assert keeper.summary().state == SyncState.SYNCED
        assert keeper.config.enabled is True
        assert keeper.scheduler.enabled is True

    def test_push_without_commits(self, temp_dir, bare_remote, keeper_factory):
        """Test publishing before the first commit."""
        keeper = keeper_factory(temp_dir / "notes")
        keeper.init()
        keeper.add_or_update_remote(bare_remote.git_dir)

        with pytest.raises(NothingToPushError):
            keeper.push()

    def test_failed_push_shows_error_state(self, git_repo, keeper_factory):
        """Test a failed push shows the error state until refresh."""
        keeper = keeper_factory(git_repo.working_dir)

        with pytest.raises(NetworkOrAuthError):
            keeper.push()

        assert keeper.summary().state == SyncState.ERROR

        keeper.refresh()
        assert keeper.summary().state == SyncState.UNPUBLISHED


class TestPublishedRepository:
    """Operations on a repository that already tracks origin/main."""

    def test_unpushed_commits(self, published_repo, keeper_factory):
        """Test local commits show as unpushed."""
        keeper = keeper_factory(published_repo.working_dir)
        repo_path = Path(published_repo.working_dir)

        for name in ("one.md", "two.md"):
            (repo_path / name).write_text(f"{name}\n")
            keeper.commit(f"Add {name}")

        assert keeper.summary().state == SyncState.UNPUSHED

        keeper.push()
        assert keeper.summary().state == SyncState.SYNCED

    def test_file_change_notification(self, published_repo, keeper_factory):
        """Test the watcher hook refreshes status."""
        keeper = keeper_factory(published_repo.working_dir)
        assert keeper.summary().state == SyncState.SYNCED

        (Path(published_repo.working_dir) / "draft.md").write_text("draft\n")
        keeper.on_file_changed()

        assert keeper.summary().state == SyncState.CHANGES
        assert [entry.path for entry in keeper.visible_files()] == ["draft.md"]

    def test_generated_files_hidden_once_auto_sync_is_on(self, published_repo, keeper_factory):
        """Test generated files hide after enabling auto-sync."""
        keeper = keeper_factory(published_repo.working_dir)
        (Path(published_repo.working_dir) / "1700000000000-new-note.md").write_text("x\n")
        keeper.on_file_changed()

        assert keeper.summary().visible_uncommitted_count == 1

        keeper.set_auto_sync(enabled=True)

        summary = keeper.summary()
        assert summary.visible_uncommitted_count == 0
        assert summary.total_uncommitted_count == 1

    def test_sync_now(self, published_repo, bare_remote, keeper_factory):
        """Test a manual sync commits and pushes."""
        completed = []
        keeper = keeper_factory(published_repo.working_dir, on_sync_completed=completed.append)
        (Path(published_repo.working_dir) / "draft.md").write_text("draft\n")

        outcome = keeper.sync_now()

        assert outcome.committed and outcome.pushed
        assert bare_remote.head.commit.message.strip() == f"Auto-sync: {NOW.isoformat()}"
        assert keeper.scheduler_status().last_sync_time == NOW
        assert completed == [outcome]
        assert keeper.summary().state == SyncState.SYNCED

    def test_pull_requires_reload(self, published_repo, second_clone, keeper_factory, make_commit):
        """Test pulling remote commits asks for a reload."""
        make_commit(second_clone, "remote.md", "remote\n")
        second_clone.git.push("origin", "main")
        keeper = keeper_factory(published_repo.working_dir)

        result = keeper.pull()

        assert result.reload_required is True
        assert (Path(published_repo.working_dir) / "remote.md").exists()

    def test_log(self, published_repo, keeper_factory, make_commit):
        """Test reading the history through the facade."""
        make_commit(published_repo, "a.md", "a\n", "Add a")
        keeper = keeper_factory(published_repo.working_dir)

        result = keeper.log(max_count=1)

        assert result.total == 2
        assert result.latest.summary == "Add a"


class TestRemotesAndSettings:
    """Remote management and auto-sync settings through the facade."""

    def test_remote_lifecycle(self, git_repo, keeper_factory):
        """Test adding, updating and removing the remote."""
        keeper = keeper_factory(git_repo.working_dir)

        first = keeper.add_or_update_remote("https://example.com/a.git")
        second = keeper.add_or_update_remote("https://example.com/b.git")

        assert first.was_update is False
        assert second.was_update is True
        assert keeper.remotes[0].fetch_url == "https://example.com/b.git"

        keeper.remove_remote()
        assert keeper.remotes == []

    def test_connection_to_unconfigured_remote(self, git_repo, keeper_factory):
        """Test the connection check without a remote."""
        result = keeper_factory(git_repo.working_dir).test_connection()
        assert result.success is False

    def test_set_auto_sync_reaches_scheduler(self, git_repo, keeper_factory):
        """Test settings changes reach the scheduler."""
        keeper = keeper_factory(git_repo.working_dir)

        config = keeper.set_auto_sync(enabled=True, interval_seconds=30)

        assert config.interval_seconds == 30
        status = keeper.scheduler_status()
        assert status.enabled is True
        assert status.interval_seconds == 30
        assert status.is_armed is False

    def test_context_manager_arms_and_disarms(self, git_repo, keeper_factory, settings_store):
        """Test the context manager starts and stops the scheduler."""
        settings_store.update(enabled=True, interval_seconds=3600)

        with keeper_factory(git_repo.working_dir) as keeper:
            assert keeper.scheduler_status().is_armed is True

        assert keeper.scheduler_status().is_armed is False
