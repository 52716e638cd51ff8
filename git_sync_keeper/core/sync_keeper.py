"""Core functionality for git-sync-keeper"""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from git_sync_keeper.config import AutoSyncConfig
from git_sync_keeper.constants import DEFAULT_LOG_COUNT, DEFAULT_REMOTE
from git_sync_keeper.logging_config import get_logger
from git_sync_keeper.models.repository import FileStatusEntry, LogResult, RepositoryMetadata, Remote
from git_sync_keeper.models.sync import (
    ConnectionTestResult,
    PullResult,
    PushResult,
    RemoteUpdateResult,
    SchedulerStatus,
    SyncOutcome,
    SyncSummary,
)
from git_sync_keeper.services.git import GitOperations
from git_sync_keeper.services.remote_service import RemoteService
from git_sync_keeper.services.scheduler_service import AutoSyncScheduler
from git_sync_keeper.services.settings_service import ConfigChannel, SettingsStore
from git_sync_keeper.services.status_service import StatusService
from git_sync_keeper.services.workflow_service import WorkflowService

logger = get_logger(__name__)


class SyncKeeper:
    """Keeps one directory synchronized with its remote.

    Wires the git layer, status aggregation, remote management, the
    publish/push/pull workflow and the auto-sync scheduler, and exposes the
    operations a UI needs. Every operation returns a result or raises a
    GitSyncKeeperError; test_connection() alone reports failure in its result.
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        settings_store: Optional[SettingsStore] = None,
        channel: Optional[ConfigChannel] = None,
        git_ops=None,
        clock: Optional[Callable[[], datetime]] = None,
        on_sync_completed: Optional[Callable[[SyncOutcome], None]] = None,
    ):
        """Initialize SyncKeeper.

        Args:
            repo_path: The synchronized directory
            settings_store: Where auto-sync settings live (defaults to the per-user JSON store)
            channel: Config channel shared with other components; taken from the store when omitted
            git_ops: Command-execution collaborator (defaults to GitOperations)
            clock: Returns the current time, for commit messages and last-sync bookkeeping
            on_sync_completed: Called after every successful scheduled or manual sync
        """
        self.repo_path = str(repo_path)
        if settings_store is None:
            settings_store = SettingsStore(self.repo_path, channel=channel)
        self.settings_store = settings_store
        self.channel = settings_store.channel

        self.git_ops = git_ops or GitOperations(self.repo_path)
        self.status_service = StatusService(self.git_ops)
        self.remote_service = RemoteService(self.git_ops)
        self.workflow = WorkflowService(
            self.git_ops,
            self.status_service,
            self.settings_store,
            remote_name=DEFAULT_REMOTE,
            clock=clock,
        )
        self.scheduler = AutoSyncScheduler(
            self.workflow,
            self.status_service,
            self.settings_store,
            clock=clock,
            on_sync_completed=on_sync_completed,
        )

        self.refresh()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the auto-sync scheduler."""
        self.scheduler.start()

    def close(self) -> None:
        self.scheduler.stop()

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def config(self) -> AutoSyncConfig:
        return self.settings_store.load_config()

    @property
    def metadata(self) -> RepositoryMetadata:
        return self.status_service.metadata

    @property
    def remotes(self) -> List[Remote]:
        return list(self.status_service.metadata.remotes)

    def refresh(self) -> RepositoryMetadata:
        """Re-query git for the status inputs."""
        return self.status_service.refresh_metadata()

    def on_file_changed(self) -> None:
        """Hook for a filesystem watcher; the changed path does not matter."""
        logger.debug("File change notification, refreshing status")
        self.refresh()

    def summary(self) -> SyncSummary:
        """Current sync state with visible and total uncommitted counts."""
        return self.status_service.summary(self.scheduler.is_syncing, self.config)

    def visible_files(self) -> List[FileStatusEntry]:
        return self.status_service.visible_files(self.config)

    def scheduler_status(self) -> SchedulerStatus:
        return self.scheduler.status()

    def log(self, max_count: int = DEFAULT_LOG_COUNT) -> LogResult:
        return self.git_ops.log(max_count)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def init(self) -> None:
        self.workflow.init()

    def commit(self, message: str) -> None:
        self.workflow.commit(message)

    def push(self) -> PushResult:
        return self.workflow.push()

    def pull(self) -> PullResult:
        """Pull remote commits.

        When ``reload_required`` is set the caller must re-read everything it
        loaded from disk. Unsaved in-memory edits do not survive the reload.
        """
        return self.workflow.pull()

    def sync_now(self) -> SyncOutcome:
        return self.scheduler.sync_now()

    def add_or_update_remote(self, url: str, name: str = DEFAULT_REMOTE) -> RemoteUpdateResult:
        result = self.remote_service.add_or_update_remote(name, url)
        self.refresh()
        return result

    def remove_remote(self, name: str = DEFAULT_REMOTE) -> None:
        self.remote_service.remove_remote(name)
        self.refresh()

    def set_remote_url(self, url: str, name: str = DEFAULT_REMOTE) -> None:
        self.remote_service.set_remote_url(name, url)
        self.refresh()

    def test_connection(self, name: str = DEFAULT_REMOTE) -> ConnectionTestResult:
        return self.remote_service.test_connection(name)

    def set_auto_sync(
        self,
        enabled: Optional[bool] = None,
        interval_seconds: Optional[int] = None,
        hide_generated_files: Optional[bool] = None,
    ) -> AutoSyncConfig:
        """Persist auto-sync settings; subscribed schedulers pick them up."""
        return self.settings_store.update(
            enabled=enabled,
            interval_seconds=interval_seconds,
            hide_generated_files=hide_generated_files,
        )
