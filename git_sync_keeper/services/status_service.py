"""Service for reducing repository state to a canonical sync state"""

from threading import Lock
from typing import Iterable, List, Optional, Tuple

from git_sync_keeper.config import AutoSyncConfig
from git_sync_keeper.exceptions import GitSyncKeeperError, ToolMissingError
from git_sync_keeper.logging_config import get_logger
from git_sync_keeper.models.repository import FileStatusEntry, RawStatus, RepositoryMetadata
from git_sync_keeper.models.sync import SyncState, SyncSummary
from git_sync_keeper.services.file_classifier import filter_generated

logger = get_logger(__name__)


def changed_files(files: Iterable[FileStatusEntry]) -> List[FileStatusEntry]:
    """Entries that are staged, unstaged or untracked, once per path."""
    seen = set()
    result = []
    for entry in files:
        if entry.is_changed and entry.path not in seen:
            seen.add(entry.path)
            result.append(entry)
    return result


def count_uncommitted(files: Iterable[FileStatusEntry]) -> int:
    return len(changed_files(files))


def filter_visible_files(files: Iterable[FileStatusEntry], config: AutoSyncConfig) -> List[FileStatusEntry]:
    """Changed files the user should review.

    Generated files are hidden only while auto-sync is on and hiding is enabled.
    """
    files = changed_files(files)
    if config.enabled and config.hide_generated_files:
        return filter_generated(files)
    return files


def compute_sync_state(
    meta: RepositoryMetadata,
    raw_status: RawStatus,
    scheduler_is_syncing: bool,
    config: AutoSyncConfig,
    last_error: Optional[str] = None,
) -> SyncSummary:
    """Derive the sync state and uncommitted counts.

    Rules are checked in priority order; the first match wins. The state
    uses the total count, so generated-file churn still reads as Changes
    even when it is hidden from the visible count.
    """
    total = count_uncommitted(raw_status.files)
    visible = len(filter_visible_files(raw_status.files, config))

    if last_error:
        state = SyncState.ERROR
    elif not meta.has_commits:
        state = SyncState.NO_COMMITS
    elif not meta.has_remote_branch:
        state = SyncState.UNPUBLISHED
    elif scheduler_is_syncing:
        state = SyncState.SYNCING
    elif total > 0:
        state = SyncState.CHANGES
    elif raw_status.ahead > 0:
        state = SyncState.UNPUSHED
    else:
        state = SyncState.SYNCED

    return SyncSummary(state=state, visible_uncommitted_count=visible, total_uncommitted_count=total)


class StatusService:
    """Keeps the latest repository snapshot used to compute the sync state.

    Refreshes are read-only and are not serialized with mutating operations;
    a refresh racing a push may briefly observe stale counters.
    """

    def __init__(self, git_ops):
        """Initialize the service.

        Args:
            git_ops: GitOperations (or compatible) used for read-only queries
        """
        self.git_ops = git_ops
        self._lock = Lock()  # Guards the snapshot, not git itself
        self._metadata = RepositoryMetadata()
        self._raw_status = RawStatus()
        self._last_error: Optional[str] = None

    @property
    def metadata(self) -> RepositoryMetadata:
        with self._lock:
            return self._metadata

    @property
    def raw_status(self) -> RawStatus:
        with self._lock:
            return self._raw_status

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    def snapshot(self) -> Tuple[RepositoryMetadata, RawStatus]:
        with self._lock:
            return self._metadata, self._raw_status

    def record_error(self, message: Optional[str]) -> None:
        """Remember (or clear) the last command-execution error."""
        with self._lock:
            self._last_error = message

    def refresh_metadata(self) -> RepositoryMetadata:
        """Re-query git and replace the snapshot.

        A failing query keeps what was learned so far and records the error;
        a fully successful refresh clears it.
        """
        installed = self.git_ops.is_installed()
        meta = RepositoryMetadata(is_git_installed=installed)
        raw_status = RawStatus()
        error: Optional[str] = None

        try:
            if not installed:
                raise ToolMissingError()
            if self.git_ops.is_repository():
                raw_status = self.git_ops.status()
                has_commits = self.git_ops.log(1).total > 0
                remotes = tuple(self.git_ops.list_remotes())
                meta = RepositoryMetadata(
                    is_git_installed=True,
                    is_repository=True,
                    current_branch=raw_status.current,
                    has_commits=has_commits,
                    has_remote_branch=has_commits and bool(raw_status.tracking),
                    remotes=remotes,
                )
        except ToolMissingError as e:
            logger.debug(f"Status refresh skipped: {e}")
        except GitSyncKeeperError as e:
            logger.warning(f"Status refresh failed: {e.message}")
            error = e.message

        with self._lock:
            self._metadata = meta
            self._raw_status = raw_status
            self._last_error = error

        logger.debug(
            f"Refreshed status: branch={meta.current_branch} commits={meta.has_commits} "
            f"published={meta.has_remote_branch} files={len(raw_status.files)} "
            f"ahead={raw_status.ahead} behind={raw_status.behind}"
        )
        return meta

    def summary(self, scheduler_is_syncing: bool, config: AutoSyncConfig) -> SyncSummary:
        """Compute the sync state from the current snapshot."""
        with self._lock:
            meta, raw_status, last_error = self._metadata, self._raw_status, self._last_error
        return compute_sync_state(meta, raw_status, scheduler_is_syncing, config, last_error)

    def visible_files(self, config: AutoSyncConfig) -> List[FileStatusEntry]:
        return filter_visible_files(self.raw_status.files, config)
