"""Publish, push, pull and combined sync operations"""

from contextlib import contextmanager
from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Optional

from git_sync_keeper.constants import AUTO_SYNC_COMMIT_PREFIX, DEFAULT_REMOTE
from git_sync_keeper.exceptions import (
    GitOperationError,
    MergeConflictError,
    NotARepositoryError,
    NothingToPushError,
    OperationInProgressError,
    RemoteBranchMissingError,
    ToolMissingError,
)
from git_sync_keeper.logging_config import get_logger
from git_sync_keeper.models.sync import PullResult, PushResult, SyncOutcome, WorkflowState
from git_sync_keeper.services.status_service import count_uncommitted

logger = get_logger(__name__)

# Failures raised by git itself, as opposed to precondition failures
COMMAND_ERRORS = (GitOperationError, NotARepositoryError, ToolMissingError)


class OperationGuard:
    """Allows one git-mutating operation at a time.

    A second caller fails fast with OperationInProgressError instead of
    waiting. The guard is released on every exit path.
    """

    def __init__(self):
        self._lock = Lock()
        self._state = WorkflowState.IDLE

    @property
    def state(self) -> WorkflowState:
        return self._state

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self, state: WorkflowState):
        if not self._lock.acquire(blocking=False):
            raise OperationInProgressError(state.value, self._state.value)
        self._state = state
        try:
            yield self
        finally:
            self._state = WorkflowState.IDLE
            self._lock.release()

    def transition(self, state: WorkflowState) -> None:
        """Refine the state of the operation currently holding the guard."""
        if not self._lock.locked():
            raise RuntimeError("transition() called without holding the guard")
        self._state = state


class WorkflowService:
    """Drives outbound and inbound synchronization."""

    def __init__(
        self,
        git_ops,
        status_service,
        settings_store,
        guard: Optional[OperationGuard] = None,
        remote_name: str = DEFAULT_REMOTE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the service.

        Args:
            git_ops: GitOperations (or compatible) that runs the git commands
            status_service: StatusService refreshed after each operation
            settings_store: SettingsStore written when the first publish enables auto-sync
            guard: Shared operation guard (one is created if omitted)
            remote_name: The single remote used for push and pull
            clock: Returns the current time, used for auto-sync commit messages
        """
        self.git_ops = git_ops
        self.status_service = status_service
        self.settings_store = settings_store
        self.guard = guard or OperationGuard()
        self.remote_name = remote_name
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def state(self) -> WorkflowState:
        return self.guard.state

    @contextmanager
    def _operation(self, state: WorkflowState):
        """Hold the guard, record git failures, refresh status on success."""
        with self.guard.hold(state):
            try:
                yield
            except COMMAND_ERRORS as e:
                logger.warning(f"{state.value} failed: {e.message}")
                self.status_service.record_error(e.message)
                raise
        self.status_service.refresh_metadata()

    def init(self) -> None:
        """Create the repository in the sync directory."""
        with self._operation(WorkflowState.INITIALIZING):
            if not self.git_ops.is_installed():
                raise ToolMissingError()
            self.git_ops.init()

    def commit(self, message: str) -> None:
        """Stage everything and commit it."""
        if not message or not message.strip():
            raise ValueError("Please enter a commit message")

        with self._operation(WorkflowState.COMMITTING):
            self.git_ops.add(".")
            self.git_ops.commit(message.strip())

    def push(self) -> PushResult:
        """Push the current branch, publishing it first if it has no tracking branch.

        The first successful publish always turns automatic sync on, whatever
        the user chose before.
        """
        with self._operation(WorkflowState.PUSHING):
            raw_status = self.git_ops.status()

            if raw_status.tracking:
                if raw_status.ahead == 0:
                    raise NothingToPushError(raw_status.current)
                self.git_ops.push(self.remote_name)
                logger.info("Pushed successfully")
                return PushResult(published=False, auto_sync_enabled=False, message="Pushed successfully")

            if self.git_ops.log(1).total == 0:
                raise NothingToPushError(raw_status.current, message="No commits to publish yet")

            self.guard.transition(WorkflowState.PUBLISHING)
            self.git_ops.push(self.remote_name)

            logger.info("First publish successful - enabling auto-sync")
            self.settings_store.update(enabled=True)
            return PushResult(published=True, auto_sync_enabled=True, message="Branch published! Auto-sync enabled")

    def pull(self) -> PullResult:
        """Pull from the remote.

        When commits were incorporated the result asks the caller to reload
        all on-disk state. Unsaved in-memory edits do not survive that reload.
        """
        with self._operation(WorkflowState.PULLING):
            self.git_ops.fetch(self.remote_name)
            behind_before = self.git_ops.status().behind
            self.git_ops.pull(self.remote_name)
            behind_after = self.git_ops.status().behind

            if behind_before != 0 and behind_after == 0:
                logger.info(f"Pulled {behind_before} commit(s), reload required")
                return PullResult(content_changed=True, message="Pulled successfully! Reloading...")

            logger.info("Already up to date")
            return PullResult(content_changed=False, message="Already up to date")

    def _ensure_no_conflict(self, raw_status) -> None:
        """Refuse to stage a tree that still holds an unresolved merge."""
        conflicted = [entry.path for entry in raw_status.files if entry.is_unmerged]
        if conflicted or self.git_ops.is_merging():
            paths = ", ".join(conflicted) or "the working tree"
            raise MergeConflictError(
                "sync",
                f"Merge conflict in {paths}. Resolve the conflict and commit it before syncing.",
            )

    def sync(self) -> SyncOutcome:
        """Commit local changes, pull remote commits, push.

        A pull that fails because the remote branch does not exist yet is
        tolerated and the push decides whether the cycle failed. Any other
        pull failure aborts the merge, so conflict markers are never
        committed, and fails the cycle.
        """
        with self._operation(WorkflowState.SYNCING):
            raw_status = self.git_ops.status()
            self._ensure_no_conflict(raw_status)
            uncommitted = count_uncommitted(raw_status.files)

            committed = False
            if uncommitted:
                logger.info(f"Staging and committing {uncommitted} file(s)")
                self.git_ops.add(".")
                self.git_ops.commit(f"{AUTO_SYNC_COMMIT_PREFIX} {self.clock().isoformat()}")
                committed = True

            pulled_changes = False
            try:
                self.git_ops.fetch(self.remote_name)
                behind = self.git_ops.status().behind
                if behind:
                    self.git_ops.pull(self.remote_name)
                    pulled_changes = self.git_ops.status().behind == 0
            except RemoteBranchMissingError as e:
                logger.info(f"Pull skipped, remote branch does not exist yet: {e.message}")
            except GitOperationError:
                if self.git_ops.is_merging():
                    logger.warning("Pull left an unfinished merge, aborting it")
                    self.git_ops.abort_merge()
                raise

            raw_status = self.git_ops.status()
            pushed = False
            if raw_status.ahead > 0 or not raw_status.tracking:
                self.git_ops.push(self.remote_name)
                pushed = True

            if not (committed or pushed or pulled_changes):
                message = "Already in sync"
            else:
                message = "Synced successfully!"
            logger.info(
                f"Sync completed: committed={committed} pulled_changes={pulled_changes} pushed={pushed}"
            )
            return SyncOutcome(
                committed=committed,
                pushed=pushed,
                pulled_changes=pulled_changes,
                message=message,
            )
