"""Synchronization state and operation result models"""
from enum import Enum
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator, Optional


class SyncState(Enum):
    """Canonical synchronization state of the sync directory."""
    ERROR = "error"
    NO_COMMITS = "no-commits"
    UNPUBLISHED = "unpublished"
    SYNCING = "syncing"
    CHANGES = "changes"
    UNPUSHED = "unpushed"
    SYNCED = "synced"


class WorkflowState(Enum):
    """Which mutating operation currently holds the operation guard."""
    IDLE = "idle"
    PUBLISHING = "publishing"
    PUSHING = "pushing"
    PULLING = "pulling"
    SYNCING = "syncing"
    COMMITTING = "committing"
    INITIALIZING = "initializing"


@dataclass(frozen=True)
class SyncSummary:
    """Sync state plus uncommitted file counts.

    Unpacks as ``state, visible, total``.
    """
    state: SyncState
    visible_uncommitted_count: int
    total_uncommitted_count: int

    def __iter__(self) -> Iterator:
        return iter((self.state, self.visible_uncommitted_count, self.total_uncommitted_count))

    @property
    def hidden_uncommitted_count(self) -> int:
        return self.total_uncommitted_count - self.visible_uncommitted_count


@dataclass
class SyncRunResult:
    """Bookkeeping for the most recent synchronization run."""
    last_sync_time: Optional[datetime] = None
    last_error: Optional[str] = None


@dataclass(frozen=True)
class SchedulerStatus:
    """Read-only view of the auto-sync scheduler."""
    enabled: bool
    interval_seconds: int
    is_syncing: bool
    is_armed: bool
    last_sync_time: Optional[datetime] = None
    last_error: Optional[str] = None


@dataclass(frozen=True)
class PushResult:
    """Outcome of a push or first publish."""
    published: bool  # True when this push created the tracking branch
    auto_sync_enabled: bool
    message: str


@dataclass(frozen=True)
class PullResult:
    """Outcome of a pull.

    ``reload_required`` tells the caller to re-read all on-disk state from
    scratch. Unsaved in-memory edits are lost across that reload.
    """
    content_changed: bool
    message: str

    @property
    def reload_required(self) -> bool:
        return self.content_changed


@dataclass(frozen=True)
class SyncOutcome:
    """Outcome of a combined commit/pull/push cycle."""
    committed: bool
    pushed: bool
    pulled_changes: bool
    message: str

    @property
    def reload_required(self) -> bool:
        return self.pulled_changes


@dataclass(frozen=True)
class RemoteUpdateResult:
    """Outcome of add-or-update on a remote."""
    name: str
    url: str
    was_update: bool


@dataclass(frozen=True)
class ConnectionTestResult:
    """Outcome of a remote reachability check. Never raised, always returned."""
    success: bool
    message: str
