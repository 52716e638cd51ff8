"""Data models for git-sync-keeper."""

from .repository import (
    Remote,
    FileStatusEntry,
    RawStatus,
    RepositoryMetadata,
    LogEntry,
    LogResult,
)
from .sync import (
    SyncState,
    SyncSummary,
    SyncRunResult,
    SchedulerStatus,
    WorkflowState,
    PushResult,
    PullResult,
    SyncOutcome,
    RemoteUpdateResult,
    ConnectionTestResult,
)

__all__ = [
    "Remote",
    "FileStatusEntry",
    "RawStatus",
    "RepositoryMetadata",
    "LogEntry",
    "LogResult",
    "SyncState",
    "SyncSummary",
    "SyncRunResult",
    "SchedulerStatus",
    "WorkflowState",
    "PushResult",
    "PullResult",
    "SyncOutcome",
    "RemoteUpdateResult",
    "ConnectionTestResult",
]
