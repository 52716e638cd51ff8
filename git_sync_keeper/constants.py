"""Shared constants for git-sync-keeper."""

from git_sync_keeper.models.sync import SyncState

# Only one remote is supported; push/publish always target it
DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "main"

DEFAULT_SYNC_INTERVAL = 60  # seconds
DEFAULT_LOG_COUNT = 50

AUTO_SYNC_COMMIT_PREFIX = "Auto-sync:"

# Keys used by the persistent settings store
SETTING_AUTO_SYNC_ENABLED = "git-auto-sync-enabled"
SETTING_AUTO_SYNC_INTERVAL = "git-auto-sync-interval"
SETTING_HIDE_GENERATED_FILES = "git-auto-sync-hide-files"
SETTING_LAST_SYNC_TIME = "git-auto-sync-last-time"

APP_DIR_NAME = ".git-sync-keeper"


# Status indicator symbols
STATUS_SYMBOLS = {
    SyncState.ERROR: "⚠",
    SyncState.NO_COMMITS: "○",
    SyncState.UNPUBLISHED: "📤",
    SyncState.SYNCING: "↻",
    SyncState.CHANGES: "●",
    SyncState.UNPUSHED: "⬆",
    SyncState.SYNCED: "✓",
}

STATUS_TEXT = {
    SyncState.ERROR: "Error",
    SyncState.NO_COMMITS: "No commits",
    SyncState.UNPUBLISHED: "Not published",
    SyncState.SYNCING: "Syncing...",
    SyncState.CHANGES: "Changes",
    SyncState.UNPUSHED: "Unpushed",
    SyncState.SYNCED: "Synced",
}

# CLI colors (Rich color names)
CLI_COLORS = {
    SyncState.ERROR: "red",
    SyncState.NO_COMMITS: "dim",
    SyncState.UNPUBLISHED: "blue",
    SyncState.SYNCING: "cyan",
    SyncState.CHANGES: "yellow",
    SyncState.UNPUSHED: "magenta",
    SyncState.SYNCED: "green",
}

# Hint shown under the status line for states that need user action
STATUS_HINTS = {
    SyncState.NO_COMMITS: "Create your first commit to start tracking changes",
    SyncState.UNPUBLISHED: "Run 'push' to publish the branch (auto-sync turns on afterwards)",
    SyncState.UNPUSHED: "Local commits are waiting to be pushed",
}
