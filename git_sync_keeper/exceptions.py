"""Custom exceptions for git-sync-keeper"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Category of a synchronization failure."""
    TOOL_MISSING = "tool-missing"
    NOT_A_REPOSITORY = "not-a-repository"
    REMOTE_NOT_FOUND = "remote-not-found"
    INVALID_URL = "invalid-url"
    NOTHING_TO_PUSH = "nothing-to-push"
    OPERATION_IN_PROGRESS = "operation-in-progress"
    NETWORK_OR_AUTH = "network-or-auth"
    REMOTE_BRANCH_MISSING = "remote-branch-missing"
    MERGE_CONFLICT = "merge-conflict"
    UNKNOWN = "unknown"


class GitSyncKeeperError(Exception):
    """Base exception for all git-sync-keeper errors."""

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class GitOperationError(GitSyncKeeperError):
    """Exception raised for errors in Git operations."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation

        error_msg = f"Git operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)
        # Keep the bare message for display; str(exc) carries the operation
        self.message = message or error_msg


class ToolMissingError(GitSyncKeeperError):
    """Exception raised when the git executable cannot be found."""

    kind = ErrorKind.TOOL_MISSING

    def __init__(self, message: str = "Git is not installed or not on PATH"):
        super().__init__(message)


class NotARepositoryError(GitSyncKeeperError):
    """Exception raised when the sync directory is not a git repository."""

    kind = ErrorKind.NOT_A_REPOSITORY

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Not a git repository: {path}")


class RemoteNotFoundError(GitSyncKeeperError):
    """Exception raised when a named remote does not exist."""

    kind = ErrorKind.REMOTE_NOT_FOUND

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Remote '{name}' not found")


class InvalidUrlError(GitSyncKeeperError):
    """Exception raised for an empty or blank remote URL."""

    kind = ErrorKind.INVALID_URL

    def __init__(self, url: str):
        self.url = url
        super().__init__("Remote URL cannot be empty")


class NothingToPushError(GitSyncKeeperError):
    """Exception raised when a push is requested with no local commits ahead."""

    kind = ErrorKind.NOTHING_TO_PUSH

    def __init__(self, branch: Optional[str] = None, message: Optional[str] = None):
        self.branch = branch
        if message is None:
            message = "Nothing to push"
            if branch:
                message += f": '{branch}' is up to date with its remote"
        super().__init__(message)


class OperationInProgressError(GitSyncKeeperError):
    """Exception raised when another synchronization operation holds the guard."""

    kind = ErrorKind.OPERATION_IN_PROGRESS

    def __init__(self, requested: str, running: Optional[str] = None):
        self.requested = requested
        self.running = running
        message = f"Cannot {requested}: another git operation is in progress"
        if running:
            message += f" ({running})"
        super().__init__(message)


class NetworkOrAuthError(GitOperationError):
    """Exception raised when a remote cannot be reached or rejects credentials."""

    kind = ErrorKind.NETWORK_OR_AUTH


class UnknownGitError(GitOperationError):
    """Exception raised for git failures that fit no other category."""

    kind = ErrorKind.UNKNOWN


class RemoteBranchMissingError(GitOperationError):
    """Exception raised when the current branch does not exist on the remote yet."""

    kind = ErrorKind.REMOTE_BRANCH_MISSING


class MergeConflictError(GitOperationError):
    """Exception raised when the working tree holds an unresolved merge."""

    kind = ErrorKind.MERGE_CONFLICT
