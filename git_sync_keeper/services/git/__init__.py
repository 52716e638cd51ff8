"""Git-related services for git-sync-keeper."""

from .operations import GitOperations
from .status_parser import parse_porcelain_status
from .errors import classify_git_error

__all__ = [
    "GitOperations",
    "parse_porcelain_status",
    "classify_git_error",
]
