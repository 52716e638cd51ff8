"""Formatting utilities for git-sync-keeper.

- date: Date and relative time formatting
- status: Sync state and file status formatting
"""

# Date formatters
from .date import format_date, format_relative_time, format_last_sync

# Status formatters
from .status import (
    format_sync_state,
    format_sync_state_markup,
    format_uncommitted_counts,
    format_file_status,
)

__all__ = [
    # Date
    "format_date",
    "format_relative_time",
    "format_last_sync",
    # Status
    "format_sync_state",
    "format_sync_state_markup",
    "format_uncommitted_counts",
    "format_file_status",
]
