"""Date and time formatting utilities."""

from datetime import datetime, timezone
from typing import Any, Optional


def format_date(date: Any) -> str:
    """
    Format a date object to YYYY-MM-DD HH:MM string.

    Args:
        date: Date object (datetime or string)

    Returns:
        Formatted date string
    """
    if hasattr(date, "strftime"):
        return date.strftime("%Y-%m-%d %H:%M")
    return str(date)


def format_relative_time(when: datetime, now: Optional[datetime] = None) -> str:
    """
    Format a timestamp relative to now, e.g. "just now", "5m ago", "2h ago".

    Args:
        when: The timestamp (naive values are taken as UTC)
        now: Reference time, defaults to the current UTC time

    Returns:
        Relative time string; dates older than a week are shown as a date
    """
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 7 * 86400:
        return f"{seconds // 86400}d ago"
    return format_date(when)


def format_last_sync(when: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format the last successful sync time for display."""
    if when is None:
        return "Never"
    return format_relative_time(when, now)
