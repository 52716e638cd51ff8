"""Sync state and file status formatting utilities."""

from git_sync_keeper.constants import CLI_COLORS, STATUS_SYMBOLS, STATUS_TEXT
from git_sync_keeper.models.repository import FileStatusEntry
from git_sync_keeper.models.sync import SyncState, SyncSummary


def format_sync_state(state: SyncState) -> str:
    """
    Format a sync state as "<symbol> <text>".

    Args:
        state: Sync state enum value

    Returns:
        Display text for the state
    """
    return f"{STATUS_SYMBOLS.get(state, '?')} {STATUS_TEXT.get(state, state.value)}"


def format_sync_state_markup(state: SyncState) -> str:
    """Sync state wrapped in Rich colour markup."""
    color = CLI_COLORS.get(state, "white")
    return f"[{color}]{format_sync_state(state)}[/{color}]"


def format_uncommitted_counts(summary: SyncSummary) -> str:
    """
    Format uncommitted counts, mentioning hidden generated files.

    Example:
        "3 uncommitted files (2 auto-generated hidden)"
    """
    visible = summary.visible_uncommitted_count
    noun = "file" if visible == 1 else "files"
    text = f"{visible} uncommitted {noun}"
    hidden = summary.hidden_uncommitted_count
    if hidden:
        text += f" ({hidden} auto-generated hidden)"
    return text


def format_file_status(entry: FileStatusEntry) -> str:
    """Short status code for a changed file, as git prints it ("??", " M", "A ")."""
    return f"{entry.index_state}{entry.working_state}"
