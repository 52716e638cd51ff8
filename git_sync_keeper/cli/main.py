"""Command-line interface for git-sync-keeper"""

import sys
import time

from rich.console import Console
from rich.table import Table

from git_sync_keeper.cli.args import parse_args
from git_sync_keeper.constants import STATUS_HINTS
from git_sync_keeper.core import SyncKeeper
from git_sync_keeper.exceptions import GitSyncKeeperError
from git_sync_keeper.formatters import (
    format_date,
    format_file_status,
    format_last_sync,
    format_sync_state_markup,
    format_uncommitted_counts,
)
from git_sync_keeper.logging_config import get_log_file, get_logger, setup_logging
from git_sync_keeper.models.sync import SyncOutcome
from git_sync_keeper.services.status_service import changed_files

console = Console()
logger = get_logger(__name__)

WATCH_POLL_SECONDS = 1


def _print_status(keeper: SyncKeeper, show_all: bool) -> None:
    meta = keeper.refresh()
    summary = keeper.summary()
    scheduler = keeper.scheduler_status()

    console.print(f"Status: {format_sync_state_markup(summary.state)}")
    if keeper.status_service.last_error:
        console.print(f"[red]{keeper.status_service.last_error}[/red]")
    hint = STATUS_HINTS.get(summary.state)
    if hint:
        console.print(f"[dim]{hint}[/dim]")

    console.print(f"Branch: {meta.current_branch or '-'}")
    origin = meta.get_remote(keeper.workflow.remote_name)
    console.print(f"Remote: {origin.fetch_url if origin else '[dim]not configured[/dim]'}")
    auto_sync = f"on, every {scheduler.interval_seconds}s" if scheduler.enabled else "off"
    console.print(f"Auto-sync: {auto_sync} (last sync: {format_last_sync(scheduler.last_sync_time)})")
    if scheduler.last_error:
        console.print(f"[yellow]Last auto-sync error: {scheduler.last_error}[/yellow]")

    if show_all:
        files = changed_files(keeper.status_service.raw_status.files)
    else:
        files = keeper.visible_files()
    console.print(format_uncommitted_counts(summary))
    if files:
        table = Table(show_header=False, box=None)
        for entry in files:
            table.add_row(format_file_status(entry), entry.path)
        console.print(table)


def _print_log(keeper: SyncKeeper, max_count: int) -> None:
    result = keeper.log(max_count)
    if not result.entries:
        console.print("[dim]No commits yet[/dim]")
        return

    table = Table()
    table.add_column("Commit")
    table.add_column("Date")
    table.add_column("Author")
    table.add_column("Message")
    for entry in result.entries:
        table.add_row(entry.short_sha, format_date(entry.date), entry.author_name, entry.summary)
    console.print(table)
    if result.total > len(result.entries):
        console.print(f"[dim]Showing {len(result.entries)} of {result.total} commits[/dim]")


def _print_outcome(outcome: SyncOutcome) -> None:
    console.print(f"[green]{outcome.message}[/green]")
    if outcome.reload_required:
        console.print("[yellow]Reload required: remote changes were pulled[/yellow]")


def _run_remote(keeper: SyncKeeper, args) -> int:
    action = args.remote_command
    if action == "list":
        if not keeper.remotes:
            console.print("[dim]No remotes configured[/dim]")
        for remote in keeper.remotes:
            console.print(f"{remote.name}\t{remote.fetch_url} (fetch)")
            console.print(f"{remote.name}\t{remote.push_url} (push)")
    elif action == "add":
        result = keeper.add_or_update_remote(args.url)
        verb = "Updated" if result.was_update else "Added"
        console.print(f"[green]{verb} remote '{result.name}': {result.url}[/green]")
    elif action == "remove":
        keeper.remove_remote(args.name)
        console.print(f"[green]Removed remote '{args.name}'[/green]")
    elif action == "set-url":
        keeper.set_remote_url(args.url)
        console.print(f"[green]Remote URL updated: {args.url}[/green]")
    elif action == "test":
        result = keeper.test_connection(args.name)
        color = "green" if result.success else "red"
        console.print(f"[{color}]{result.message}[/{color}]")
        if not result.success:
            return 1
    return 0


def _run_auto_sync(keeper: SyncKeeper, args) -> None:
    changes = (args.enabled, args.interval, args.hide_generated_files)
    if any(value is not None for value in changes):
        config = keeper.set_auto_sync(
            enabled=args.enabled,
            interval_seconds=args.interval,
            hide_generated_files=args.hide_generated_files,
        )
    else:
        config = keeper.config

    console.print(f"Enabled: {'yes' if config.enabled else 'no'}")
    console.print(f"Interval: {config.interval_seconds}s")
    console.print(f"Hide generated files: {'yes' if config.hide_generated_files else 'no'}")


def _run_watch(keeper: SyncKeeper) -> None:
    config = keeper.config
    if not config.enabled:
        console.print("[yellow]Auto-sync is disabled; enable it with 'auto-sync --enable'[/yellow]")
    keeper.scheduler.on_sync_completed = _print_outcome
    console.print(f"Watching {keeper.repo_path} (every {config.interval_seconds}s). Press Ctrl-C to stop.")
    keeper.start()
    try:
        while True:
            time.sleep(WATCH_POLL_SECONDS)
    finally:
        keeper.close()


def run_command(keeper: SyncKeeper, args) -> int:
    """Dispatch a parsed command to the keeper. Returns the exit code."""
    command = args.command
    if command == "status":
        _print_status(keeper, args.all)
    elif command == "init":
        keeper.init()
        console.print(f"[green]Initialized repository in {keeper.repo_path}[/green]")
    elif command == "commit":
        keeper.commit(args.message)
        console.print("[green]Committed[/green]")
    elif command == "log":
        _print_log(keeper, args.max_count)
    elif command == "push":
        result = keeper.push()
        console.print(f"[green]{result.message}[/green]")
    elif command == "pull":
        result = keeper.pull()
        console.print(f"[green]{result.message}[/green]")
        if result.reload_required:
            console.print("[yellow]Reload required: re-read any files you have open[/yellow]")
    elif command == "sync":
        _print_outcome(keeper.sync_now())
    elif command == "remote":
        return _run_remote(keeper, args)
    elif command == "auto-sync":
        _run_auto_sync(keeper, args)
    elif command == "watch":
        _run_watch(keeper)
    return 0


def main(argv=None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if parsed_args.debug:
        console.print("[yellow]Debug mode enabled[/yellow]")
        console.print(f"[dim]Debug log: {get_log_file()}[/dim]")

    try:
        keeper = SyncKeeper(parsed_args.directory)
        return run_command(keeper, parsed_args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except (GitSyncKeeperError, ValueError) as e:
        logger.debug(f"Command failed: {e!r}")
        console.print(f"[red]Error: {getattr(e, 'message', e)}[/red]")
        if parsed_args.debug:
            console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
