"""Command-line argument parsing for git-sync-keeper."""

import argparse

from git_sync_keeper.__version__ import __version__
from git_sync_keeper.constants import DEFAULT_LOG_COUNT, DEFAULT_REMOTE


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="git-sync-keeper",
        description="Keep a directory synchronized with a git remote",
    )
    parser.add_argument(
        "-C", "--directory", default=".", help="Directory to synchronize (default: current directory)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-sync-keeper {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    status = subparsers.add_parser("status", help="Show the sync state and changed files")
    status.add_argument(
        "--all", action="store_true", help="Include auto-generated files in the file list"
    )

    subparsers.add_parser("init", help="Initialize a repository with a 'main' branch")

    commit = subparsers.add_parser("commit", help="Stage all changes and commit them")
    commit.add_argument("-m", "--message", required=True, help="Commit message")

    log = subparsers.add_parser("log", help="Show recent commits")
    log.add_argument(
        "-n", "--max-count", type=_positive_int, default=DEFAULT_LOG_COUNT,
        help=f"Number of commits to show (default: {DEFAULT_LOG_COUNT})",
    )

    subparsers.add_parser("push", help="Push commits, publishing the branch on first push")
    subparsers.add_parser("pull", help="Pull commits from the remote")
    subparsers.add_parser("sync", help="Commit, pull and push in one step")

    remote = subparsers.add_parser("remote", help="Manage the remote")
    remote_commands = remote.add_subparsers(dest="remote_command", metavar="ACTION")
    remote_commands.required = True
    remote_commands.add_parser("list", help="List configured remotes")
    remote_add = remote_commands.add_parser("add", help=f"Add '{DEFAULT_REMOTE}', or update its URL")
    remote_add.add_argument("url", help="Remote URL")
    remote_remove = remote_commands.add_parser("remove", help="Remove a remote")
    remote_remove.add_argument("name", nargs="?", default=DEFAULT_REMOTE, help="Remote name")
    remote_set_url = remote_commands.add_parser("set-url", help=f"Change the URL of '{DEFAULT_REMOTE}'")
    remote_set_url.add_argument("url", help="New remote URL")
    remote_test = remote_commands.add_parser("test", help="Check that a remote is reachable")
    remote_test.add_argument("name", nargs="?", default=DEFAULT_REMOTE, help="Remote name")

    auto_sync = subparsers.add_parser("auto-sync", help="Show or change automatic sync settings")
    toggle = auto_sync.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="enabled", action="store_const", const=True, help="Turn auto-sync on")
    toggle.add_argument("--disable", dest="enabled", action="store_const", const=False, help="Turn auto-sync off")
    auto_sync.add_argument(
        "--interval", type=_positive_int, metavar="SECONDS", help="Seconds between automatic syncs"
    )
    hide = auto_sync.add_mutually_exclusive_group()
    hide.add_argument(
        "--hide-generated", dest="hide_generated_files", action="store_const", const=True,
        help="Hide auto-generated files from the changed file list",
    )
    hide.add_argument(
        "--show-generated", dest="hide_generated_files", action="store_const", const=False,
        help="Show auto-generated files in the changed file list",
    )

    subparsers.add_parser("watch", help="Run automatic sync until interrupted")

    return parser


def parse_args(argv=None):
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)
