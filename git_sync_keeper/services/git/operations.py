"""Git operations service"""

import os
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

import git

from git_sync_keeper.constants import DEFAULT_BRANCH, DEFAULT_LOG_COUNT, DEFAULT_REMOTE
from git_sync_keeper.exceptions import (
    GitOperationError,
    GitSyncKeeperError,
    RemoteBranchMissingError,
    NotARepositoryError,
    ToolMissingError,
)
from git_sync_keeper.logging_config import get_logger
from git_sync_keeper.models.repository import LogEntry, LogResult, RawStatus, Remote
from git_sync_keeper.models.sync import ConnectionTestResult
from git_sync_keeper.services.git.errors import (
    HOST_UNRESOLVED_MESSAGE,
    LOCKED_MESSAGE,
    classify_git_error,
    git_error_text,
    missing_remote_branch_message,
)
from git_sync_keeper.services.git.status_parser import parse_porcelain_status

logger = get_logger(__name__)


class GitOperations:
    """Runs git commands against the sync directory.

    Every method opens its own repository handle, so one instance can be
    shared between the scheduler thread and the caller's thread.
    """

    def __init__(self, repo_path: Union[str, Path]):
        """Initialize the service.

        Args:
            repo_path: Path to the sync directory (need not be a repository yet)
        """
        self.repo_path = str(repo_path)
        logger.debug(f"Git operations initialized for {self.repo_path}")

    def _get_repo(self) -> git.Repo:
        """Get a thread-safe git.Repo instance.

        Creates a new repo instance for each call. GitPython repos are
        lightweight - they don't clone, just open the existing repo.
        """
        return git.Repo(self.repo_path)

    @contextmanager
    def _git_operation(self, operation: str):
        """Context manager translating GitPython failures into typed errors."""
        try:
            yield
        except GitSyncKeeperError:
            raise
        except git.exc.GitCommandNotFound as e:
            raise ToolMissingError() from e
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise NotARepositoryError(self.repo_path) from e
        except git.exc.GitCommandError as e:
            logger.debug(f"git {operation} failed: {e}")
            raise classify_git_error(operation, e, self.repo_path) from e

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def is_installed(self) -> bool:
        """Check if the git executable is available."""
        try:
            version = git.cmd.Git().version()
            logger.debug(f"Found {version}")
            return True
        except (git.exc.GitCommandNotFound, OSError) as e:
            logger.debug(f"Git not installed: {e}")
            return False

    def is_repository(self) -> bool:
        """Check if the sync directory is a git repository."""
        return os.path.exists(os.path.join(self.repo_path, ".git"))

    def init(self) -> None:
        """Initialize a new repository whose default branch is 'main'."""
        with self._git_operation("init"):
            Path(self.repo_path).mkdir(parents=True, exist_ok=True)
            repo = git.Repo.init(self.repo_path)
            if not repo.head.is_valid():
                # Rename the unborn initial branch
                repo.git.symbolic_ref("HEAD", f"refs/heads/{DEFAULT_BRANCH}")
            logger.info(f"Repository initialized at {self.repo_path} with {DEFAULT_BRANCH} branch")

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def status(self) -> RawStatus:
        """Get the working tree status and ahead/behind counters."""
        with self._git_operation("status"):
            repo = self._get_repo()
            output = repo.git.status("--porcelain=v1", "--branch", "--untracked-files=all")
            return parse_porcelain_status(output)

    def log(self, max_count: int = DEFAULT_LOG_COUNT) -> LogResult:
        """Get recent commits. A repository without commits yields an empty result."""
        with self._git_operation("log"):
            repo = self._get_repo()
            if not repo.head.is_valid():
                logger.debug("No commits yet, returning empty log")
                return LogResult()

            entries = [
                LogEntry(
                    hexsha=commit.hexsha,
                    message=commit.message if isinstance(commit.message, str)
                    else commit.message.decode("utf-8", errors="ignore"),
                    author_name=commit.author.name or "",
                    author_email=commit.author.email or "",
                    date=datetime.fromtimestamp(commit.committed_date, tz=timezone.utc),
                )
                for commit in repo.iter_commits("HEAD", max_count=max_count)
            ]
            total = int(repo.git.rev_list("--count", "HEAD"))
            return LogResult(entries=entries, total=total)

    def current_branch(self) -> str:
        """Get the checked-out branch name, 'main' when it cannot be determined."""
        return self.status().current or DEFAULT_BRANCH

    def list_remotes(self) -> List[Remote]:
        """List configured remotes with their fetch and push URLs."""
        with self._git_operation("list_remotes"):
            repo = self._get_repo()
            output = repo.git.remote("-v")

        urls: dict = {}
        order: List[str] = []
        for line in output.split("\n"):
            parts = line.split()
            if len(parts) < 3:
                continue
            name, url, kind = parts[0], parts[1], parts[2]
            if name not in urls:
                urls[name] = {}
                order.append(name)
            urls[name][kind.strip("()")] = url

        remotes = []
        for name in order:
            fetch_url = urls[name].get("fetch", "")
            push_url = urls[name].get("push", fetch_url)
            remotes.append(Remote(name=name, fetch_url=fetch_url, push_url=push_url))
        return remotes

    def has_remote_branch(self, remote: str = DEFAULT_REMOTE, branch: Optional[str] = None) -> bool:
        """Check if the branch exists on the remote (network round trip)."""
        branch = branch or self.current_branch()
        with self._git_operation("ls-remote"):
            repo = self._get_repo()
            output = repo.git.ls_remote("--heads", remote, f"refs/heads/{branch}")
            return bool(output.strip())

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    def add(self, paths: Union[str, Sequence[str]] = ".") -> None:
        """Stage files, including deletions.

        A stale index.lock left by a crashed git process is removed once and
        the add retried.
        """
        if isinstance(paths, str):
            paths = [paths]

        with self._git_operation("add"):
            repo = self._get_repo()
            try:
                repo.git.add("-A", "--", *paths)
            except git.exc.GitCommandError as e:
                if "index.lock" not in git_error_text(e):
                    raise
                lock_file = Path(repo.git_dir) / "index.lock"
                if not lock_file.exists():
                    raise GitOperationError("add", LOCKED_MESSAGE) from e
                logger.warning("Removing stale index.lock and retrying add")
                try:
                    lock_file.unlink()
                    repo.git.add("-A", "--", *paths)
                except (OSError, git.exc.GitCommandError) as retry_error:
                    raise GitOperationError("add", LOCKED_MESSAGE) from retry_error
            logger.debug(f"Added files: {list(paths)}")

    def commit(self, message: str, paths: Optional[Sequence[str]] = None) -> None:
        """Commit staged changes, or only the given paths."""
        if not message or not message.strip():
            raise ValueError("Commit message cannot be empty")

        with self._git_operation("commit"):
            repo = self._get_repo()
            if paths:
                repo.git.commit("-m", message, "--", *paths)
            else:
                repo.git.commit("-m", message)
            logger.info(f"Committed: {message.splitlines()[0]}")

    def push(self, remote: str = DEFAULT_REMOTE, branch: Optional[str] = None) -> None:
        """Push to the remote, creating the upstream on first push."""
        with self._git_operation("push"):
            repo = self._get_repo()
            status = self.status()
            current = branch or status.current or DEFAULT_BRANCH

            if not status.tracking:
                logger.info(f"First push detected, setting upstream: {remote} {current}")
                repo.git.push("-u", remote, current)
            elif branch:
                repo.git.push(remote, branch)
            else:
                repo.git.push()
            logger.info(f"Pushed to {remote} {branch or '(current branch)'}")

    def pull(self, remote: str = DEFAULT_REMOTE, branch: Optional[str] = None) -> None:
        """Pull from the remote.

        Uses the upstream when one is configured; otherwise fetches the
        remote branch explicitly and merges it.
        """
        with self._git_operation("pull"):
            repo = self._get_repo()
            status = self.status()
            current = branch or status.current or DEFAULT_BRANCH
            has_upstream = bool(status.tracking)

            try:
                if has_upstream and status.ahead == 0 and status.behind == 0:
                    # Counters may be stale; fetch to learn about new remote commits
                    repo.git.fetch(remote)
                    if self.status().behind == 0:
                        logger.debug("Already up to date")
                        return

                if has_upstream and not branch:
                    repo.git.pull("--no-rebase", "--no-edit")
                    logger.info("Pulled from upstream")
                    return

                if not self.has_remote_branch(remote, current):
                    raise RemoteBranchMissingError("pull", missing_remote_branch_message(current, remote))

                repo.git.fetch(remote, current)
                behind = int(repo.git.rev_list("--count", f"HEAD..{remote}/{current}"))
                if behind == 0:
                    logger.debug("Already up to date after fetch")
                    return

                repo.git.merge("--no-edit", f"{remote}/{current}")
                logger.info(f"Pulled (fetch+merge) from {remote} {current}")
            except git.exc.GitCommandError as e:
                text = git_error_text(e).lower()
                if "no tracking information" in text:
                    raise GitOperationError(
                        "pull",
                        f"No upstream configured for branch '{current}'.\n\n"
                        "The remote repository may not have this branch, or you need to push your branch first.",
                    ) from e
                if "couldn't find remote ref" in text:
                    raise RemoteBranchMissingError("pull", missing_remote_branch_message(current, remote)) from e
                raise

    def fetch(self, remote: str = DEFAULT_REMOTE) -> None:
        """Fetch from the remote without merging."""
        with self._git_operation("fetch"):
            self._get_repo().git.fetch(remote)

    def is_merging(self) -> bool:
        """Check if a merge is in progress (MERGE_HEAD exists)."""
        with self._git_operation("is_merging"):
            return (Path(self._get_repo().git_dir) / "MERGE_HEAD").exists()

    def abort_merge(self) -> None:
        """Abort an in-progress merge, restoring the pre-merge working tree."""
        with self._git_operation("abort_merge"):
            self._get_repo().git.merge("--abort")
            logger.info("Aborted merge")

    def add_remote(self, name: str, url: str) -> None:
        with self._git_operation("add_remote"):
            self._get_repo().git.remote("add", name, url)
            logger.info(f"Added remote: {name} {url}")

    def remove_remote(self, name: str) -> None:
        with self._git_operation("remove_remote"):
            self._get_repo().git.remote("remove", name)
            logger.info(f"Removed remote: {name}")

    def set_remote_url(self, name: str, url: str) -> None:
        with self._git_operation("set_remote_url"):
            self._get_repo().git.remote("set-url", name, url)
            logger.info(f"Set remote URL: {name} {url}")

    def test_connection(self, remote: str = DEFAULT_REMOTE) -> ConnectionTestResult:
        """Check the remote with ls-remote. Failures are returned, never raised."""
        logger.debug(f"Testing remote connection: {remote}")
        try:
            self._get_repo().git.ls_remote("--exit-code", remote)
        except git.exc.GitCommandError as e:
            # --exit-code exits 2 when the remote is reachable but has no refs yet
            if e.status == 2 and not git_error_text(e).lower().startswith("fatal"):
                return ConnectionTestResult(
                    success=True,
                    message="Connection successful! Remote is reachable but has no branches yet.",
                )
            return ConnectionTestResult(success=False, message=_connection_failure_message(e))
        except git.exc.GitCommandNotFound:
            return ConnectionTestResult(success=False, message="Git is not installed or not on PATH")
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            return ConnectionTestResult(success=False, message=f"Not a git repository: {self.repo_path}")

        logger.debug("Remote connection successful")
        return ConnectionTestResult(
            success=True,
            message="Connection successful! Remote is reachable and you have access.",
        )


def _connection_failure_message(error: git.exc.GitCommandError) -> str:
    text = git_error_text(error)
    lowered = text.lower()
    if "correct access rights" in lowered or "permission denied" in lowered:
        return "Permission denied. Check your SSH keys or Personal Access Token."
    if "could not resolve host" in lowered:
        return HOST_UNRESOLVED_MESSAGE
    if "repository not found" in lowered or "does not appear to be a git repository" in lowered:
        return "Repository not found. Verify the URL and that the repository exists."
    return f"Connection failed: {text}"
