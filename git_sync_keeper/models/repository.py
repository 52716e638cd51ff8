"""Repository state models"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Remote:
    """A configured git remote."""
    name: str
    fetch_url: str
    push_url: str


@dataclass(frozen=True)
class FileStatusEntry:
    """One line of `git status --porcelain` output."""
    path: str  # Repository-relative, forward slashes
    index_state: str = " "  # X column: staged change
    working_state: str = " "  # Y column: unstaged change

    @property
    def is_staged(self) -> bool:
        return self.index_state not in (" ", "", "?")

    @property
    def is_unstaged(self) -> bool:
        return self.working_state not in (" ", "")

    @property
    def is_untracked(self) -> bool:
        return self.index_state == "?" and self.working_state == "?"

    @property
    def is_unmerged(self) -> bool:
        """Conflicted path left by a failed merge (DD, AU, UD, UA, DU, AA, UU)."""
        pair = self.index_state + self.working_state
        return "U" in pair or pair in ("AA", "DD")

    @property
    def is_changed(self) -> bool:
        """Staged, unstaged or untracked."""
        return self.index_state not in (" ", "") or self.is_unstaged


@dataclass(frozen=True)
class RawStatus:
    """Snapshot of `git status` for the sync directory."""
    files: Tuple[FileStatusEntry, ...] = ()
    ahead: int = 0
    behind: int = 0
    current: Optional[str] = None
    tracking: Optional[str] = None

    def __post_init__(self):
        if self.ahead < 0 or self.behind < 0:
            raise ValueError(f"ahead/behind must be non-negative, got {self.ahead}/{self.behind}")
        # Accept any sequence but store a tuple so the snapshot stays immutable
        object.__setattr__(self, "files", tuple(self.files))


@dataclass(frozen=True)
class RepositoryMetadata:
    """Facts about the sync directory's repository.

    Each flag implies the one before it:
    has_remote_branch -> has_commits -> is_repository -> is_git_installed.
    """
    is_git_installed: bool = False
    is_repository: bool = False
    current_branch: Optional[str] = None
    has_commits: bool = False
    has_remote_branch: bool = False
    remotes: Tuple[Remote, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "remotes", tuple(self.remotes))
        if self.has_remote_branch and not self.has_commits:
            raise ValueError("has_remote_branch requires has_commits")
        if self.has_commits and not self.is_repository:
            raise ValueError("has_commits requires is_repository")
        if self.is_repository and not self.is_git_installed:
            raise ValueError("is_repository requires is_git_installed")

    def get_remote(self, name: str) -> Optional[Remote]:
        """Look up a remote by name."""
        for remote in self.remotes:
            if remote.name == name:
                return remote
        return None


@dataclass(frozen=True)
class LogEntry:
    """A single commit from the history."""
    hexsha: str
    message: str
    author_name: str
    author_email: str
    date: datetime

    @property
    def short_sha(self) -> str:
        return self.hexsha[:7]

    @property
    def summary(self) -> str:
        return self.message.splitlines()[0] if self.message else ""


@dataclass
class LogResult:
    """Commit history page."""
    entries: List[LogEntry] = field(default_factory=list)
    total: int = 0

    @property
    def latest(self) -> Optional[LogEntry]:
        return self.entries[0] if self.entries else None
