"""Service for managing the sync directory's remote"""

from typing import List, Optional

from git_sync_keeper.constants import DEFAULT_REMOTE
from git_sync_keeper.exceptions import InvalidUrlError, RemoteNotFoundError
from git_sync_keeper.logging_config import get_logger
from git_sync_keeper.models.repository import Remote
from git_sync_keeper.models.sync import ConnectionTestResult, RemoteUpdateResult

logger = get_logger(__name__)


def _validate_url(url: Optional[str]) -> str:
    if url is None or not url.strip():
        raise InvalidUrlError(url or "")
    return url.strip()


class RemoteService:
    """Add, update, remove and check named remotes.

    Only one remote ("origin") is used for publishing; adding a remote whose
    name already exists updates its URL instead of creating a duplicate.
    """

    def __init__(self, git_ops):
        """Initialize the service.

        Args:
            git_ops: GitOperations (or compatible) that runs the git commands
        """
        self.git_ops = git_ops

    def list_remotes(self) -> List[Remote]:
        return self.git_ops.list_remotes()

    def get_remote(self, name: str = DEFAULT_REMOTE) -> Optional[Remote]:
        """Look up a remote by name, None when absent."""
        for remote in self.git_ops.list_remotes():
            if remote.name == name:
                return remote
        return None

    def _require_remote(self, name: str) -> Remote:
        remote = self.get_remote(name)
        if remote is None:
            raise RemoteNotFoundError(name)
        return remote

    def add_or_update_remote(self, name: str, url: str) -> RemoteUpdateResult:
        """Add the remote, or set its URL if one with this name exists."""
        url = _validate_url(url)

        if self.get_remote(name) is not None:
            logger.info(f"Remote '{name}' already exists, updating URL")
            self.git_ops.set_remote_url(name, url)
            return RemoteUpdateResult(name=name, url=url, was_update=True)

        self.git_ops.add_remote(name, url)
        return RemoteUpdateResult(name=name, url=url, was_update=False)

    def remove_remote(self, name: str) -> None:
        self._require_remote(name)
        self.git_ops.remove_remote(name)

    def set_remote_url(self, name: str, url: str) -> None:
        self._require_remote(name)
        self.git_ops.set_remote_url(name, _validate_url(url))

    def test_connection(self, name: str = DEFAULT_REMOTE) -> ConnectionTestResult:
        """Check that the remote is reachable. Always returns a result, never raises."""
        try:
            if self.get_remote(name) is None:
                return ConnectionTestResult(success=False, message=f"Remote '{name}' is not configured.")
            return self.git_ops.test_connection(name)
        except Exception as e:
            logger.debug(f"Connection test for '{name}' failed: {e}")
            return ConnectionTestResult(success=False, message=f"Connection failed: {getattr(e, 'message', e)}")
