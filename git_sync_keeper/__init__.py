"""
git-sync-keeper - Keep a working directory synchronized with a git remote
"""

from .__version__ import __version__
from .config import AutoSyncConfig
from .core import SyncKeeper
from .models.sync import SyncState

__all__ = ["SyncKeeper", "AutoSyncConfig", "SyncState", "__version__"]
