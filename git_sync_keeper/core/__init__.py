"""Core orchestration for git-sync-keeper."""

from .sync_keeper import SyncKeeper

__all__ = ["SyncKeeper"]
