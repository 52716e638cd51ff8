"""Version information for git-sync-keeper."""

__version__ = "0.1.0"
