"""Configuration handling for git-sync-keeper"""

import dataclasses
from dataclasses import dataclass
from typing import Any

from git_sync_keeper.constants import DEFAULT_SYNC_INTERVAL


def _coerce_bool(value: Any, name: str) -> bool:
    """Accept booleans and the "true"/"false" strings written by key-value storage."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass
class AutoSyncConfig:
    """Automatic synchronization settings with validation."""

    enabled: bool = False
    interval_seconds: int = DEFAULT_SYNC_INTERVAL
    hide_generated_files: bool = True

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_enabled()
        self._validate_interval()
        self._validate_hide_generated_files()

    def _validate_enabled(self):
        """Validate enabled is a boolean."""
        self.enabled = _coerce_bool(self.enabled, "enabled")

    def _validate_interval(self):
        """Validate interval_seconds is a positive integer."""
        value = self.interval_seconds
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                raise ValueError(f"interval_seconds must be an integer, got '{self.interval_seconds}'")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"interval_seconds must be an integer, got {self.interval_seconds!r}")
        if value <= 0:
            raise ValueError(f"interval_seconds must be positive, got {value}")
        self.interval_seconds = value

    def _validate_hide_generated_files(self):
        """Validate hide_generated_files is a boolean."""
        self.hide_generated_files = _coerce_bool(self.hide_generated_files, "hide_generated_files")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "enabled": self.enabled,
            "interval_seconds": self.interval_seconds,
            "hide_generated_files": self.hide_generated_files,
        }

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    def replace(self, **changes) -> "AutoSyncConfig":
        """Return a validated copy with the given fields changed."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "AutoSyncConfig":
        """Create AutoSyncConfig from dictionary."""
        known_fields = {"enabled", "interval_seconds", "hide_generated_files"}

        filtered = {k: v for k, v in config_dict.items() if k in known_fields and v is not None}
        return cls(**filtered)
