"""Persisted auto-sync settings and change notifications."""
import hashlib
import json
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional, Union

from git_sync_keeper.config import AutoSyncConfig
from git_sync_keeper.constants import (
    APP_DIR_NAME,
    SETTING_AUTO_SYNC_ENABLED,
    SETTING_AUTO_SYNC_INTERVAL,
    SETTING_HIDE_GENERATED_FILES,
    SETTING_LAST_SYNC_TIME,
)
from git_sync_keeper.logging_config import get_logger

# Import fcntl for POSIX file locking (Unix/Linux/macOS)
try:
    import fcntl
    HAS_FCNTL = True
except ImportError:
    HAS_FCNTL = False

logger = get_logger(__name__)

ConfigListener = Callable[[AutoSyncConfig], None]


class ConfigChannel:
    """Broadcasts AutoSyncConfig changes to every subscriber.

    Components that were constructed independently share one channel instead
    of reading global state.
    """

    def __init__(self):
        self._listeners: List[ConfigListener] = []
        self._lock = Lock()

    def subscribe(self, listener: ConfigListener) -> Callable[[], None]:
        """Register a listener. Returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe():
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: ConfigListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, config: AutoSyncConfig) -> None:
        """Deliver config to all listeners. A failing listener does not stop the others."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(config)
            except Exception as e:
                logger.warning(f"Config listener {listener!r} failed: {e}")


class SettingsStore:
    """String-keyed settings for one sync directory, persisted as JSON."""

    def __init__(
        self,
        repo_path: Union[str, Path],
        settings_dir: Optional[Path] = None,
        channel: Optional[ConfigChannel] = None,
    ):
        """Initialize the store for a repository.

        Args:
            repo_path: Path to the sync directory
            settings_dir: Directory holding settings files (defaults to ~/.git-sync-keeper/settings)
            channel: Channel notified after every config write
        """
        self.repo_path = Path(repo_path).resolve()
        self.settings_dir = settings_dir or Path.home() / APP_DIR_NAME / "settings"
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.settings_dir / f"{self._get_repo_hash()}.json"
        self.channel = channel or ConfigChannel()
        self._write_lock = Lock()

    def _get_repo_hash(self) -> str:
        """Generate a unique hash for the repository path."""
        return hashlib.md5(str(self.repo_path).encode()).hexdigest()

    @contextmanager
    def _acquire_file_lock(self, file_handle, operation: str = "read"):
        """Acquire a shared (read) or exclusive (write) lock on the settings file."""
        if not HAS_FCNTL:
            logger.debug("File locking not available on this platform")
            yield
            return

        lock_type = fcntl.LOCK_EX if operation == "write" else fcntl.LOCK_SH
        fcntl.flock(file_handle.fileno(), lock_type)
        try:
            yield
        finally:
            fcntl.flock(file_handle.fileno(), fcntl.LOCK_UN)

    def _read_all(self) -> Dict[str, Any]:
        if not self.settings_file.exists():
            return {}

        try:
            with open(self.settings_file, "r") as f:
                with self._acquire_file_lock(f, operation="read"):
                    data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.settings_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning("Settings file is not a JSON object, ignoring it")
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        """Atomic write: write to a temp file, then rename."""
        temp_file = self.settings_file.with_suffix(".tmp")
        try:
            with open(temp_file, "w") as f:
                with self._acquire_file_lock(f, operation="write"):
                    json.dump(data, f, indent=2, sort_keys=True)
                    f.flush()
            temp_file.replace(self.settings_file)
        finally:
            if temp_file.exists():
                temp_file.unlink()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self._read_all().get(key)
        return default if value is None else str(value)

    def set(self, key: str, value: Optional[str]) -> None:
        """Store a value; None removes the key."""
        with self._write_lock:
            data = self._read_all()
            if value is None:
                data.pop(key, None)
            else:
                data[key] = str(value)
            self._write_all(data)

    def load_config(self) -> AutoSyncConfig:
        """Read AutoSyncConfig, falling back to defaults for missing or invalid values."""
        data = self._read_all()
        raw = {
            "enabled": data.get(SETTING_AUTO_SYNC_ENABLED),
            "interval_seconds": data.get(SETTING_AUTO_SYNC_INTERVAL),
            "hide_generated_files": data.get(SETTING_HIDE_GENERATED_FILES),
        }
        try:
            return AutoSyncConfig.from_dict(raw)
        except ValueError as e:
            logger.warning(f"Invalid stored auto-sync settings, using defaults: {e}")
            valid = {}
            for key, value in raw.items():
                try:
                    AutoSyncConfig.from_dict({key: value})
                    valid[key] = value
                except ValueError:
                    continue
            return AutoSyncConfig.from_dict(valid)

    def save_config(self, config: AutoSyncConfig) -> AutoSyncConfig:
        """Persist config and notify the channel."""
        with self._write_lock:
            data = self._read_all()
            data[SETTING_AUTO_SYNC_ENABLED] = "true" if config.enabled else "false"
            data[SETTING_AUTO_SYNC_INTERVAL] = str(config.interval_seconds)
            data[SETTING_HIDE_GENERATED_FILES] = "true" if config.hide_generated_files else "false"
            self._write_all(data)

        logger.debug(f"Saved auto-sync settings: {config.to_dict()}")
        self.channel.publish(config)
        return config

    def update(self, **changes) -> AutoSyncConfig:
        """Change some config fields, persist, and notify."""
        changes = {k: v for k, v in changes.items() if v is not None}
        return self.save_config(self.load_config().replace(**changes))

    def load_last_sync_time(self) -> Optional[datetime]:
        value = self.get(SETTING_LAST_SYNC_TIME)
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            logger.warning(f"Ignoring invalid last sync time: {value}")
            return None

    def save_last_sync_time(self, when: datetime) -> None:
        self.set(SETTING_LAST_SYNC_TIME, when.isoformat())


class MemorySettingsStore(SettingsStore):
    """SettingsStore kept in memory, for hosts that persist settings themselves."""

    def __init__(self, channel: Optional[ConfigChannel] = None, initial: Optional[Dict[str, str]] = None):
        self.channel = channel or ConfigChannel()
        self._data: Dict[str, Any] = dict(initial or {})
        self._write_lock = Lock()

    def _read_all(self) -> Dict[str, Any]:
        return dict(self._data)

    def _write_all(self, data: Dict[str, Any]) -> None:
        self._data = dict(data)
