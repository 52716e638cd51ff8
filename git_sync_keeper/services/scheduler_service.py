"""Periodic automatic synchronization"""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from git_sync_keeper.config import AutoSyncConfig
from git_sync_keeper.exceptions import GitSyncKeeperError, OperationInProgressError
from git_sync_keeper.logging_config import get_logger
from git_sync_keeper.models.sync import SchedulerStatus, SyncOutcome, SyncRunResult, WorkflowState

logger = get_logger(__name__)

NOT_READY_MESSAGE = "Not ready to sync: create a commit and publish the branch first"


class AutoSyncScheduler:
    """Owns the auto-sync timer and the last-run bookkeeping.

    The timer is only armed between start() and stop(), and only while
    enabled. Each firing runs tick() and re-arms for the next interval, so
    an interval change takes effect on the next cycle without ever leaving
    two timers pending.
    """

    def __init__(
        self,
        workflow,
        status_service,
        settings_store,
        clock: Optional[Callable[[], datetime]] = None,
        on_sync_completed: Optional[Callable[[SyncOutcome], None]] = None,
        timer_factory=threading.Timer,
    ):
        """Initialize the scheduler.

        Args:
            workflow: WorkflowService running the combined sync
            status_service: StatusService used to decide whether a tick is ready to run
            settings_store: SettingsStore supplying the config and persisting the last sync time
            clock: Returns the current time (defaults to UTC now)
            on_sync_completed: Called with the SyncOutcome after each successful run
            timer_factory: Callable creating the timer, threading.Timer by default
        """
        self.workflow = workflow
        self.status_service = status_service
        self.settings_store = settings_store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.on_sync_completed = on_sync_completed
        self._timer_factory = timer_factory

        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None
        self._running = False
        config = settings_store.load_config()
        self.enabled = config.enabled
        self.interval_seconds = config.interval_seconds
        self._result = SyncRunResult(last_sync_time=settings_store.load_last_sync_time())
        self._unsubscribe = settings_store.channel.subscribe(self.apply_config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Arm the timer if enabled, resubscribing after a stop()."""
        with self._lock:
            if self._running:
                return
            self._running = True
            if self._unsubscribe is None:
                self._unsubscribe = self.settings_store.channel.subscribe(self.apply_config)
            logger.debug(f"Scheduler started (enabled={self.enabled}, interval={self.interval_seconds}s)")
            self._rearm()

    def stop(self) -> None:
        """Disarm the timer and stop listening for config changes.

        A sync already in flight runs to completion.
        """
        with self._lock:
            self._running = False
            self._disarm()
            if self._unsubscribe:
                self._unsubscribe()
                self._unsubscribe = None
            logger.debug("Scheduler stopped")

    @property
    def is_armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def _disarm(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _rearm(self) -> None:
        """Replace any pending timer with one firing after the current interval."""
        with self._lock:
            self._disarm()
            if not (self._running and self.enabled):
                return
            timer = self._timer_factory(self.interval_seconds, self._on_timer)
            timer.daemon = True
            timer.name = "auto-sync"
            self._timer = timer
            timer.start()
            logger.debug(f"Auto-sync armed for {self.interval_seconds}s")

    def _on_timer(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                return  # superseded by a re-arm
            self._timer = None
        try:
            self.tick()
        finally:
            self._rearm()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            changed = enabled != self.enabled
            self.enabled = enabled
            if changed:
                logger.info(f"Auto-sync {'enabled' if enabled else 'disabled'}")
                self._rearm()

    def set_interval(self, interval_seconds: int) -> None:
        """Change the interval; a pending timer is replaced, never duplicated."""
        if isinstance(interval_seconds, bool) or not isinstance(interval_seconds, int) or interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be a positive integer, got {interval_seconds!r}")
        with self._lock:
            changed = interval_seconds != self.interval_seconds
            self.interval_seconds = interval_seconds
            if changed:
                logger.info(f"Auto-sync interval set to {interval_seconds}s")
                self._rearm()

    def apply_config(self, config: AutoSyncConfig) -> None:
        """Config-channel callback. The pending countdown survives unrelated changes."""
        with self._lock:
            changed = (config.enabled, config.interval_seconds) != (self.enabled, self.interval_seconds)
            self.interval_seconds = config.interval_seconds
            self.enabled = config.enabled
            if changed:
                self._rearm()

    # ------------------------------------------------------------------
    # Running syncs
    # ------------------------------------------------------------------

    @property
    def is_syncing(self) -> bool:
        """True while a combined sync holds the operation guard."""
        return self.workflow.state == WorkflowState.SYNCING

    def status(self) -> SchedulerStatus:
        with self._lock:
            return SchedulerStatus(
                enabled=self.enabled,
                interval_seconds=self.interval_seconds,
                is_syncing=self.is_syncing,
                is_armed=self._timer is not None,
                last_sync_time=self._result.last_sync_time,
                last_error=self._result.last_error,
            )

    def _is_ready(self) -> bool:
        meta = self.status_service.refresh_metadata()
        return meta.has_commits and meta.has_remote_branch

    def _run(self) -> SyncOutcome:
        try:
            outcome = self.workflow.sync()
        except OperationInProgressError:
            raise
        except GitSyncKeeperError as e:
            self._result.last_error = e.message
            raise

        now = self.clock()
        self._result.last_sync_time = now
        self._result.last_error = None
        self.settings_store.save_last_sync_time(now)

        if self.on_sync_completed:
            self.on_sync_completed(outcome)
        return outcome

    def tick(self) -> Optional[SyncOutcome]:
        """Run one scheduled sync.

        Skips silently when a sync is in flight or the repository has no
        commits or no remote branch yet. Failures are recorded in the status,
        never raised.
        """
        if self.workflow.guard.is_busy:
            logger.debug("Skipping auto-sync tick: operation in progress")
            return None
        if not self._is_ready():
            logger.debug("Skipping auto-sync tick: repository not ready")
            return None

        try:
            return self._run()
        except OperationInProgressError:
            logger.debug("Skipping auto-sync tick: operation started concurrently")
        except GitSyncKeeperError as e:
            logger.warning(f"Auto-sync failed: {e.message}")
        return None

    def sync_now(self) -> SyncOutcome:
        """Run a sync immediately. Unlike tick(), failures are raised."""
        if self.workflow.guard.is_busy:
            raise OperationInProgressError("sync", self.workflow.state.value)
        if not self._is_ready():
            return SyncOutcome(committed=False, pushed=False, pulled_changes=False, message=NOT_READY_MESSAGE)
        return self._run()
