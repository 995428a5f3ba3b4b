"""
Recurring trigger for sync runs.

Runs the orchestrator on a background thread every `interval_hours`, and
lets the API or CLI start a run on demand. Only one run may be in progress
at a time; a running sync can be cancelled, which also stops any yt-dlp
child it has spawned.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tubesync.sync.errors import SyncAlreadyRunning, SyncCancelled, TubeSyncError
from tubesync.sync.models import SyncConfig, SyncStats
from tubesync.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

ConfigProvider = Callable[[], Optional[SyncConfig]]


@dataclass
class RunStatus:
    """Snapshot of the scheduler state."""

    running: bool = False
    progress: float = 0.0
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_stats: Optional[SyncStats] = None
    last_error: Optional[str] = None
    next_run_at: Optional[datetime] = None


class SyncScheduler:
    """
    Interval scheduler around a SyncOrchestrator.

    Usage:
        scheduler = SyncScheduler(lambda: get_settings().to_sync_config())
        scheduler.start()          # hourly background runs
        scheduler.trigger()        # run now, in the background
        scheduler.cancel()         # stop the current run
        scheduler.stop()
    """

    def __init__(
        self,
        config_provider: ConfigProvider,
        interval_hours: float = 1.0,
        orchestrator: Optional[SyncOrchestrator] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            config_provider: Called at the start of each run for a fresh config snapshot
            interval_hours: Time between scheduled runs
            orchestrator: SyncOrchestrator instance (creates one if not provided)
        """
        if interval_hours <= 0:
            raise ValueError("interval_hours must be positive")

        self.config_provider = config_provider
        self.interval = timedelta(hours=interval_hours)
        self.orchestrator = orchestrator or SyncOrchestrator()

        self._run_lock = threading.Lock()
        self._status_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._cancel_event = threading.Event()
        self._status = RunStatus()
        self._loop_thread: Optional[threading.Thread] = None
        self._run_thread: Optional[threading.Thread] = None

    @property
    def status(self) -> RunStatus:
        with self._status_lock:
            return replace(self._status)

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def start(self, run_immediately: bool = False) -> None:
        """Start the background loop."""
        if self._loop_thread is not None and self._loop_thread.is_alive():
            return

        self._stop_event.clear()
        self._loop_thread = threading.Thread(
            target=self._loop, args=(run_immediately,), name="tubesync-scheduler", daemon=True
        )
        self._loop_thread.start()
        logger.info(f"Scheduler started, interval {self.interval}")

    def stop(self, timeout: Optional[float] = 30.0) -> None:
        """Stop the loop, cancelling any run in progress, and wait for it."""
        self._stop_event.set()
        self.cancel()
        for thread in (self._loop_thread, self._run_thread):
            if thread is not None and thread.is_alive():
                thread.join(timeout=timeout)
        logger.info("Scheduler stopped")

    def cancel(self) -> bool:
        """Request cancellation of the current run. Returns True if one was running."""
        if not self.is_running:
            return False
        logger.warning("Cancelling sync run")
        self._cancel_event.set()
        return True

    def run_once(self) -> SyncStats:
        """
        Run a sync synchronously on the calling thread.

        Raises:
            SyncAlreadyRunning: another run is in progress
        """
        self._begin()
        return self._execute()

    def trigger(self) -> None:
        """
        Start a sync on a background thread and return immediately.

        Raises:
            SyncAlreadyRunning: another run is in progress
        """
        self._begin()
        self._run_thread = threading.Thread(
            target=self._execute_logged, name="tubesync-run", daemon=True
        )
        self._run_thread.start()

    def _loop(self, run_immediately: bool) -> None:
        if run_immediately:
            self._run_scheduled()

        while True:
            with self._status_lock:
                self._status.next_run_at = datetime.now(timezone.utc) + self.interval
            if self._stop_event.wait(self.interval.total_seconds()):
                break
            self._run_scheduled()

    def _run_scheduled(self) -> None:
        try:
            self._begin()
        except SyncAlreadyRunning:
            logger.info("Skipping scheduled sync, a run is already in progress")
            return
        self._execute_logged()

    def _begin(self) -> None:
        """Claim the run slot and reset per-run state."""
        if not self._run_lock.acquire(blocking=False):
            raise SyncAlreadyRunning("a sync run is already in progress")

        self._cancel_event = threading.Event()
        with self._status_lock:
            self._status.running = True
            self._status.progress = 0.0
            self._status.last_started_at = datetime.now(timezone.utc)
            self._status.last_error = None

    def _on_progress(self, percent: float) -> None:
        with self._status_lock:
            self._status.progress = percent
        logger.info(f"Sync progress: {percent:.1f}%")

    def _execute(self) -> SyncStats:
        """Run the orchestrator; the run slot must already be claimed."""
        stats = None
        try:
            config = self.config_provider()
            stats = self.orchestrator.run(
                config, progress=self._on_progress, cancel_event=self._cancel_event
            )
            return stats
        except Exception as e:
            with self._status_lock:
                self._status.last_error = str(e)
            raise
        finally:
            with self._status_lock:
                self._status.running = False
                self._status.last_finished_at = datetime.now(timezone.utc)
                if stats is not None:
                    self._status.last_stats = stats
            self._run_lock.release()

    def _execute_logged(self) -> None:
        """Run from a background thread, where exceptions have nowhere to go."""
        try:
            self._execute()
        except SyncCancelled:
            logger.warning("Sync run cancelled")
        except TubeSyncError as e:
            logger.error(f"Sync run aborted: {e}")
        except Exception:
            logger.exception("Sync run failed")
