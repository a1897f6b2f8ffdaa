"""
In-process escalation scheduler.

Runs the escalation sweep on a fixed interval using a small dedicated
thread pool, so sweeps never share threads with request handling.

- Each run opens and closes its own database session
- Overlapping runs are skipped, not queued
- Runs that exceed the configured timeout are reported
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from grievance_tracker.config.settings import settings
from grievance_tracker.core.logging import get_struct_logger
from grievance_tracker.services.base import ServiceResult
from grievance_tracker.services.complaint.complaint_escalation_service import (
    ComplaintEscalationService,
    EscalationSweepReport,
)

logger = get_struct_logger(__name__)

SessionFactory = Callable[[], Session]


def _default_session_factory() -> Session:
    from grievance_tracker.db.session import SessionLocal

    return SessionLocal()


def run_sweep_once(
    session_factory: Optional[SessionFactory] = None,
    now: Optional[datetime] = None,
) -> ServiceResult[EscalationSweepReport]:
    """
    Run one escalation sweep in a fresh session.

    Args:
        session_factory: Callable returning a new Session
        now: Reference time, defaults to the current UTC time

    Returns:
        ServiceResult containing the sweep report
    """
    factory = session_factory or _default_session_factory
    db = factory()
    try:
        return ComplaintEscalationService(db).run_sweep(now=now)
    finally:
        db.close()


class EscalationScheduler:
    """
    Periodic runner for the escalation sweep.

    A timer thread wakes every ``interval_seconds`` and submits a sweep to
    the worker pool unless the previous sweep is still running.
    """

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        interval_seconds: Optional[int] = None,
        max_workers: Optional[int] = None,
        timeout_seconds: Optional[int] = None,
    ):
        self.session_factory = session_factory or _default_session_factory
        self.interval_seconds = interval_seconds or settings.ESCALATION_SWEEP_INTERVAL_SECONDS
        self.timeout_seconds = timeout_seconds or settings.ESCALATION_SWEEP_TIMEOUT_SECONDS
        self.max_workers = max_workers or settings.ESCALATION_WORKERS
        self._executor = self._new_executor()
        self._executor_closed = False
        self._run_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._timer: Optional[threading.Thread] = None

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="escalation")

    @property
    def is_running(self) -> bool:
        return self._timer is not None and self._timer.is_alive()

    def start(self) -> None:
        """
        Start the timer thread. Calling start twice is a no-op; starting
        after stop() brings up a fresh worker pool.
        """
        if self.is_running:
            return
        if self._executor_closed:
            self._executor = self._new_executor()
            self._executor_closed = False
        self._stop_event.clear()
        self._timer = threading.Thread(
            target=self._loop,
            name="escalation-timer",
            daemon=True,
        )
        self._timer.start()
        logger.info("escalation_scheduler_started", interval_seconds=self.interval_seconds)

    def stop(self, wait: bool = True) -> None:
        """Stop the timer and shut the worker pool down."""
        self._stop_event.set()
        if self._timer is not None:
            self._timer.join(timeout=self.interval_seconds if wait else 0)
            self._timer = None
        self._executor.shutdown(wait=wait)
        self._executor_closed = True
        logger.info("escalation_scheduler_stopped")

    def _loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.trigger()

    def trigger(self, now: Optional[datetime] = None) -> Optional[Future]:
        """
        Submit a sweep to the worker pool.

        Returns:
            The Future of the submitted sweep, or None if a sweep was
            already running
        """
        if not self._run_lock.acquire(blocking=False):
            logger.info("escalation_sweep_skipped", reason="previous sweep still running")
            return None
        try:
            return self._executor.submit(self._run_and_release, now)
        except RuntimeError:
            self._run_lock.release()
            logger.warning("escalation_sweep_not_submitted", reason="executor shut down")
            return None

    def _run_and_release(self, now: Optional[datetime]) -> Optional[EscalationSweepReport]:
        try:
            return self._run(now)
        finally:
            self._run_lock.release()

    def run_once(self, now: Optional[datetime] = None) -> Optional[EscalationSweepReport]:
        """
        Run a sweep on the calling thread.

        Returns:
            The sweep report, or None if a sweep was already running or failed
        """
        if not self._run_lock.acquire(blocking=False):
            logger.info("escalation_sweep_skipped", reason="previous sweep still running")
            return None
        return self._run_and_release(now)

    def _run(self, now: Optional[datetime]) -> Optional[EscalationSweepReport]:
        started = time.monotonic()
        result = run_sweep_once(self.session_factory, now=now)
        elapsed = time.monotonic() - started

        if elapsed > self.timeout_seconds:
            logger.warning(
                "escalation_sweep_slow",
                duration_seconds=round(elapsed, 3),
                timeout_seconds=self.timeout_seconds,
            )

        if not result.is_success:
            logger.error("escalation_sweep_failed", error=result.error.message)
            return None

        report = result.data
        logger.info(
            "escalation_sweep_finished",
            escalated_count=report.escalated_count,
            failed_count=report.failed_count,
            duration_seconds=round(elapsed, 3),
        )
        return report
