"""Fixed-cadence poller driving the idle auto-lock check."""
from __future__ import annotations

import logging
import threading
from typing import Callable

from applock.policy import policy

_logger = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], None]], None]
CheckFn = Callable[[], object]


class IdlePoller:
    """Invoke *check_fn* every *interval* seconds until stopped.

    Polling instead of a single deadline timer lets the auto-lock delay change
    at runtime without rescheduling. *scheduler* receives each tick and can
    hand it to a UI event loop; by default the tick runs on the timer thread.
    """

    def __init__(
        self,
        check_fn: CheckFn,
        *,
        interval: float | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.check_fn = check_fn
        self.interval = policy.poll_interval if interval is None else interval
        self.scheduler = scheduler or (lambda fn: fn())
        self._stop_event = threading.Event()
        self._stop_event.set()
        self._timer: threading.Timer | None = None

    @property
    def running(self) -> bool:
        return not self._stop_event.is_set()

    def start(self) -> None:
        """Start polling; restarting an active poller resets its cadence."""

        self.stop()
        self._stop_event.clear()
        _logger.debug("Idle poller started with %.3fs interval", self.interval)
        self._schedule_next()

    def stop(self) -> None:
        """Stop polling and cancel any pending tick."""

        self._stop_event.set()
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def run_once(self) -> None:
        """Execute a single check immediately."""

        self.check_fn()

    def _schedule_next(self) -> None:
        if self._stop_event.is_set():
            return
        timer = threading.Timer(self.interval, self._tick)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self) -> None:
        if self._stop_event.is_set():
            return

        def _dispatch() -> None:
            if not self._stop_event.is_set():
                self.check_fn()

        try:
            self.scheduler(_dispatch)
        finally:
            self._schedule_next()


__all__ = ["IdlePoller"]
