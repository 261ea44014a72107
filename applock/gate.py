"""PIN gate that locks the diary on demand, on resume and after inactivity."""
from __future__ import annotations

import logging
import math
import secrets
import threading
import time
from typing import Any, Callable, List, Optional

from audit.logger import record_event
from applock.config import SecurityConfig
from applock.idle import IdlePoller, Scheduler
from applock.signals import ACTIVITY_EVENTS, VISIBILITY_EVENT, SignalHub, Unsubscribe
from applock.storage import SecurityStorage
from applock.validation import validate_pin

_logger = logging.getLogger(__name__)

EventSink = Callable[..., Any]


def format_countdown(seconds: int) -> str:
    """Render a remaining time as ``m:ss`` or ``Ns``."""

    minutes, rest = divmod(max(0, int(seconds)), 60)
    if minutes > 0:
        return f"{minutes}:{rest:02d}"
    return f"{rest}s"


class SecurityGate:
    """Own the PIN, the lock state and the activity clock for one session.

    The gate starts unlocked and only locks in response to :meth:`lock_app`,
    a ``visibilitychange`` to visible, or an idle check past the configured
    delay. Wrong PINs are reported as ``False``, never raised.
    """

    def __init__(
        self,
        storage: SecurityStorage,
        *,
        signals: SignalHub | None = None,
        poll_interval: float | None = None,
        scheduler: Scheduler | None = None,
        event_sink: EventSink | None = record_event,
    ) -> None:
        self.storage = storage
        self.signals = signals
        self._event_sink = event_sink
        self._lock = threading.RLock()
        self._config = storage.load_config()
        self._pin: Optional[str] = storage.load_pin()
        self._locked = False
        self._visible = True
        self._last_activity = time.monotonic()
        self.poller = IdlePoller(self.check_idle, interval=poll_interval, scheduler=scheduler)
        self._unsubscribers: List[Unsubscribe] = []
        self._initialized = False

    # ------------------------------------------------------------------ lifecycle

    def initialize(self) -> None:
        """Subscribe to environment signals and start the idle poller."""

        with self._lock:
            if self._initialized:
                return
            self._initialized = True
            self._last_activity = time.monotonic()
        if self.signals is not None:
            self._unsubscribers.append(
                self.signals.subscribe(VISIBILITY_EVENT, self.handle_visibility_change)
            )
            for name in ACTIVITY_EVENTS:
                self._unsubscribers.append(self.signals.subscribe(name, self._on_activity))
        self.poller.start()
        _logger.debug("Security gate initialised (pin configured: %s)", self._pin is not None)

    def dispose(self) -> None:
        """Stop polling and release every signal subscription."""

        self.poller.stop()
        while self._unsubscribers:
            self._unsubscribers.pop()()
        with self._lock:
            self._initialized = False
        _logger.debug("Security gate disposed")

    def __enter__(self) -> "SecurityGate":
        self.initialize()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.dispose()

    # ---------------------------------------------------------------------- state

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def is_pin_configured(self) -> bool:
        return self._pin is not None

    @property
    def is_visible(self) -> bool:
        return self._visible

    @property
    def config(self) -> SecurityConfig:
        return self._config

    @property
    def pin_length(self) -> int:
        return self._config.pin_length

    @property
    def masked_pin(self) -> str:
        return "*" * self.pin_length if self._pin is not None else ""

    # ------------------------------------------------------------------- activity

    def record_activity(self) -> None:
        """Reset the idle clock. Called for every interaction signal."""

        self._last_activity = time.monotonic()

    def _on_activity(self, *_args: object) -> None:
        self.record_activity()

    def _idle_ms(self) -> float:
        return (time.monotonic() - self._last_activity) * 1000.0

    def handle_visibility_change(self, visible: bool) -> None:
        with self._lock:
            self._visible = bool(visible)
            should_lock = (
                self._visible
                and self._config.require_pin_on_resume
                and self._pin is not None
            )
            if should_lock:
                self._locked = True
        if should_lock:
            self._audit("applock.locked", reason="resume")

    def check_idle(self) -> bool:
        """Lock if the idle time exceeds the configured delay. Returns ``True`` on lock."""

        with self._lock:
            if self._locked or self._pin is None:
                return False
            delay = self._config.auto_lock_delay_ms
            if delay <= 0:
                return False
            idle_ms = self._idle_ms()
            if idle_ms <= delay:
                return False
            self._locked = True
        _logger.info("Auto-lock after %.0f ms of inactivity", idle_ms)
        self._audit("applock.locked", reason="idle", idle_ms=int(idle_ms))
        return True

    def get_time_until_lock(self) -> Optional[int]:
        """Whole seconds until auto-lock, ``0`` if due, ``None`` without a PIN."""

        with self._lock:
            if self._pin is None:
                return None
            remaining = self._config.auto_lock_delay_ms - self._idle_ms()
        if remaining <= 0:
            return 0
        return math.ceil(remaining / 1000)

    # ------------------------------------------------------------------------ pin

    def verify_pin(self, candidate: str) -> bool:
        """Compare *candidate* with the stored PIN without touching lock state."""

        pin = self._pin
        if pin is None or not isinstance(candidate, str):
            return False
        return secrets.compare_digest(candidate.encode("utf-8"), pin.encode("utf-8"))

    def setup_pin(self, pin: str) -> bool:
        """Store a first PIN. An existing PIN must go through :meth:`change_pin`."""

        with self._lock:
            if self._pin is not None:
                _logger.warning("Refusing to overwrite an existing PIN via setup")
                return False
            if validate_pin(pin, length=self.pin_length):
                return False
            self.storage.save_pin(pin)
            self._pin = pin
        self._audit("applock.pin_set")
        return True

    def unlock_app(self, pin: str) -> bool:
        with self._lock:
            accepted = self.verify_pin(pin)
            if accepted:
                self._locked = False
                self.record_activity()
        self._audit("applock.unlocked" if accepted else "applock.unlock_failed")
        return accepted

    def lock_app(self) -> None:
        with self._lock:
            if self._pin is None:
                return
            self._locked = True
        self._audit("applock.locked", reason="manual")

    def change_pin(self, current: str, new: str) -> bool:
        with self._lock:
            changed = self.verify_pin(current) and not validate_pin(new, length=self.pin_length)
            if changed:
                self.storage.save_pin(new)
                self._pin = new
        self._audit("applock.pin_changed" if changed else "applock.pin_change_failed")
        return changed

    def disable_pin(self, current: str) -> bool:
        with self._lock:
            disabled = self.verify_pin(current)
            if disabled:
                self._clear_pin()
        self._audit("applock.pin_disabled" if disabled else "applock.pin_disable_failed")
        return disabled

    def reset_pin(self) -> None:
        """Forgotten-PIN escape hatch: drop the PIN without verification."""

        with self._lock:
            self._clear_pin()
        self._audit("applock.pin_reset")

    def emergency_reset(self) -> None:
        """Drop the PIN and restore the default configuration."""

        with self._lock:
            self._clear_pin()
            defaults = SecurityConfig.defaults()
            self.storage.save_config(defaults)
            self._config = defaults
        self._audit("applock.emergency_reset")

    def _clear_pin(self) -> None:
        self.storage.clear_pin()
        self._pin = None
        self._locked = False
        self.record_activity()

    # --------------------------------------------------------------------- config

    def update_config(self, **changes: Any) -> None:
        """Merge *changes* into the config and persist it.

        Takes effect on the next idle poll. ``pin_length`` is fixed for the
        session and is ignored here.
        """

        if "pin_length" in changes:
            _logger.warning("pin_length cannot change during a session; ignoring")
            changes.pop("pin_length")
        with self._lock:
            updated = self._config.merged(**changes)
            self.storage.save_config(updated)
            self._config = updated
        self._audit("applock.config_updated", fields=sorted(changes))

    # ---------------------------------------------------------------------- audit

    def _audit(self, event: str, **details: Any) -> None:
        if self._event_sink is None:
            return
        try:
            self._event_sink(event, details=details)
        except (OSError, ValueError, TypeError) as exc:
            _logger.warning("Could not record audit event %s: %s", event, exc)


__all__ = ["SecurityGate", "format_countdown"]
