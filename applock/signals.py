"""In-process hub for environment signals the lock reacts to."""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List

_logger = logging.getLogger(__name__)

Handler = Callable[..., None]
Unsubscribe = Callable[[], None]

VISIBILITY_EVENT = "visibilitychange"
ACTIVITY_EVENTS = ("mousedown", "mousemove", "keypress", "scroll", "touchstart", "click")


class SignalHub:
    """Fan out named signals to subscribed handlers.

    The UI layer emits ``visibilitychange`` with a single ``visible`` flag and
    any of :data:`ACTIVITY_EVENTS` without arguments.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def subscribe(self, name: str, handler: Handler) -> Unsubscribe:
        """Register *handler* for *name* and return a callable that removes it."""

        with self._lock:
            self._handlers[name].append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(name)
                if handlers and handler in handlers:
                    handlers.remove(handler)
                    if not handlers:
                        del self._handlers[name]

        return _unsubscribe

    def emit(self, name: str, *args: Any) -> int:
        """Deliver *name* to every handler and return how many were called."""

        with self._lock:
            handlers = list(self._handlers.get(name, ()))
        for handler in handlers:
            handler(*args)
        if not handlers:
            _logger.debug("Signal %s had no subscribers", name)
        return len(handlers)

    def subscriber_count(self, name: str | None = None) -> int:
        with self._lock:
            if name is not None:
                return len(self._handlers.get(name, ()))
            return sum(len(handlers) for handlers in self._handlers.values())


__all__ = ["ACTIVITY_EVENTS", "VISIBILITY_EVENT", "SignalHub"]
