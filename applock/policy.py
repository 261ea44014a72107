"""Centralised tunables for the application lock.

The policy aggregates the values that the gate, the storage layer and the CLI
share so that they have a single source of truth. Values can be overridden by
environment variables which keeps packaged builds configurable without code
changes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_AUTO_LOCK_MS = 10 * 60 * 1000
DEFAULT_PIN_LENGTH = 4


def _load_float(name: str, default: float, *, minimum: float | None = None) -> float:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


def _load_int(name: str, default: int, *, minimum: int | None = None) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    if minimum is not None and parsed < minimum:
        return default
    return parsed


def _load_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    if not value:
        return default
    return Path(value).expanduser()


@dataclass(frozen=True)
class LockPolicy:
    """Holds runtime tunables for the application lock."""

    auto_lock_delay_ms: int = DEFAULT_AUTO_LOCK_MS
    pin_length: int = DEFAULT_PIN_LENGTH
    poll_interval: float = 1.0
    home: Path = Path.home() / ".diarylock"
    storage_timeout: float = 5.0


def load_policy() -> LockPolicy:
    """Load the lock policy considering environment overrides."""

    return LockPolicy(
        auto_lock_delay_ms=_load_int("DIARYLOCK_AUTO_LOCK_MS", DEFAULT_AUTO_LOCK_MS, minimum=0),
        pin_length=_load_int("DIARYLOCK_PIN_LENGTH", DEFAULT_PIN_LENGTH, minimum=1),
        poll_interval=_load_float("DIARYLOCK_POLL_INTERVAL", 1.0, minimum=0.001),
        home=_load_path("DIARYLOCK_HOME", Path.home() / ".diarylock"),
        storage_timeout=_load_float("DIARYLOCK_STORAGE_TIMEOUT", 5.0, minimum=0.0),
    )


policy = load_policy()


__all__ = ["DEFAULT_AUTO_LOCK_MS", "DEFAULT_PIN_LENGTH", "LockPolicy", "policy", "load_policy"]
