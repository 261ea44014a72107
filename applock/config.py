"""Persisted lock configuration with self-healing normalisation."""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from applock.policy import policy

# Field name -> key used in the persisted JSON record.
FIELD_KEYS = {
    "auto_lock_delay_ms": "autoLockDelayMs",
    "require_pin_on_resume": "requirePinOnResume",
    "hide_content_in_multitask": "hideContentInMultitask",
    "pin_length": "pinLength",
}

LOCK_DELAY_OPTIONS: tuple[tuple[int, str], ...] = (
    (5 * 60 * 1000, "5 minutes"),
    (10 * 60 * 1000, "10 minutes"),
    (15 * 60 * 1000, "15 minutes"),
    (30 * 60 * 1000, "30 minutes"),
    (0, "disabled"),
)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


@dataclass(frozen=True)
class SecurityConfig:
    """Lock settings shared by the gate and the settings screen.

    ``auto_lock_delay_ms == 0`` disables the idle lock. ``hide_content_in_multitask``
    is advisory and only read by the UI.
    """

    auto_lock_delay_ms: int
    require_pin_on_resume: bool
    hide_content_in_multitask: bool
    pin_length: int

    @classmethod
    def defaults(cls) -> "SecurityConfig":
        return cls(
            auto_lock_delay_ms=policy.auto_lock_delay_ms,
            require_pin_on_resume=True,
            hide_content_in_multitask=True,
            pin_length=policy.pin_length,
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> "SecurityConfig":
        """Build a config from a stored record, using defaults for bad fields."""

        defaults = cls.defaults()
        if not isinstance(data, Mapping):
            return defaults

        delay = _as_int(data.get(FIELD_KEYS["auto_lock_delay_ms"]))
        if delay is None or delay < 0:
            delay = defaults.auto_lock_delay_ms

        pin_length = _as_int(data.get(FIELD_KEYS["pin_length"]))
        if pin_length is None or pin_length <= 0:
            pin_length = defaults.pin_length

        resume = data.get(FIELD_KEYS["require_pin_on_resume"])
        if not isinstance(resume, bool):
            resume = defaults.require_pin_on_resume

        hide = data.get(FIELD_KEYS["hide_content_in_multitask"])
        if not isinstance(hide, bool):
            hide = defaults.hide_content_in_multitask

        return cls(
            auto_lock_delay_ms=delay,
            require_pin_on_resume=resume,
            hide_content_in_multitask=hide,
            pin_length=pin_length,
        )

    def to_mapping(self) -> dict[str, Any]:
        return {key: getattr(self, name) for name, key in FIELD_KEYS.items()}

    def merged(self, **changes: Any) -> "SecurityConfig":
        """Return a copy with *changes* applied and invalid values healed.

        Unknown field names raise :class:`TypeError`.
        """

        updated = dataclasses.replace(self, **changes)
        return SecurityConfig.from_mapping(updated.to_mapping())


def describe_delay(delay_ms: int) -> str:
    """Return a human label for an auto-lock delay."""

    for value, label in LOCK_DELAY_OPTIONS:
        if value == delay_ms:
            return label
    if delay_ms <= 0:
        return "disabled"
    if delay_ms % 60_000 == 0:
        return f"{delay_ms // 60_000} min"
    if delay_ms % 1000 == 0:
        return f"{delay_ms // 1000} s"
    return f"{delay_ms} ms"


__all__ = [
    "FIELD_KEYS",
    "LOCK_DELAY_OPTIONS",
    "SecurityConfig",
    "describe_delay",
]
