"""Test configuration helpers."""
from __future__ import annotations

import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    root = Path(__file__).resolve().parent.parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


_ensure_repo_root_on_path()

import pytest

from applock.storage import MemoryStore, SecurityStorage


class FakeClock:
    """Stand-in for ``time.monotonic`` that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class EventRecorder:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict]] = []

    def __call__(self, event, *, details=None):
        self.events.append((event, details or {}))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def clock(monkeypatch):
    import applock.gate as gate_module

    fake = FakeClock()
    monkeypatch.setattr(gate_module.time, "monotonic", fake)
    return fake


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def events():
    return EventRecorder()


@pytest.fixture
def make_gate(store, events, clock):
    from applock.gate import SecurityGate

    created = []

    def _make(**kwargs):
        kwargs.setdefault("event_sink", events)
        gate = SecurityGate(SecurityStorage(store), **kwargs)
        created.append(gate)
        return gate

    yield _make
    for gate in created:
        gate.dispose()
