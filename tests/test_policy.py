import importlib
from pathlib import Path


def test_policy_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("DIARYLOCK_AUTO_LOCK_MS", "300000")
    monkeypatch.setenv("DIARYLOCK_PIN_LENGTH", "6")
    monkeypatch.setenv("DIARYLOCK_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("DIARYLOCK_HOME", str(tmp_path / "lock"))
    monkeypatch.setenv("DIARYLOCK_STORAGE_TIMEOUT", "2")

    policy_module = importlib.import_module("applock.policy")
    reloaded = importlib.reload(policy_module)

    try:
        policy = reloaded.policy
        assert policy.auto_lock_delay_ms == 300_000
        assert policy.pin_length == 6
        assert policy.poll_interval == 0.5
        assert policy.home == tmp_path / "lock"
        assert policy.storage_timeout == 2.0
    finally:
        for name in (
            "DIARYLOCK_AUTO_LOCK_MS",
            "DIARYLOCK_PIN_LENGTH",
            "DIARYLOCK_POLL_INTERVAL",
            "DIARYLOCK_HOME",
            "DIARYLOCK_STORAGE_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)
        importlib.reload(policy_module)


def test_policy_rejects_invalid_values(monkeypatch):
    monkeypatch.setenv("DIARYLOCK_AUTO_LOCK_MS", "-5")
    monkeypatch.setenv("DIARYLOCK_PIN_LENGTH", "0")
    monkeypatch.setenv("DIARYLOCK_POLL_INTERVAL", "soon")
    monkeypatch.delenv("DIARYLOCK_HOME", raising=False)

    policy_module = importlib.import_module("applock.policy")
    reloaded = importlib.reload(policy_module)

    try:
        policy = reloaded.policy
        assert policy.auto_lock_delay_ms == 600_000
        assert policy.pin_length == 4
        assert policy.poll_interval == 1.0
        assert policy.home == Path.home() / ".diarylock"
    finally:
        for name in ("DIARYLOCK_AUTO_LOCK_MS", "DIARYLOCK_PIN_LENGTH", "DIARYLOCK_POLL_INTERVAL"):
            monkeypatch.delenv(name, raising=False)
        importlib.reload(policy_module)
