"""Durable key-value storage for the lock configuration and PIN."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from filelock import FileLock, Timeout

from applock.config import SecurityConfig
from applock.policy import policy

_logger = logging.getLogger(__name__)

APP_PIN_KEY = "app_pin"
SECURITY_CONFIG_KEY = "security_config"


class StorageError(RuntimeError):
    """Raised by a store when the backing medium cannot be used."""


class KeyValueStore:
    """Minimal string key-value contract shared by all stores."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store every key in one JSON document guarded by a sibling lock file.

    Writes go through a temporary file and :func:`os.replace`, so readers see
    either the previous document or the new one.
    """

    def __init__(self, path: os.PathLike[str] | str, *, timeout: float | None = None) -> None:
        self.path = Path(path).expanduser()
        self.timeout = policy.storage_timeout if timeout is None else timeout
        self._lock = FileLock(str(self.path) + ".lock", timeout=self.timeout)

    def _read(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            _logger.warning("Ignoring corrupt storage document %s", self.path)
            return {}
        if not isinstance(data, dict):
            _logger.warning("Ignoring storage document %s with unexpected layout", self.path)
            return {}
        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with self._lock:
                return self._read().get(key)
        except (OSError, Timeout) as exc:
            raise StorageError(f"cannot read {self.path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock:
                data = self._read()
                data[key] = value
                self._write(data)
        except (OSError, Timeout) as exc:
            raise StorageError(f"cannot write {self.path}: {exc}") from exc

    def delete(self, key: str) -> None:
        if not self.path.exists():
            return
        try:
            with self._lock:
                data = self._read()
                if key not in data:
                    return
                del data[key]
                self._write(data)
        except FileNotFoundError:
            return
        except (OSError, Timeout) as exc:
            raise StorageError(f"cannot write {self.path}: {exc}") from exc


class SecurityStorage:
    """Load and save the lock records without ever raising to the caller.

    A failed read behaves like a missing record and a failed write is logged;
    the gate keeps working from its in-memory state either way.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except StorageError as exc:
            _logger.warning("Storage read failed for %s: %s", key, exc)
            return None

    def _set(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except StorageError as exc:
            _logger.warning("Storage write failed for %s: %s", key, exc)

    def _delete(self, key: str) -> None:
        try:
            self.store.delete(key)
        except StorageError as exc:
            _logger.warning("Storage delete failed for %s: %s", key, exc)

    def load_config(self) -> SecurityConfig:
        raw = self._get(SECURITY_CONFIG_KEY)
        if raw is None:
            return SecurityConfig.defaults()
        try:
            data = json.loads(raw)
        except ValueError:
            _logger.warning("Stored security config is not valid JSON, using defaults")
            data = None
        config = SecurityConfig.from_mapping(data)
        if data != config.to_mapping():
            _logger.info("Healed stored security config")
            self.save_config(config)
        return config

    def save_config(self, config: SecurityConfig) -> None:
        self._set(SECURITY_CONFIG_KEY, json.dumps(config.to_mapping()))

    def clear_config(self) -> None:
        self._delete(SECURITY_CONFIG_KEY)

    def load_pin(self) -> Optional[str]:
        return self._get(APP_PIN_KEY) or None

    def save_pin(self, pin: str) -> None:
        self._set(APP_PIN_KEY, pin)

    def clear_pin(self) -> None:
        self._delete(APP_PIN_KEY)


__all__ = [
    "APP_PIN_KEY",
    "SECURITY_CONFIG_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "SecurityStorage",
    "StorageError",
]
