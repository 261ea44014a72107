"""Offline audit trail for lock events with Ed25519 signatures and hash chaining."""
from __future__ import annotations

import hashlib
import json
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Iterator

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from filelock import FileLock

GENESIS = "GENESIS"

_chain_lock = threading.Lock()


def audit_dir() -> Path:
    """Return the directory where audit artefacts are stored.

    Tests and power users can point the logger to a custom location via the
    ``DIARYLOCK_AUDIT_DIR`` environment variable. Otherwise records live next
    to the lock storage in the user's home directory.
    """

    override = os.environ.get("DIARYLOCK_AUDIT_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".diarylock" / "audit"


def _key_path(directory: Path) -> Path:
    return directory / "signing_key.pem"


def _chain_state_path(directory: Path) -> Path:
    return directory / "chain.state"


def _load_private_key(directory: Path) -> Ed25519PrivateKey:
    key_path = _key_path(directory)
    if key_path.exists():
        return serialization.load_pem_private_key(key_path.read_bytes(), password=None)
    private_key = Ed25519PrivateKey.generate()
    key_path.write_bytes(
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    os.chmod(key_path, 0o600)
    return private_key


def _load_prev_hash(directory: Path) -> str:
    try:
        return _chain_state_path(directory).read_text().strip()
    except FileNotFoundError:
        return GENESIS


def _canonical(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")


def record_event(event: str, *, details: Dict[str, Any] | None = None) -> Path:
    """Append a signed record for *event* and return its path."""

    directory = audit_dir()
    directory.mkdir(parents=True, exist_ok=True)
    # Reading chain.state and writing the next hash must not interleave,
    # neither across threads nor across processes sharing the directory.
    with _chain_lock, FileLock(str(directory / "chain.state.lock")):
        timestamp_ns = time.time_ns()
        payload = {
            "event": event,
            "details": details or {},
            "timestamp": timestamp_ns // 1_000_000_000,
            "prev_hash": _load_prev_hash(directory),
        }
        message = _canonical(payload)
        signature = _load_private_key(directory).sign(message)
        chain_hash = hashlib.sha3_512(message + signature).hexdigest()
        entry = {
            "payload": payload,
            "signature": signature.hex(),
            "chain_hash": chain_hash,
        }
        file_path = directory / f"audit_{timestamp_ns}_{uuid.uuid4().hex}.json"
        file_path.write_text(json.dumps(entry, ensure_ascii=False, indent=2))
        _chain_state_path(directory).write_text(chain_hash)
    return file_path


def verify_log(path: os.PathLike[str] | str) -> bool:
    """Check the signature and chain hash of one audit record.

    Verification never creates a signing key: without one, or with a
    malformed key or signature, the record is reported as invalid.
    """

    data = json.loads(Path(path).read_text())
    payload = _canonical(data["payload"])
    key_path = _key_path(Path(path).parent)
    if not key_path.exists():
        return False
    try:
        signature = bytes.fromhex(data.get("signature") or "")
        private_key = serialization.load_pem_private_key(key_path.read_bytes(), password=None)
        private_key.public_key().verify(signature, payload)
    except (InvalidSignature, ValueError, TypeError):
        return False
    expected_chain_hash = hashlib.sha3_512(payload + signature).hexdigest()
    return expected_chain_hash == data.get("chain_hash")


def iter_entries(limit: int | None = None) -> Iterator[tuple[Path, Dict[str, Any]]]:
    """Yield ``(path, payload)`` pairs, newest first."""

    directory = audit_dir()
    if not directory.is_dir():
        return
    paths = sorted(directory.glob("audit_*.json"), reverse=True)
    if limit is not None:
        paths = paths[:limit]
    for path in paths:
        yield path, json.loads(path.read_text())["payload"]


__all__ = ["audit_dir", "iter_entries", "record_event", "verify_log"]
