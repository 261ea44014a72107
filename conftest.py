# SPDX-FileCopyrightText: 2026 diarylock contributors
# SPDX-License-Identifier: MIT
#
# conftest.py: окружение для тестов:
#   • корень репозитория в sys.path (пакеты applock/ и audit/)
#   • аудит и хранилище пишутся только во временные каталоги

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ───────────────────────────── 1. PYTHONPATH ──────────────────────────────────
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


# ───────────────────────────── 2. изоляция каталогов ─────────────────────────
@pytest.fixture(autouse=True)
def _isolate_user_dirs(monkeypatch, tmp_path):
    """Никаких записей в ~/.diarylock во время тестов."""
    monkeypatch.setenv("DIARYLOCK_AUDIT_DIR", str(tmp_path / "audit"))
    monkeypatch.setenv("DIARYLOCK_HOME", str(tmp_path / "home"))
    yield
