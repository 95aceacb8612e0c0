from __future__ import annotations

import sys
import types
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from construcost_dashboard.persistent_store import JsonKeyValueStore
from construcost_dashboard.repository import BudgetRepository, SettingsRepository


def make_upload(name: str, content: bytes, mime: str = '') -> types.SimpleNamespace:
    """Stand-in for a Streamlit ``UploadedFile``."""
    return types.SimpleNamespace(name=name, type=mime, getvalue=lambda: content)


@pytest.fixture
def store(tmp_path):
    return JsonKeyValueStore(tmp_path / 'store')


@pytest.fixture
def repository(store):
    return BudgetRepository(store)


@pytest.fixture
def empty_repository(store):
    return BudgetRepository(store, seed=[])


@pytest.fixture
def settings_repository(store):
    return SettingsRepository(store)
