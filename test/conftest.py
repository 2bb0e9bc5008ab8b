import uuid
from datetime import datetime, timezone

import pytest

from fakes import FakeProvider
from storage.preferences_store import PreferencesStore
from storage.sqlite_store import SqliteRecordStore
from taskboard.models import Task


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str):
        return FakeProvider(response_text)
    return _make


@pytest.fixture
def store(tmp_path):
    return SqliteRecordStore(tmp_path / "tasks.sqlite3")


@pytest.fixture
def prefs_store(tmp_path):
    return PreferencesStore(path=str(tmp_path / "preferences.json"))


@pytest.fixture
def make_task():
    def _make(**overrides):
        now = datetime.now(timezone.utc)
        fields = {
            "id": uuid.uuid4().hex,
            "text": "Task",
            "priority": 2,
            "category": "general",
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Task(**fields)
    return _make
