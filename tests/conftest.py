# tests/conftest.py
import os
import tempfile
from datetime import datetime, timedelta, timezone
import importlib
import pytest
from fastapi.testclient import TestClient

from typescore.services.sheets_service import SheetsExporter

NINE_WORDS = "one two three four five six seven eight nine"


class FrozenClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture()
def fixed_now():
    # 2025-10-20 15:30:00 UTC
    return datetime(2025, 10, 20, 15, 30, 0, tzinfo=timezone.utc)


@pytest.fixture()
def clock(fixed_now):
    return FrozenClock(fixed_now)


@pytest.fixture()
def api_module(monkeypatch, clock):
    import api
    importlib.reload(api)

    # DB temporário
    tmp_db = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp_db.close()
    monkeypatch.setattr(api, "DB", tmp_db.name, raising=True)

    # Congela o relógio
    monkeypatch.setattr(api, "utc_now", clock, raising=True)
    monkeypatch.setattr(api, "REFERENCE_TEXT", NINE_WORDS, raising=True)

    # Never talk to Google from tests
    api.app.dependency_overrides[api.get_sheets_exporter] = lambda: SheetsExporter(None, None, None)

    api.init_db()

    yield api

    api.app.dependency_overrides = {}
    os.unlink(tmp_db.name)


@pytest.fixture()
def app_client(api_module):
    return TestClient(api_module.app)


@pytest.fixture()
def finished_session(app_client, clock):
    """A nine-word session typed perfectly at 6 WPM, then finished."""
    c = app_client
    session = c.post("/sessions", json={}).json()
    sid = session["public_id"]
    c.post(f"/sessions/{sid}/keystrokes", json={"text": "one"})
    clock.advance(seconds=30)
    c.post(f"/sessions/{sid}/keystrokes", json={"text": "one two three"})
    clock.advance(seconds=30)
    c.post(f"/sessions/{sid}/keystrokes", json={"text": "one two three four five six"})
    clock.advance(seconds=30)
    c.post(f"/sessions/{sid}/keystrokes", json={"text": NINE_WORDS})
    report = c.post(f"/sessions/{sid}/finish").json()
    return sid, report
