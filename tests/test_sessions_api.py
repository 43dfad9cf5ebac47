from datetime import datetime

import pytest

from conftest import NINE_WORDS
from typescore import config


def _dt(raw: str) -> datetime:
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def test_health(app_client, fixed_now):
    r = app_client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert _dt(r.json()["utc"]) == fixed_now


def test_reference_text(app_client):
    r = app_client.get("/reference-text")
    assert r.status_code == 200
    body = r.json()
    assert body["reference_text"] == NINE_WORDS
    assert body["word_count"] == 9
    assert body["sections_available"] is True


def test_create_session_defaults(app_client):
    r = app_client.post("/sessions", json={})
    assert r.status_code == 201
    session = r.json()
    assert session["status"] == "not_started"
    assert session["reference_text"] == NINE_WORDS
    assert session["input_text"] == ""
    assert session["reference_word_count"] == 9
    assert session["sections_available"] is True
    assert session["timing"] == {"started_at": None, "section_marks": [None, None], "ended_at": None}


def test_create_session_custom_reference(app_client):
    r = app_client.post("/sessions", json={"reference_text": "the cat sat"})
    assert r.status_code == 201
    session = r.json()
    assert session["sections_available"] is False
    assert session["timing"]["section_marks"] == []

    r_bad = app_client.post("/sessions", json={"reference_text": "   "})
    assert r_bad.status_code == 422


def test_unknown_session(app_client):
    assert app_client.get("/sessions/nope").status_code == 404
    assert app_client.post("/sessions/nope/keystrokes", json={"text": "a"}).status_code == 404
    assert app_client.post("/sessions/nope/finish").status_code == 404
    assert app_client.delete("/sessions/nope").status_code == 404


def test_keystrokes_record_timing(app_client, clock, fixed_now):
    c = app_client
    sid = c.post("/sessions", json={}).json()["public_id"]

    r = c.post(f"/sessions/{sid}/keystrokes", json={"text": "o"})
    assert r.status_code == 200
    assert r.json()["status"] == "in_progress"
    assert _dt(r.json()["timing"]["started_at"]) == fixed_now

    clock.advance(seconds=20)
    r = c.post(f"/sessions/{sid}/keystrokes", json={"text": "one two three"})
    marks = r.json()["timing"]["section_marks"]
    assert _dt(marks[0]) == clock.now
    assert marks[1] is None
    first_mark = clock.now

    # drop below the boundary and cross it again
    clock.advance(seconds=5)
    c.post(f"/sessions/{sid}/keystrokes", json={"text": "one two"})
    clock.advance(seconds=5)
    r = c.post(f"/sessions/{sid}/keystrokes", json={"text": "one two three"})
    assert _dt(r.json()["timing"]["section_marks"][0]) == first_mark
    assert r.json()["word_count"] == 3

    # state survives a fresh read
    fetched = c.get(f"/sessions/{sid}").json()
    assert fetched["input_text"] == "one two three"
    assert _dt(fetched["timing"]["section_marks"][0]) == first_mark


def test_finish_returns_report(finished_session):
    _, report = finished_session
    assert report["overall"] == {
        "section": "Total",
        "wpm": pytest.approx(6.0),
        "incorrect_spaces": 0,
        "missing_letters": 0,
        "typos": 0,
    }
    assert [s["section"] for s in report["sections"]] == ["Beginning", "Middle", "End"]
    assert [s["wpm"] for s in report["sections"]] == pytest.approx([6.0, 6.0, 6.0])


def test_report_endpoint_matches_finish(app_client, finished_session):
    sid, report = finished_session
    r = app_client.get(f"/sessions/{sid}/report")
    assert r.status_code == 200
    assert r.json() == report


def test_report_before_finish_is_conflict(app_client):
    sid = app_client.post("/sessions", json={}).json()["public_id"]
    app_client.post(f"/sessions/{sid}/keystrokes", json={"text": "one"})
    r = app_client.get(f"/sessions/{sid}/report")
    assert r.status_code == 409


def test_finished_session_is_frozen(app_client, finished_session):
    sid, _ = finished_session
    r = app_client.post(f"/sessions/{sid}/keystrokes", json={"text": "changed"})
    assert r.status_code == 409
    r2 = app_client.post(f"/sessions/{sid}/finish")
    assert r2.status_code == 409
    assert app_client.get(f"/sessions/{sid}").json()["input_text"] == NINE_WORDS


def test_short_text_session_has_no_sections(app_client, clock):
    c = app_client
    sid = c.post("/sessions", json={"reference_text": "the cat sat"}).json()["public_id"]
    c.post(f"/sessions/{sid}/keystrokes", json={"text": "t"})
    clock.advance(seconds=30)
    c.post(f"/sessions/{sid}/keystrokes", json={"text": "the cat sat"})
    report = c.post(f"/sessions/{sid}/finish").json()
    assert report["sections"] is None
    assert report["overall"]["wpm"] == pytest.approx(6.0)
    assert report["overall"]["typos"] == 0


def test_finish_without_typing_reports_zero(app_client):
    sid = app_client.post("/sessions", json={}).json()["public_id"]
    report = app_client.post(f"/sessions/{sid}/finish").json()
    assert report["overall"]["wpm"] == 0.0
    assert report["overall"]["missing_letters"] == len(NINE_WORDS.replace(" ", ""))
    assert report["overall"]["incorrect_spaces"] == 8


def test_reset_and_delete(app_client, finished_session):
    sid, _ = finished_session
    r = app_client.post(f"/sessions/{sid}/reset")
    assert r.status_code == 200
    assert r.json()["status"] == "not_started"
    assert r.json()["input_text"] == ""
    assert r.json()["timing"] == {"started_at": None, "section_marks": [None, None], "ended_at": None}

    assert app_client.post(f"/sessions/{sid}/keystrokes", json={"text": "one"}).status_code == 200

    assert app_client.delete(f"/sessions/{sid}").status_code == 204
    assert app_client.get(f"/sessions/{sid}").status_code == 404


def test_evaluate_stateless(app_client):
    payload = {
        "reference_text": NINE_WORDS,
        "input_text": "one two three four",
        "timing": {
            "started_at": "2025-10-20T15:30:00Z",
            "section_marks": ["2025-10-20T15:30:30Z", None],
            "ended_at": "2025-10-20T15:31:00Z",
        },
    }
    r = app_client.post("/evaluate", json=payload)
    assert r.status_code == 200
    body = r.json()
    assert body["overall"]["wpm"] == pytest.approx(4.0)
    assert body["overall"]["missing_letters"] == 21
    assert [s["wpm"] for s in body["sections"]] == pytest.approx([6.0, 2.0, 0.0])


def test_evaluate_rejects_unordered_timing(app_client):
    payload = {
        "reference_text": "cat",
        "input_text": "cot",
        "timing": {"started_at": "2025-10-20T15:31:00Z", "ended_at": "2025-10-20T15:30:00Z"},
    }
    assert app_client.post("/evaluate", json=payload).status_code == 422


def test_evaluate_rejects_mark_after_unrecorded_one(app_client):
    payload = {
        "reference_text": NINE_WORDS,
        "input_text": NINE_WORDS,
        "timing": {
            "started_at": "2025-10-20T15:30:00Z",
            "section_marks": [None, "2025-10-20T15:31:00Z"],
            "ended_at": "2025-10-20T15:31:30Z",
        },
    }
    assert app_client.post("/evaluate", json=payload).status_code == 422


def test_oversized_text_is_rejected(app_client):
    too_long = "a" * (config.MAX_TEXT_CHARS + 1)

    assert app_client.post("/sessions", json={"reference_text": too_long}).status_code == 422

    sid = app_client.post("/sessions", json={}).json()["public_id"]
    assert app_client.post(f"/sessions/{sid}/keystrokes", json={"text": too_long}).status_code == 422
    assert app_client.get(f"/sessions/{sid}").json()["status"] == "not_started"

    timing = {"started_at": "2025-10-20T15:30:00Z", "ended_at": "2025-10-20T15:31:00Z"}
    for field in ("reference_text", "input_text"):
        payload = {"reference_text": "cat", "input_text": "cat", "timing": timing, field: too_long}
        assert app_client.post("/evaluate", json=payload).status_code == 422
