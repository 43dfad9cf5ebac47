"""Typing-session lifecycle: keystrokes, finish, reset and the final report."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from fastapi import HTTPException

from typescore.models.session import (
    InvalidTransitionError,
    SessionState,
    SessionStatus,
    SessionTiming,
)
from typescore.repositories import SessionRepository
from typescore.schemas import ReportOut, SessionCreate, SessionOut, TimingOut
from typescore.services.section_service import EvaluationReport, SectionService
from typescore.time_utils import from_iso, to_iso
from typescore.utils.words import count_words

logger = logging.getLogger(__name__)


def report_to_out(report: EvaluationReport) -> ReportOut:
    """Convert an engine report into the public API model."""
    return ReportOut(**report.to_dict())


class SessionService:
    """Drive the session state machine and keep it persisted between requests."""

    def __init__(
        self,
        repo: SessionRepository,
        section_service: SectionService,
        utc_now: Callable[[], datetime],
        reference_text: Callable[[], str],
    ):
        """Store dependencies required to manage sessions."""
        self._repo = repo
        self._sections = section_service
        self._utc_now = utc_now
        self._reference_text = reference_text

    def create(self, payload: SessionCreate) -> SessionOut:
        """Start a fresh session against the requested or configured reference text."""
        reference = payload.reference_text or self._reference_text()
        state = SessionState(reference_text=reference, thresholds=self._sections.thresholds_for(reference))
        public_id = str(uuid4())
        row = self._repo.insert(
            public_id=public_id,
            reference_text=reference,
            status=state.status.value,
            thresholds_json=json.dumps(state.thresholds),
            section_marks_json=self._marks_json(state.timing),
            created_at=to_iso(self._utc_now()),
        )
        logger.info("Created session %s (%d reference words).", public_id, count_words(reference))
        return self._to_out(row["public_id"], self._row_to_state(row))

    def get(self, public_id: str) -> SessionOut:
        return self._to_out(public_id, self.load_state(public_id))

    def keystroke(self, public_id: str, text: str) -> SessionOut:
        """Apply the current input text; timestamps are sampled, nothing is diffed."""
        with self._repo.locked() as connection:
            state = self.load_state(public_id, conn=connection)
            self._apply(lambda: state.keystroke(text, self._utc_now()))
            self._save(public_id, state, conn=connection)
        return self._to_out(public_id, state)

    def finish(self, public_id: str) -> ReportOut:
        """Freeze the input, stamp the end time and return the final report."""
        with self._repo.locked() as connection:
            state = self.load_state(public_id, conn=connection)
            self._apply(lambda: state.finish(self._utc_now()))
            self._save(public_id, state, conn=connection)
        report = self._evaluate(state)
        logger.info(
            "Session %s finished with %d typed words and %d mistakes.",
            public_id,
            count_words(state.input_text),
            report.overall.mistakes.total,
        )
        return report_to_out(report)

    def reset(self, public_id: str) -> SessionOut:
        with self._repo.locked() as connection:
            state = self.load_state(public_id, conn=connection)
            state.reset()
            self._save(public_id, state, conn=connection)
        logger.info("Session %s reset.", public_id)
        return self._to_out(public_id, state)

    def delete(self, public_id: str) -> None:
        """Discard a session; submitted results keep their rows."""
        if self._repo.delete_by_public_id(public_id) == 0:
            raise HTTPException(status_code=404, detail="Session not found")

    def report(self, public_id: str) -> ReportOut:
        return report_to_out(self.evaluation(public_id))

    def evaluation(self, public_id: str) -> EvaluationReport:
        """Return the engine report of a finished session; 409 while still typing."""
        state = self.load_state(public_id)
        if not state.is_finished:
            raise HTTPException(status_code=409, detail="Session is not finished yet")
        return self._evaluate(state)

    def load_state(self, public_id: str, *, conn: Optional[sqlite3.Connection] = None) -> SessionState:
        row = self._repo.fetch_by_public_id(public_id, conn=conn)
        if not row:
            raise HTTPException(status_code=404, detail="Session not found")
        return self._row_to_state(row)

    def _evaluate(self, state: SessionState) -> EvaluationReport:
        return self._sections.evaluate(state.reference_text, state.input_text, state.timing)

    @staticmethod
    def _apply(event: Callable[[], None]) -> None:
        """Run a state-machine event, mapping rejected transitions to 409."""
        try:
            event()
        except InvalidTransitionError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc

    def _save(self, public_id: str, state: SessionState, *, conn: sqlite3.Connection) -> None:
        self._repo.update_state(
            public_id,
            input_text=state.input_text,
            status=state.status.value,
            started_at=to_iso(state.timing.started_at),
            section_marks_json=self._marks_json(state.timing),
            ended_at=to_iso(state.timing.ended_at),
            conn=conn,
        )

    @staticmethod
    def _marks_json(timing: SessionTiming) -> str:
        return json.dumps([to_iso(mark) for mark in timing.section_marks])

    @staticmethod
    def _row_to_state(row: Dict[str, Any]) -> SessionState:
        """Rebuild the state machine from a database row."""
        try:
            thresholds = json.loads(row["thresholds"] or "[]")
            marks = json.loads(row["section_marks"] or "[]")
        except json.JSONDecodeError as exc:
            raise HTTPException(
                status_code=500, detail="Invalid session timing stored in the database"
            ) from exc
        timing = SessionTiming(
            started_at=from_iso(row["started_at"]),
            section_marks=[from_iso(mark) for mark in marks],
            ended_at=from_iso(row["ended_at"]),
        )
        return SessionState(
            reference_text=row["reference_text"],
            thresholds=[int(t) for t in thresholds],
            input_text=row["input_text"] or "",
            status=SessionStatus(row["status"]),
            timing=timing,
        )

    @staticmethod
    def _to_out(public_id: str, state: SessionState) -> SessionOut:
        return SessionOut(
            public_id=public_id,
            status=state.status.value,
            reference_text=state.reference_text,
            input_text=state.input_text,
            word_count=count_words(state.input_text),
            reference_word_count=count_words(state.reference_text),
            sections_available=bool(state.thresholds),
            timing=TimingOut(
                started_at=state.timing.started_at,
                section_marks=list(state.timing.section_marks),
                ended_at=state.timing.ended_at,
            ),
        )
