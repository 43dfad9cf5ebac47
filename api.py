#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
typescore – FastAPI typing-speed and accuracy evaluator
--------------------------------------------------------

• Engine: character-level edit-distance alignment → mistake classification
  (incorrect spaces / missing letters / typos) → Beginning/Middle/End sections
• Timing: start on first keystroke, first-crossing section marks, end on finish (Enter)
• Storage: SQLite (sessions + submitted result rows), optional Google Sheets append
• Timezone: UTC (timestamps stored as ISO datetimes)

Endpoints (Sessions):
  - POST   /sessions                       → start a session (optional custom reference text)
  - GET    /sessions/{public_id}           → session state and timing
  - POST   /sessions/{public_id}/keystrokes → full current input text after a change
  - POST   /sessions/{public_id}/finish    → freeze input, stamp end time, return report
  - POST   /sessions/{public_id}/reset     → discard input and timing, back to not started
  - DELETE /sessions/{public_id}           → discard the session
  - GET    /sessions/{public_id}/report    → report of a finished session

Endpoints (Results):
  - POST   /sessions/{public_id}/results   → store Total + section rows for a user
  - GET    /sessions/{public_id}/results   → rows stored for a session
  - GET    /results?user_info=...          → rows stored for a user

Endpoints (Engine):
  - POST   /evaluate                       → stateless report for reference/input/timing
  - GET    /reference-text                 → configured reference text
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from typescore import config, time_utils
from typescore.db import db_manager
from typescore.models.session import SessionTiming
from typescore.repositories import ResultRepository, SessionRepository
from typescore.schemas import (
    EvaluateIn,
    KeystrokeIn,
    ReferenceTextOut,
    ReportOut,
    SessionCreate,
    SessionOut,
    StoredResultOut,
    SubmitIn,
    SubmitOut,
)
from typescore.services.result_service import ResultService
from typescore.services.section_service import SectionService
from typescore.services.session_service import SessionService, report_to_out
from typescore.services.sheets_service import SheetsExporter
from typescore.utils.words import count_words

# ---------------------------------
# Configuration (database and evaluation policy)
# ---------------------------------
DB = config.DB_PATH
REFERENCE_TEXT: str = config.REFERENCE_TEXT
MIN_SECTION_WORDS: int = config.MIN_SECTION_WORDS

# Time helper re-exported so tests can freeze the clock
utc_now = time_utils.utc_now

load_dotenv()

logger = logging.getLogger(__name__)


def init_db() -> None:
    """Initialize database schema using the current database path."""
    db_manager.set_path(DB)
    db_manager.initialize()


def get_session_repository() -> SessionRepository:
    return SessionRepository(db_manager)


def get_result_repository() -> ResultRepository:
    return ResultRepository(db_manager)


def get_section_service() -> SectionService:
    return SectionService(min_section_words=MIN_SECTION_WORDS)


def get_sheets_exporter() -> SheetsExporter:
    return SheetsExporter.from_config()


def get_session_service(
    repo: SessionRepository = Depends(get_session_repository),
    section_service: SectionService = Depends(get_section_service),
) -> SessionService:
    return SessionService(
        repo,
        section_service,
        lambda: utc_now(),
        lambda: REFERENCE_TEXT,
    )


def get_result_service(
    repo: ResultRepository = Depends(get_result_repository),
    session_service: SessionService = Depends(get_session_service),
    exporter: SheetsExporter = Depends(get_sheets_exporter),
) -> ResultService:
    return ResultService(repo, session_service, exporter, lambda: utc_now())


# ---------------
# FastAPI (app)
# ---------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan hook: ensure database is initialized before serving requests."""
    init_db()
    yield


app = FastAPI(
    title="typescore API",
    version="1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------
# Endpoints – Sessions
# ------------------------
@app.post("/sessions", response_model=SessionOut, status_code=201)
def create_session(
    payload: SessionCreate,
    session_service: SessionService = Depends(get_session_service),
):
    """Start a new typing session; the timer starts on the first keystroke."""
    return session_service.create(payload)


@app.get("/sessions/{public_id}", response_model=SessionOut)
def get_session(
    public_id: str,
    session_service: SessionService = Depends(get_session_service),
):
    """Return the current state and timing of a session."""
    return session_service.get(public_id)


@app.post("/sessions/{public_id}/keystrokes", response_model=SessionOut)
def keystroke(
    public_id: str,
    payload: KeystrokeIn,
    session_service: SessionService = Depends(get_session_service),
):
    """Record the full input text after a keystroke."""
    return session_service.keystroke(public_id, payload.text)


@app.post("/sessions/{public_id}/finish", response_model=ReportOut)
def finish_session(
    public_id: str,
    session_service: SessionService = Depends(get_session_service),
):
    """Finish the test (Enter key) and return the overall and section report."""
    return session_service.finish(public_id)


@app.post("/sessions/{public_id}/reset", response_model=SessionOut)
def reset_session(
    public_id: str,
    session_service: SessionService = Depends(get_session_service),
):
    """Reset the session to its initial, not-started state."""
    return session_service.reset(public_id)


@app.delete("/sessions/{public_id}", status_code=204)
def delete_session(
    public_id: str,
    session_service: SessionService = Depends(get_session_service),
):
    """Discard a session."""
    session_service.delete(public_id)
    return


@app.get("/sessions/{public_id}/report", response_model=ReportOut)
def get_report(
    public_id: str,
    session_service: SessionService = Depends(get_session_service),
):
    """Return the report of a finished session."""
    return session_service.report(public_id)


# ------------------------
# Endpoints – Results
# ------------------------
@app.post("/sessions/{public_id}/results", response_model=SubmitOut, status_code=201)
def submit_results(
    public_id: str,
    payload: SubmitIn,
    result_service: ResultService = Depends(get_result_service),
):
    """Store the report rows of a finished session for the given user."""
    return result_service.submit(public_id, payload)


@app.get("/sessions/{public_id}/results", response_model=List[StoredResultOut])
def list_session_results(
    public_id: str,
    result_service: ResultService = Depends(get_result_service),
):
    """List stored result rows of a session."""
    return result_service.list_for_session(public_id)


@app.get("/results", response_model=List[StoredResultOut])
def list_user_results(
    user_info: str = Query(..., min_length=1, description="Identifier given at submission"),
    result_service: ResultService = Depends(get_result_service),
):
    """List stored result rows of a user, Total first."""
    return result_service.list_for_user(user_info)


# ------------------------
# Endpoints – Engine
# ------------------------
@app.post("/evaluate", response_model=ReportOut)
def evaluate(
    req: EvaluateIn,
    section_service: SectionService = Depends(get_section_service),
):
    """Evaluate a reference/input pair with an explicit timing record, without a session."""
    timing = SessionTiming(
        started_at=req.timing.started_at,
        section_marks=list(req.timing.section_marks),
        ended_at=req.timing.ended_at,
    )
    report = section_service.evaluate(req.reference_text, req.input_text, timing)
    return report_to_out(report)


@app.get("/reference-text", response_model=ReferenceTextOut)
def reference_text():
    """Return the configured reference text and whether it supports a section breakdown."""
    words = count_words(REFERENCE_TEXT)
    return ReferenceTextOut(
        reference_text=REFERENCE_TEXT,
        word_count=words,
        sections_available=words >= MIN_SECTION_WORDS,
    )


# ------------------------
# Healthcheck
# ------------------------
@app.get("/health")
def health():
    """Simple health check endpoint with current UTC timestamp."""
    return {"status": "ok", "utc": utc_now().isoformat()}


# ------------------------
# Local execution
# ------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api:app", host=config.API_HOST, port=config.API_PORT, reload=config.API_RELOAD)
