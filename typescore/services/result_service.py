"""Submission of finished-session reports to the results store."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Callable, Dict, List

import requests
from fastapi import HTTPException
from google.auth.exceptions import GoogleAuthError

from typescore.repositories import ResultRepository
from typescore.schemas import ResultRowOut, StoredResultOut, SubmitIn, SubmitOut
from typescore.services.section_service import SectionResult
from typescore.services.session_service import SessionService
from typescore.services.sheets_service import SheetsExporter, SheetsExportError
from typescore.time_utils import to_iso

logger = logging.getLogger(__name__)


class ResultService:
    """Store report rows keyed by user and section label, then mirror them to Sheets."""

    def __init__(
        self,
        repo: ResultRepository,
        session_service: SessionService,
        exporter: SheetsExporter,
        utc_now: Callable[[], datetime],
    ):
        self._repo = repo
        self._sessions = session_service
        self._exporter = exporter
        self._utc_now = utc_now

    def submit(self, public_id: str, payload: SubmitIn) -> SubmitOut:
        """Persist the Total row and, when available, the three section rows."""
        user_info = payload.user_info.strip()
        if not user_info:
            raise HTTPException(status_code=400, detail="User info is required")

        report = self._sessions.evaluation(public_id)
        rows = report.rows()
        if self._repo.exists_for_user(user_info, [row.label for row in rows]):
            raise HTTPException(status_code=409, detail="Results already submitted for this user")

        try:
            with self._repo.transaction() as connection:
                self._repo.insert_many(
                    connection,
                    user_info=user_info,
                    session_id=public_id,
                    submitted_at=to_iso(self._utc_now()),
                    rows=[self._to_tuple(row) for row in rows],
                )
        except sqlite3.IntegrityError as exc:
            raise HTTPException(status_code=409, detail="Results already submitted for this user") from exc

        logger.info("Stored %d result rows for session %s.", len(rows), public_id)
        return SubmitOut(
            success=True,
            message="Data added!",
            rows=[ResultRowOut(**row.to_dict()) for row in rows],
            exported=self._export(rows),
        )

    def list_for_user(self, user_info: str) -> List[StoredResultOut]:
        return [self._row_to_out(row) for row in self._repo.list_by_user(user_info.strip())]

    def list_for_session(self, public_id: str) -> List[StoredResultOut]:
        self._sessions.load_state(public_id)
        return [self._row_to_out(row) for row in self._repo.list_by_session(public_id)]

    def _export(self, rows: List[SectionResult]) -> bool:
        """Append rows to the spreadsheet; failures are logged, never raised."""
        if not self._exporter.enabled:
            return False
        values = [list(self._to_tuple(row)) for row in rows]
        try:
            self._exporter.append_rows(values)
        except (SheetsExportError, GoogleAuthError, requests.RequestException) as exc:
            logger.warning("Spreadsheet export failed: %s", exc)
            return False
        return True

    @staticmethod
    def _to_tuple(row: SectionResult):
        return (
            row.label,
            row.mistakes.incorrect_spaces,
            row.mistakes.missing_letters,
            row.mistakes.typos,
            row.wpm,
        )

    @staticmethod
    def _row_to_out(row: Dict[str, Any]) -> StoredResultOut:
        return StoredResultOut(
            user_info=row["user_info"],
            section=row["section"],
            wpm=float(row["wpm"]),
            incorrect_spaces=row["incorrect_spaces"],
            missing_letters=row["missing_letters"],
            typos=row["typos"],
            session_id=row["session_id"],
            submitted_at=row["submitted_at"],
        )
