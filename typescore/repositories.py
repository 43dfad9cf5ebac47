"""Repository layer encapsulating raw database interactions."""

from __future__ import annotations

from contextlib import contextmanager
from typing import List, Optional, Sequence, Tuple
import sqlite3

from .db import DatabaseManager


class SessionRepository:
    """Persistence layer for typing sessions and their timing record."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    def insert(
        self,
        *,
        public_id: str,
        reference_text: str,
        status: str,
        thresholds_json: str,
        section_marks_json: str,
        created_at: str,
    ) -> sqlite3.Row:
        with self._db.connect() as connection:
            cursor = connection.execute(
                """
                INSERT INTO typing_sessions(
                    public_id, reference_text, input_text, status, thresholds, section_marks, created_at
                )
                VALUES(?, ?, '', ?, ?, ?, ?)
                """,
                (public_id, reference_text, status, thresholds_json, section_marks_json, created_at),
            )
            return connection.execute(
                "SELECT * FROM typing_sessions WHERE id=?", (cursor.lastrowid,)
            ).fetchone()

    def fetch_by_public_id(
        self, public_id: str, *, conn: Optional[sqlite3.Connection] = None
    ) -> Optional[sqlite3.Row]:
        query = "SELECT * FROM typing_sessions WHERE public_id=?"
        if conn is None:
            with self._db.connect() as connection:
                return connection.execute(query, (public_id,)).fetchone()
        return conn.execute(query, (public_id,)).fetchone()

    @contextmanager
    def locked(self):
        """Connection holding the database write lock until the block exits."""
        connection = self._db.connect()
        try:
            connection.execute("BEGIN IMMEDIATE")
            yield connection
            connection.commit()
        except BaseException:
            connection.rollback()
            raise
        finally:
            connection.close()

    def update_state(
        self,
        public_id: str,
        *,
        input_text: str,
        status: str,
        started_at: Optional[str],
        section_marks_json: str,
        ended_at: Optional[str],
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        query = """
            UPDATE typing_sessions
            SET input_text=?, status=?, started_at=?, section_marks=?, ended_at=?
            WHERE public_id=?
        """
        params = (input_text, status, started_at, section_marks_json, ended_at, public_id)
        if conn is None:
            with self._db.connect() as connection:
                connection.execute(query, params)
            return
        conn.execute(query, params)

    def delete_by_public_id(self, public_id: str) -> int:
        with self._db.connect() as connection:
            cursor = connection.execute("DELETE FROM typing_sessions WHERE public_id=?", (public_id,))
        return cursor.rowcount


class ResultRepository:
    """Persistence layer for submitted report rows (one per user and section label)."""

    def __init__(self, db: DatabaseManager):
        self._db = db

    @contextmanager
    def transaction(self):
        with self._db.connect() as connection:
            yield connection

    def exists_for_user(self, user_info: str, sections: Sequence[str]) -> bool:
        placeholders = ",".join("?" for _ in sections)
        with self._db.connect() as connection:
            row = connection.execute(
                f"SELECT 1 FROM sections WHERE user_info=? AND section IN ({placeholders}) LIMIT 1",
                (user_info, *sections),
            ).fetchone()
        return row is not None

    def insert_many(
        self,
        conn: sqlite3.Connection,
        *,
        user_info: str,
        session_id: Optional[str],
        submitted_at: str,
        rows: List[Tuple[str, int, int, int, float]],
    ) -> None:
        conn.executemany(
            """
            INSERT INTO sections(
                user_info, section, incorrect_spaces, missing_letters, typos, wpm, session_id, submitted_at
            )
            VALUES(?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (user_info, section, spaces, letters, typos, wpm, session_id, submitted_at)
                for section, spaces, letters, typos, wpm in rows
            ],
        )

    def list_by_user(self, user_info: str) -> List[sqlite3.Row]:
        with self._db.connect() as connection:
            return connection.execute(
                """
                SELECT * FROM sections WHERE user_info=?
                ORDER BY CASE section
                    WHEN 'Total' THEN 0 WHEN 'Beginning' THEN 1 WHEN 'Middle' THEN 2 ELSE 3
                END
                """,
                (user_info,),
            ).fetchall()

    def list_by_session(self, session_id: str) -> List[sqlite3.Row]:
        with self._db.connect() as connection:
            return connection.execute(
                "SELECT * FROM sections WHERE session_id=? ORDER BY id",
                (session_id,),
            ).fetchall()
