"""Database connection helpers and schema management."""

from __future__ import annotations

import sqlite3

from .config import DB_PATH


class DatabaseManager:
    """Manage SQLite connections and schema lifecycle for the application."""

    def __init__(self, db_path: str):
        """Store the initial database path."""
        self._db_path = db_path

    def set_path(self, db_path: str) -> None:
        """Update the database path (used by tests to point to temporary files)."""
        self._db_path = db_path

    def connect(self) -> sqlite3.Connection:
        """Create a new SQLite connection with rows addressable by column name."""
        conn_obj = sqlite3.connect(self._db_path)
        conn_obj.row_factory = sqlite3.Row
        conn_obj.execute("PRAGMA foreign_keys = ON;")
        return conn_obj

    def initialize(self) -> None:
        """Ensure all tables and indexes required by the app are present."""
        with self.connect() as connection:
            self._ensure_sessions_table(connection)
            self._ensure_sections_table(connection)
            self._ensure_section_session_column(connection)
            self._ensure_indexes(connection)

    @staticmethod
    def _column_exists(conn_obj: sqlite3.Connection, table: str, column: str) -> bool:
        """Return True when the given column exists in the specified table."""
        rows = conn_obj.execute(f"PRAGMA table_info({table})").fetchall()
        return any(row[1] == column for row in rows)

    @staticmethod
    def _ensure_sessions_table(conn_obj: sqlite3.Connection) -> None:
        """Create the typing_sessions table holding in-progress and finished tests."""
        conn_obj.execute(
            """
            CREATE TABLE IF NOT EXISTS typing_sessions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                public_id TEXT NOT NULL UNIQUE,
                reference_text TEXT NOT NULL,
                input_text TEXT NOT NULL DEFAULT '',
                status TEXT CHECK(status IN ('not_started', 'in_progress', 'finished')) NOT NULL,
                thresholds TEXT NOT NULL DEFAULT '[]',
                started_at TEXT,
                section_marks TEXT NOT NULL DEFAULT '[]',
                ended_at TEXT,
                created_at TEXT NOT NULL
            );
            """
        )

    @staticmethod
    def _ensure_sections_table(conn_obj: sqlite3.Connection) -> None:
        """Create the sections table: one submitted result row per user and label."""
        conn_obj.execute(
            """
            CREATE TABLE IF NOT EXISTS sections (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_info TEXT NOT NULL,
                section TEXT CHECK(section IN ('Beginning', 'Middle', 'End', 'Total')) NOT NULL,
                incorrect_spaces INTEGER CHECK(incorrect_spaces >= 0) NOT NULL,
                missing_letters INTEGER CHECK(missing_letters >= 0) NOT NULL,
                typos INTEGER NOT NULL,
                wpm REAL NOT NULL,
                session_id TEXT REFERENCES typing_sessions(public_id) ON DELETE SET NULL,
                submitted_at TEXT,
                UNIQUE(user_info, section)
            );
            """
        )

    @staticmethod
    def _ensure_section_session_column(conn_obj: sqlite3.Connection) -> None:
        """Result tables created before sessions were stored lack these columns."""
        if not DatabaseManager._column_exists(conn_obj, "sections", "session_id"):
            conn_obj.execute("ALTER TABLE sections ADD COLUMN session_id TEXT")
        if not DatabaseManager._column_exists(conn_obj, "sections", "submitted_at"):
            conn_obj.execute("ALTER TABLE sections ADD COLUMN submitted_at TEXT")

    @staticmethod
    def _ensure_indexes(conn_obj: sqlite3.Connection) -> None:
        conn_obj.execute(
            "CREATE UNIQUE INDEX IF NOT EXISTS idx_sessions_public_id ON typing_sessions(public_id);"
        )
        conn_obj.execute("CREATE INDEX IF NOT EXISTS idx_sections_user ON sections(user_info);")
        conn_obj.execute("CREATE INDEX IF NOT EXISTS idx_sections_session ON sections(session_id);")


db_manager = DatabaseManager(DB_PATH)
