"""SQLite-backed persistence for per-reader story progress."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import UTC, datetime
from pathlib import Path

from twine_reader.core.errors import ProgressStoreError
from twine_reader.domain.models import ReaderProgress

logger = logging.getLogger(__name__)


class SQLiteProgressStore:
    """Persist one ``current_passage`` row per reader in a SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit or roll back, and always close it."""
        try:
            with closing(sqlite3.connect(str(self._db_path))) as connection:
                connection.row_factory = sqlite3.Row
                with connection:
                    yield connection
        except sqlite3.Error as exc:
            logger.error("progress.store_error db_path=%s error=%s", self._db_path, exc)
            raise ProgressStoreError(f"Progress store failure: {exc}") from exc

    def _initialize_schema(self) -> None:
        with self._transaction() as connection:
            connection.execute(
                """
                CREATE TABLE IF NOT EXISTS reader_progress (
                    reader_id INTEGER PRIMARY KEY,
                    current_passage TEXT NOT NULL,
                    updated_at_utc TEXT NOT NULL
                )
                """
            )

    def get(self, reader_id: int) -> str | None:
        """Return the reader's last passage name, or None for a first-time reader."""
        progress = self.get_progress(reader_id)
        if progress is None:
            return None
        return progress.current_passage

    def get_progress(self, reader_id: int) -> ReaderProgress | None:
        with self._transaction() as connection:
            row = connection.execute(
                """
                SELECT reader_id, current_passage
                FROM reader_progress
                WHERE reader_id = ?
                """,
                (reader_id,),
            ).fetchone()
        if row is None:
            return None
        return self._progress_from_row(row)

    def set(self, reader_id: int, passage_name: str) -> None:
        """Insert or update the reader's row; repeated calls converge to one row."""
        now = datetime.now(UTC).isoformat()
        with self._transaction() as connection:
            connection.execute(
                """
                INSERT INTO reader_progress (reader_id, current_passage, updated_at_utc)
                VALUES (?, ?, ?)
                ON CONFLICT(reader_id) DO UPDATE SET
                    current_passage = excluded.current_passage,
                    updated_at_utc = excluded.updated_at_utc
                """,
                (reader_id, passage_name, now),
            )

    def count(self) -> int:
        with self._transaction() as connection:
            row = connection.execute("SELECT COUNT(*) AS total FROM reader_progress").fetchone()
        return int(row["total"])

    @staticmethod
    def _progress_from_row(row: sqlite3.Row) -> ReaderProgress:
        return ReaderProgress(
            reader_id=int(row["reader_id"]),
            current_passage=str(row["current_passage"]),
        )
