"""Backtest session persistence for ranking snapshots and batch runs."""

import sqlite3
import threading
import uuid
from collections.abc import Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Optional, Union

import orjson
import structlog

from midas_app.errors import SessionStoreError
from midas_app.models.candidate import Candidate
from midas_app.models.trade import BatchRun
from midas_app.utils.dates import parse_date


@dataclass(frozen=True)
class SessionSummary:
    """Listing entry for a saved session."""
    session_id: str
    reference_date: date
    num_trades: int
    num_rankings: int
    success_count: int
    failure_count: int
    created_at: str
    updated_at: str


class SessionStore:
    """SQLite-based backtest session store."""

    def __init__(self, db_path: Union[str, Path] = "backtest_sessions.db"):
        self.db_path = Path(db_path)
        self.logger = structlog.get_logger("midas.session.store")
        self._lock = threading.Lock()

        self._init_database()

    def _init_database(self) -> None:
        """Initialize database schema."""
        with self._get_connection("init") as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    session_id TEXT PRIMARY KEY,
                    reference_date TEXT NOT NULL,
                    run_data BLOB NOT NULL,
                    rankings BLOB,
                    num_rankings INTEGER NOT NULL DEFAULT 0,
                    num_trades INTEGER NOT NULL,
                    success_count INTEGER NOT NULL,
                    failure_count INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_sessions_reference_date ON sessions(reference_date)
            """)

            conn.commit()

    @contextmanager
    def _get_connection(self, operation: str, session_id: Optional[str] = None):
        """Get database connection, mapping driver errors to SessionStoreError."""
        conn = None
        try:
            conn = sqlite3.connect(self.db_path, timeout=30.0)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as e:
            if conn:
                conn.rollback()
            self.logger.error("Database error", operation=operation, error=str(e))
            raise SessionStoreError(
                f"Session {operation} failed: {e}", operation=operation, session_id=session_id
            )
        finally:
            if conn:
                conn.close()

    def save(
        self,
        run: BatchRun,
        reference_date: Union[date, str],
        session_id: Optional[str] = None,
    ) -> str:
        """
        Save a batch run, replacing the session's previous run if it exists.

        Args:
            run: Batch run to save
            reference_date: Ranking date the batch was built from
            session_id: Existing session to update; a new id is generated if None

        Returns:
            Session ID
        """
        session_id = session_id or str(uuid.uuid4())
        ref = parse_date(reference_date).isoformat()
        now = datetime.now(timezone.utc).isoformat()

        with self._lock:
            with self._get_connection("save", session_id) as conn:
                conn.execute("""
                    INSERT INTO sessions (
                        session_id, reference_date, run_data, num_trades,
                        success_count, failure_count, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(session_id) DO UPDATE SET
                        reference_date = excluded.reference_date,
                        run_data = excluded.run_data,
                        num_trades = excluded.num_trades,
                        success_count = excluded.success_count,
                        failure_count = excluded.failure_count,
                        updated_at = excluded.updated_at
                """, (
                    session_id,
                    ref,
                    orjson.dumps(run.to_dict()),
                    len(run.results),
                    run.success_count,
                    run.failure_count,
                    now,
                    now,
                ))
                conn.commit()

        self.logger.info(
            "Session saved",
            session_id=session_id,
            reference_date=ref,
            num_trades=len(run.results)
        )
        return session_id

    def load(self, session_id: str) -> BatchRun:
        """
        Load the batch run of a session.

        Raises:
            SessionStoreError: If the session does not exist
        """
        with self._get_connection("load", session_id) as conn:
            row = conn.execute("""
                SELECT run_data FROM sessions WHERE session_id = ?
            """, (session_id,)).fetchone()

        if row is None:
            raise SessionStoreError(
                f"Session not found: {session_id}", operation="load", session_id=session_id
            )

        try:
            return BatchRun.from_dict(orjson.loads(row["run_data"]))
        except ValueError as e:
            raise SessionStoreError(
                f"Corrupt session data: {e}", operation="load", session_id=session_id
            )

    def save_rankings(
        self,
        candidates: Sequence[Candidate],
        reference_date: Union[date, str],
        session_id: Optional[str] = None,
    ) -> str:
        """
        Save the candidate pool ranked as of a reference date.

        An existing session keeps its batch run; only the pool is replaced.

        Returns:
            Session ID
        """
        session_id = session_id or str(uuid.uuid4())
        ref = parse_date(reference_date).isoformat()
        now = datetime.now(timezone.utc).isoformat()

        with self._lock:
            with self._get_connection("save_rankings", session_id) as conn:
                conn.execute("""
                    INSERT INTO sessions (
                        session_id, reference_date, run_data, rankings, num_rankings,
                        num_trades, success_count, failure_count, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, 0, 0, 0, ?, ?)
                    ON CONFLICT(session_id) DO UPDATE SET
                        reference_date = excluded.reference_date,
                        rankings = excluded.rankings,
                        num_rankings = excluded.num_rankings,
                        updated_at = excluded.updated_at
                """, (
                    session_id,
                    ref,
                    orjson.dumps(BatchRun().to_dict()),
                    orjson.dumps([c.to_payload() for c in candidates]),
                    len(candidates),
                    now,
                    now,
                ))
                conn.commit()

        self.logger.info(
            "Session rankings saved",
            session_id=session_id,
            reference_date=ref,
            num_rankings=len(candidates)
        )
        return session_id

    def load_rankings(self, session_id: str) -> Optional[list[Candidate]]:
        """
        Load the candidate pool of a session.

        Returns:
            Candidates in ranking order, or None if no pool was saved

        Raises:
            SessionStoreError: If the session does not exist or is corrupt
        """
        with self._get_connection("load_rankings", session_id) as conn:
            row = conn.execute("""
                SELECT rankings FROM sessions WHERE session_id = ?
            """, (session_id,)).fetchone()

        if row is None:
            raise SessionStoreError(
                f"Session not found: {session_id}", operation="load_rankings", session_id=session_id
            )
        if row["rankings"] is None:
            return None

        try:
            return [Candidate.from_payload(r) for r in orjson.loads(row["rankings"])]
        except (ValueError, TypeError, AttributeError) as e:
            raise SessionStoreError(
                f"Corrupt session rankings: {e}", operation="load_rankings", session_id=session_id
            )

    def list_sessions(self) -> list[SessionSummary]:
        """List saved sessions, most recently updated first."""
        with self._get_connection("list") as conn:
            rows = conn.execute("""
                SELECT * FROM sessions ORDER BY updated_at DESC
            """).fetchall()

        return [self._row_to_summary(row) for row in rows]

    def find_by_date(self, reference_date: Union[date, str]) -> Optional[SessionSummary]:
        """Most recently updated session for a reference date, if any."""
        ref = parse_date(reference_date).isoformat()

        with self._get_connection("find") as conn:
            row = conn.execute("""
                SELECT * FROM sessions WHERE reference_date = ?
                ORDER BY updated_at DESC LIMIT 1
            """, (ref,)).fetchone()

        return self._row_to_summary(row) if row else None

    def delete(self, session_id: str) -> bool:
        """Delete a session; returns False if it did not exist."""
        with self._lock:
            with self._get_connection("delete", session_id) as conn:
                cursor = conn.execute("""
                    DELETE FROM sessions WHERE session_id = ?
                """, (session_id,))
                conn.commit()
                deleted = cursor.rowcount > 0

        if deleted:
            self.logger.info("Session deleted", session_id=session_id)
        return deleted

    def _row_to_summary(self, row: sqlite3.Row) -> SessionSummary:
        """Convert database row to SessionSummary object."""
        return SessionSummary(
            session_id=row["session_id"],
            reference_date=parse_date(row["reference_date"]),
            num_trades=row["num_trades"],
            num_rankings=row["num_rankings"],
            success_count=row["success_count"],
            failure_count=row["failure_count"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
