"""Database repository for coaching sessions.

This module provides async SQLite storage for sessions, their questions,
answers and verdicts. The at-most-one rules are enforced by the schema:

- one question per (session, order)
- one answer per question, and only for a question of the same session
- one verdict per session
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from reality_coach.careers.models import AltCareer
from reality_coach.scoring.models import Bucket, BucketScores, Color
from reality_coach.sessions.models import (
    Answer,
    Question,
    QuestionSource,
    Session,
    SessionSnapshot,
    SessionStatus,
    Verdict,
)

CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    target_role TEXT NOT NULL,
    state TEXT NOT NULL,
    age_range TEXT NOT NULL,
    has_quals INTEGER NOT NULL,
    constraints TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL,
    created_at TEXT NOT NULL,
    completed_at TEXT
);

CREATE TABLE IF NOT EXISTS questions (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
    question_order INTEGER NOT NULL,
    bucket TEXT NOT NULL,
    text TEXT NOT NULL,
    weight INTEGER NOT NULL CHECK (weight BETWEEN 1 AND 10),
    source TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (session_id, question_order),
    UNIQUE (id, session_id)
);

CREATE TABLE IF NOT EXISTS answers (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL,
    question_id TEXT NOT NULL UNIQUE,
    value INTEGER NOT NULL,
    note TEXT,
    created_at TEXT NOT NULL,
    FOREIGN KEY (question_id, session_id)
        REFERENCES questions(id, session_id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS verdicts (
    session_id TEXT PRIMARY KEY REFERENCES sessions(id) ON DELETE CASCADE,
    fit_score INTEGER NOT NULL,
    color TEXT NOT NULL,
    summary TEXT NOT NULL,
    bucket_scores TEXT NOT NULL,
    mismatches TEXT NOT NULL,
    confidence REAL NOT NULL,
    stop_reason TEXT,
    next_steps TEXT NOT NULL,
    alt_careers TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_created ON sessions(created_at);
CREATE INDEX IF NOT EXISTS idx_answers_session ON answers(session_id);
"""


@dataclass(frozen=True)
class SessionSummary:
    """A session with the headline of its verdict, if any."""

    session: Session
    fit_score: int | None = None
    color: Color | None = None


class SessionRepository:
    """Async SQLite repository for sessions.

    A single connection is shared; every read and write holds an
    ``asyncio.Lock`` so another coroutine never observes a transaction that
    has not committed yet.
    """

    def __init__(self, db_path: Path | str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = Path(db_path)
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def _get_connection(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        if self._connection is None:
            self._connection = await aiosqlite.connect(self.db_path)
            self._connection.row_factory = aiosqlite.Row
            await self._connection.execute("PRAGMA foreign_keys = ON")
        yield self._connection

    @asynccontextmanager
    async def _read(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        async with self._lock, self._get_connection() as conn:
            yield conn

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[aiosqlite.Connection, None]:
        """Run writes atomically: commit on success, roll back on any error."""
        async with self._lock, self._get_connection() as conn:
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def initialize(self) -> None:
        """Initialize the database, creating tables if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        async with self._transaction() as conn:
            await conn.executescript(CREATE_TABLES_SQL)

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    # Sessions

    async def insert_session(self, session: Session) -> None:
        """Insert a new session.

        Raises:
            sqlite3.IntegrityError: If a session with the same id exists.
        """
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT INTO sessions (
                    id, target_role, state, age_range, has_quals, constraints,
                    status, created_at, completed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.id,
                    session.target_role,
                    session.state,
                    session.age_range,
                    1 if session.has_quals else 0,
                    session.constraints,
                    session.status.value,
                    session.created_at.isoformat(),
                    session.completed_at.isoformat() if session.completed_at else None,
                ),
            )

    async def mark_completed(self, session_id: str, completed_at: datetime) -> bool:
        """Move an active session to completed.

        Returns:
            True if this call completed the session, False if it was
            already completed (or does not exist).
        """
        async with self._transaction() as conn:
            return await self._complete(conn, session_id, completed_at)

    async def _complete(
        self, conn: aiosqlite.Connection, session_id: str, completed_at: datetime
    ) -> bool:
        cursor = await conn.execute(
            """
            UPDATE sessions SET status = ?, completed_at = ?
            WHERE id = ? AND status = ?
            """,
            (
                SessionStatus.COMPLETED.value,
                completed_at.isoformat(),
                session_id,
                SessionStatus.ACTIVE.value,
            ),
        )
        return cursor.rowcount == 1

    async def list_recent_sessions(
        self,
        limit: int = 100,
        status_filter: SessionStatus | None = None,
    ) -> list[SessionSummary]:
        """List recent sessions, newest first, with their verdict headline."""
        query = """
            SELECT s.*, v.fit_score AS verdict_fit_score, v.color AS verdict_color
            FROM sessions s
            LEFT JOIN verdicts v ON v.session_id = s.id
        """
        params: tuple = ()
        if status_filter is not None:
            query += " WHERE s.status = ?"
            params = (status_filter.value,)
        query += " ORDER BY s.created_at DESC LIMIT ?"

        async with self._read() as conn:
            cursor = await conn.execute(query, (*params, limit))
            rows = await cursor.fetchall()

        return [
            SessionSummary(
                session=self._row_to_session(row),
                fit_score=row["verdict_fit_score"],
                color=Color(row["verdict_color"]) if row["verdict_color"] else None,
            )
            for row in rows
        ]

    # Questions

    async def create_question(self, question: Question) -> Question | None:
        """Store a question unless its (session, order) slot is taken or
        the session is no longer active.

        Returns:
            The question stored at that slot: ``question`` itself, or the
            one a concurrent caller stored first. None if the slot is empty
            because the session is completed (or missing).
        """
        async with self._transaction() as conn:
            await conn.execute(
                """
                INSERT OR IGNORE INTO questions (
                    id, session_id, question_order, bucket, text, weight,
                    source, created_at
                )
                SELECT ?, ?, ?, ?, ?, ?, ?, ?
                WHERE EXISTS (
                    SELECT 1 FROM sessions WHERE id = ? AND status = ?
                )
                """,
                (
                    question.id,
                    question.session_id,
                    question.order,
                    question.bucket.value,
                    question.text,
                    question.weight,
                    question.source.value,
                    question.created_at.isoformat(),
                    question.session_id,
                    SessionStatus.ACTIVE.value,
                ),
            )
            cursor = await conn.execute(
                """
                SELECT * FROM questions
                WHERE session_id = ? AND question_order = ?
                """,
                (question.session_id, question.order),
            )
            row = await cursor.fetchone()

        return self._row_to_question(row) if row is not None else None

    async def get_question(self, question_id: str) -> Question | None:
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM questions WHERE id = ?", (question_id,)
            )
            row = await cursor.fetchone()

        return self._row_to_question(row) if row is not None else None

    # Answers

    async def insert_answer(self, answer: Answer) -> bool:
        """Insert an answer if its session is still active.

        Returns:
            True if the answer was stored, False if the session is not
            active (completed or missing).

        Raises:
            sqlite3.IntegrityError: If the question already has an answer or
                does not belong to the answer's session.
        """
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO answers (
                    id, session_id, question_id, value, note, created_at
                )
                SELECT ?, ?, ?, ?, ?, ?
                WHERE EXISTS (
                    SELECT 1 FROM sessions WHERE id = ? AND status = ?
                )
                """,
                (
                    answer.id,
                    answer.session_id,
                    answer.question_id,
                    1 if answer.value else 0,
                    answer.note,
                    answer.created_at.isoformat(),
                    answer.session_id,
                    SessionStatus.ACTIVE.value,
                ),
            )
            return cursor.rowcount == 1

    # Verdicts

    async def create_verdict(self, verdict: Verdict) -> Verdict:
        """Store a verdict and complete its session, unless a verdict
        already exists.

        Returns:
            The stored verdict, which is the existing one if another caller
            got there first.
        """
        async with self._transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT OR IGNORE INTO verdicts (
                    session_id, fit_score, color, summary, bucket_scores,
                    mismatches, confidence, stop_reason, next_steps,
                    alt_careers, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    verdict.session_id,
                    verdict.fit_score,
                    verdict.color.value,
                    verdict.summary,
                    json.dumps(verdict.bucket_scores.to_dict()),
                    json.dumps(verdict.mismatches),
                    verdict.confidence,
                    verdict.stop_reason,
                    json.dumps(verdict.next_steps),
                    json.dumps([c.to_dict() for c in verdict.alt_careers]),
                    verdict.created_at.isoformat(),
                ),
            )
            if cursor.rowcount == 1:
                await self._complete(conn, verdict.session_id, verdict.created_at)
            cursor = await conn.execute(
                "SELECT * FROM verdicts WHERE session_id = ?", (verdict.session_id,)
            )
            row = await cursor.fetchone()

        return self._row_to_verdict(row)

    # Read model

    async def load_snapshot(self, session_id: str) -> SessionSnapshot | None:
        """Assemble a session with its questions, answers and verdict from
        one consistent read."""
        async with self._read() as conn:
            cursor = await conn.execute(
                "SELECT * FROM sessions WHERE id = ?", (session_id,)
            )
            session_row = await cursor.fetchone()
            if session_row is None:
                return None

            cursor = await conn.execute(
                """
                SELECT * FROM questions WHERE session_id = ?
                ORDER BY question_order ASC
                """,
                (session_id,),
            )
            question_rows = await cursor.fetchall()

            cursor = await conn.execute(
                "SELECT * FROM answers WHERE session_id = ? ORDER BY rowid ASC",
                (session_id,),
            )
            answer_rows = await cursor.fetchall()

            cursor = await conn.execute(
                "SELECT * FROM verdicts WHERE session_id = ?", (session_id,)
            )
            verdict_row = await cursor.fetchone()

        return SessionSnapshot(
            session=self._row_to_session(session_row),
            questions=tuple(self._row_to_question(row) for row in question_rows),
            answers=tuple(self._row_to_answer(row) for row in answer_rows),
            verdict=self._row_to_verdict(verdict_row) if verdict_row else None,
        )

    # Row mapping

    def _row_to_session(self, row: aiosqlite.Row) -> Session:
        return Session(
            id=row["id"],
            target_role=row["target_role"],
            state=row["state"],
            age_range=row["age_range"],
            has_quals=bool(row["has_quals"]),
            constraints=row["constraints"] or "",
            status=SessionStatus(row["status"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            completed_at=datetime.fromisoformat(row["completed_at"])
            if row["completed_at"]
            else None,
        )

    def _row_to_question(self, row: aiosqlite.Row) -> Question:
        return Question(
            id=row["id"],
            session_id=row["session_id"],
            order=row["question_order"],
            bucket=Bucket(row["bucket"]),
            text=row["text"],
            weight=row["weight"],
            source=QuestionSource(row["source"]),
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_answer(self, row: aiosqlite.Row) -> Answer:
        return Answer(
            id=row["id"],
            session_id=row["session_id"],
            question_id=row["question_id"],
            value=bool(row["value"]),
            note=row["note"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_verdict(self, row: aiosqlite.Row) -> Verdict:
        return Verdict(
            session_id=row["session_id"],
            fit_score=row["fit_score"],
            color=Color(row["color"]),
            summary=row["summary"],
            bucket_scores=BucketScores.from_dict(json.loads(row["bucket_scores"])),
            mismatches=json.loads(row["mismatches"]),
            confidence=row["confidence"],
            stop_reason=row["stop_reason"],
            next_steps=json.loads(row["next_steps"]),
            alt_careers=[AltCareer.from_dict(c) for c in json.loads(row["alt_careers"])],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
