"""Persistence helpers for completed interview sessions."""
from __future__ import annotations

import datetime as dt
import sqlite3
from typing import List, Optional

from pydantic import TypeAdapter

from domain import AnswerRecord, Category, Session, SessionStatus

from .sqlite import get_conn

_ANSWERS = TypeAdapter(List[AnswerRecord])


def _row_to_session(row: sqlite3.Row) -> Session:
    return Session(
        id=row["id"],
        category=Category(row["category"]),
        start_time=row["start_time"],
        answers=_ANSWERS.validate_json(row["answers_json"]),
        exam_id=row["exam_id"],
        user_email=row["user_email"],
        candidate_name=row["candidate_name"],
        status=SessionStatus(row["status"]),
    )


def insert_session(session: Session) -> None:
    """Persist a finished session once; sessions are never rewritten."""

    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    with get_conn() as conn:
        conn.execute(
            """INSERT INTO sessions
               (id, timestamp, category, start_time, exam_id, user_email, candidate_name,
                status, answers_json)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                session.id,
                timestamp,
                session.category.value,
                session.start_time,
                session.exam_id,
                session.user_email,
                session.candidate_name,
                session.status.value,
                _ANSWERS.dump_json(session.answers).decode("utf-8"),
            ),
        )


def list_sessions(
    *,
    user_email: Optional[str] = None,
    exam_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Session]:
    """Return sessions newest first, optionally filtered by user or exam."""

    clauses: List[str] = []
    params: List[object] = []
    if user_email:
        clauses.append("user_email = ?")
        params.append(user_email.lower())
    if exam_id:
        clauses.append("exam_id = ?")
        params.append(exam_id.upper())
    sql = "SELECT * FROM sessions"
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY timestamp DESC, rowid DESC"
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))
    with get_conn() as conn:
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_session(row) for row in rows]
