"""Persistence helpers for recruiter-issued exams."""
from __future__ import annotations

import datetime as dt
import json
import sqlite3
from typing import List, Optional

from domain import Category, Difficulty, ExamConfig

from .sqlite import get_conn


class DuplicateExamCodeError(ValueError):
    """Raised when an access code is already taken."""


def _row_to_exam(row: sqlite3.Row) -> ExamConfig:
    invited = row["invited_emails"]
    return ExamConfig(
        id=row["id"],
        company_name=row["company_name"],
        company_logo=row["company_logo"],
        role=row["role"],
        category=Category(row["category"]),
        difficulty=Difficulty(row["difficulty"]),
        created_at=row["created_at"],
        creator_email=row["creator_email"],
        invited_emails=json.loads(invited) if invited else None,
    )


def insert_exam(exam: ExamConfig) -> None:
    """Insert a new exam; existing codes are never overwritten."""

    timestamp = dt.datetime.now(dt.timezone.utc).isoformat()
    try:
        with get_conn() as conn:
            conn.execute(
                """INSERT INTO exams
                   (id, timestamp, creator_email, company_name, company_logo, role,
                    category, difficulty, created_at, invited_emails)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    exam.id,
                    timestamp,
                    exam.creator_email,
                    exam.company_name,
                    exam.company_logo,
                    exam.role,
                    exam.category.value,
                    exam.difficulty.value,
                    exam.created_at,
                    json.dumps(exam.invited_emails) if exam.invited_emails else None,
                ),
            )
    except sqlite3.IntegrityError as exc:
        raise DuplicateExamCodeError(exam.id) from exc


def get_exam(code: str) -> Optional[ExamConfig]:
    with get_conn() as conn:
        row = conn.execute("SELECT * FROM exams WHERE id = ?", (code.strip().upper(),)).fetchone()
    return _row_to_exam(row) if row is not None else None


def exams_by_creator(email: str) -> List[ExamConfig]:
    with get_conn() as conn:
        rows = conn.execute(
            "SELECT * FROM exams WHERE creator_email = ? ORDER BY created_at DESC, id",
            (email.lower(),),
        ).fetchall()
    return [_row_to_exam(row) for row in rows]
