"""Lightweight CLI helpers for inspecting stored sessions and exams."""
from __future__ import annotations

import argparse
import sqlite3

from config.settings import settings


def tail_sessions(limit: int = 20, *, violations_only: bool = False) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        sql = """
            SELECT timestamp, id, category, exam_id, user_email, status, answers_json
            FROM sessions
        """
        params: tuple = ()
        if violations_only:
            sql += " WHERE status = ?"
            params = ("VIOLATION_TAB_SWITCH",)
        sql += " ORDER BY timestamp DESC LIMIT ?"
        cursor.execute(sql, params + (limit,))
        for row in cursor.fetchall():
            ts, session_id, category, exam_id, user_email, status, answers_json = row
            print(
                f"[{ts}] {session_id} {category} exam={exam_id or '-'} user={user_email or '-'} "
                f"status={status} answers_bytes={len(answers_json)}"
            )
    finally:
        conn.close()


def tail_exams(limit: int = 20) -> None:
    conn = sqlite3.connect(settings.DB_PATH)
    try:
        cursor = conn.cursor()
        cursor.execute(
            """
            SELECT timestamp, id, creator_email, role, category, difficulty, invited_emails
            FROM exams
            ORDER BY timestamp DESC
            LIMIT ?
            """,
            (limit,),
        )
        for row in cursor.fetchall():
            ts, code, creator, role, category, difficulty, invited = row
            print(
                f"[{ts}] {code} by {creator} {role} {category}/{difficulty} invited={invited or 'open'}"
            )
    finally:
        conn.close()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--tail-sessions", type=int, help="Show the latest completed sessions")
    parser.add_argument("--tail-violations", type=int, help="Show the latest proctoring violations")
    parser.add_argument("--tail-exams", type=int, help="Show the latest issued exams")
    args = parser.parse_args()

    if args.tail_sessions:
        tail_sessions(args.tail_sessions)
    if args.tail_violations:
        tail_sessions(args.tail_violations, violations_only=True)
    if args.tail_exams:
        tail_exams(args.tail_exams)


if __name__ == "__main__":
    main()
