"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS profiles (
  email TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  role TEXT NOT NULL,
  target_role TEXT NOT NULL,
  education TEXT NOT NULL,
  skills TEXT NOT NULL,
  experience_level TEXT NOT NULL,
  total_score INTEGER NOT NULL DEFAULT 0,
  streak INTEGER NOT NULL DEFAULT 0,
  last_interview_date TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS companies (
  recruiter_email TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  logo TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS exams (
  id TEXT PRIMARY KEY,
  timestamp TEXT NOT NULL,
  creator_email TEXT NOT NULL,
  company_name TEXT NOT NULL,
  company_logo TEXT,
  role TEXT NOT NULL,
  category TEXT NOT NULL,
  difficulty TEXT NOT NULL,
  created_at INTEGER NOT NULL,
  invited_emails TEXT
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_exams_creator ON exams (creator_email);
""",
    """
CREATE TABLE IF NOT EXISTS sessions (
  id TEXT PRIMARY KEY,
  timestamp TEXT NOT NULL,
  category TEXT NOT NULL,
  start_time INTEGER NOT NULL,
  exam_id TEXT,
  user_email TEXT,
  candidate_name TEXT,
  status TEXT NOT NULL,
  answers_json TEXT NOT NULL
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_sessions_exam ON sessions (exam_id);
""",
    """
CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions (user_email);
""",
]


def migrate(db_path: str = "data/hirepulse.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
