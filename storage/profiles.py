"""Persistence helpers for user profiles."""
from __future__ import annotations

import json
from typing import Optional

from domain import Profile, UserRole

from .sqlite import get_conn


def get_profile(email: str) -> Optional[Profile]:
    """Return the stored profile for ``email`` or ``None``."""

    with get_conn() as conn:
        row = conn.execute("SELECT * FROM profiles WHERE email = ?", (email.lower(),)).fetchone()
    if row is None:
        return None
    return Profile(
        email=row["email"],
        name=row["name"],
        role=UserRole(row["role"]),
        target_role=row["target_role"],
        education=row["education"],
        skills=json.loads(row["skills"]),
        experience_level=row["experience_level"],
        total_score=row["total_score"],
        streak=row["streak"],
        last_interview_date=row["last_interview_date"],
    )


def upsert_profile(profile: Profile) -> None:
    """Insert or replace a profile keyed by its lowercase email."""

    if not profile.email:
        raise ValueError("Cannot persist a profile without an email")
    with get_conn() as conn:
        conn.execute(
            """INSERT OR REPLACE INTO profiles
               (email, name, role, target_role, education, skills, experience_level,
                total_score, streak, last_interview_date)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                profile.email,
                profile.name,
                profile.role.value,
                profile.target_role,
                profile.education,
                json.dumps(profile.skills),
                profile.experience_level,
                profile.total_score,
                profile.streak,
                profile.last_interview_date,
            ),
        )
