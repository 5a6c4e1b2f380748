"""Persistence helpers for recruiter company profiles."""
from __future__ import annotations

from typing import Optional

from domain import CompanyProfile

from .sqlite import get_conn


def get_company(recruiter_email: str) -> Optional[CompanyProfile]:
    with get_conn() as conn:
        row = conn.execute(
            "SELECT name, logo FROM companies WHERE recruiter_email = ?",
            (recruiter_email.lower(),),
        ).fetchone()
    if row is None:
        return None
    return CompanyProfile(name=row["name"], logo=row["logo"])


def save_company(recruiter_email: str, company: CompanyProfile) -> None:
    with get_conn() as conn:
        conn.execute(
            "INSERT OR REPLACE INTO companies (recruiter_email, name, logo) VALUES (?, ?, ?)",
            (recruiter_email.lower(), company.name, company.logo),
        )
