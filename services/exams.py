"""Issuing recruiter assessments and gating candidate entry."""
from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Iterable, List, Optional

from access import INVALID_CODE, NOT_INVITED, AccessDeniedError, AccessShell
from config.settings import settings
from domain import Category, Difficulty, ExamConfig
from storage import exams as exam_store
from storage.exams import DuplicateExamCodeError

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_ATTEMPTS = 5


def generate_access_code(length: Optional[int] = None) -> str:
    """Random uppercase alphanumeric access code."""

    size = settings.ACCESS_CODE_LENGTH if length is None else length
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(size))


def _normalize_invites(invited_emails: Optional[Iterable[str]]) -> Optional[List[str]]:
    if invited_emails is None:
        return None
    cleaned = []
    for email in invited_emails:
        value = email.strip().lower()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned or None


def create_exam(
    recruiter_email: str,
    role: str,
    category: Category,
    difficulty: Difficulty,
    access: AccessShell,
    *,
    invited_emails: Optional[Iterable[str]] = None,
) -> ExamConfig:
    """Create and persist an exam branded with the recruiter's company profile."""

    company = access.get_company(recruiter_email)
    invites = _normalize_invites(invited_emails)
    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        exam = ExamConfig(
            id=generate_access_code(),
            company_name=company.name,
            company_logo=company.logo or None,
            role=role,
            category=category,
            difficulty=difficulty,
            created_at=int(time.time() * 1000),
            creator_email=recruiter_email.strip().lower(),
            invited_emails=invites,
        )
        try:
            exam_store.insert_exam(exam)
        except DuplicateExamCodeError:
            logger.warning("Access code collision on attempt %d", attempt)
            continue
        logger.info(
            "Created exam %s for %s role=%s category=%s invited=%d",
            exam.id,
            exam.creator_email,
            role,
            category.value,
            len(invites or []),
        )
        return exam
    raise RuntimeError("Unable to allocate a unique access code")


def open_exam(code: str, email: Optional[str], access: AccessShell) -> ExamConfig:
    """Resolve ``code`` for ``email`` or refuse entry."""

    exam = access.lookup_exam_by_code(code)
    if exam is None:
        raise AccessDeniedError(INVALID_CODE, code=(code or "").strip().upper() or None)
    if not access.is_invited(exam, email):
        logger.warning("Uninvited entry attempt exam=%s email=%s", exam.id, email)
        raise AccessDeniedError(NOT_INVITED, code=exam.id)
    return exam


__all__ = ["CODE_ALPHABET", "create_exam", "generate_access_code", "open_exam"]
