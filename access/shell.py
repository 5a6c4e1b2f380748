"""Identity and access shell over the SQLite record stores.

Every read fails closed: a storage error is logged and reported as "not
found", "not invited" or an empty collection. Writes that happen after a
candidate has already seen their score are best effort and never raise.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from domain import CompanyProfile, ExamConfig, Profile, Session, UserRole
from storage import companies as company_store
from storage import exams as exam_store
from storage import profiles as profile_store
from storage import sessions as session_store

logger = logging.getLogger(__name__)

GUEST_NAME = "Guest User"
DEFAULT_SESSION_LIMIT = 50


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def guest_profile() -> Profile:
    return Profile(email="", name=GUEST_NAME, role=UserRole.GUEST, education="")


class AccessShell:
    """Resolve identities, gate exams and persist outcomes."""

    def __init__(self, *, now: Callable[[], str] = _utc_now) -> None:
        self._now = now
        self._exam_attempts: dict[str, str] = {}

    # identity -----------------------------------------------------------

    def resolve_active_identity(self, email: Optional[str]) -> Profile:
        if not email:
            return guest_profile()
        normalized = email.strip().lower()
        try:
            stored = profile_store.get_profile(normalized)
        except Exception:  # noqa: BLE001
            logger.exception("Profile lookup failed for %s", normalized)
            stored = None
        return stored or Profile(email=normalized)

    def sign_in(
        self,
        email: str,
        role: UserRole,
        *,
        name: Optional[str] = None,
        signup: bool = False,
    ) -> Profile:
        """Create the profile on first sign-in and refresh its role."""

        existing = self.resolve_active_identity(email)
        if signup:
            display = name or existing.name
        else:
            display = existing.name or "User"
        profile = existing.model_copy(update={"role": role, "name": display})
        self._save_profile(profile)
        return profile

    def _save_profile(self, profile: Profile) -> None:
        if not profile.email:
            return
        try:
            profile_store.upsert_profile(profile)
        except Exception:  # noqa: BLE001
            logger.exception("Saving profile failed for %s", profile.email)

    def record_answer_score(self, identity: Profile, score: int) -> Profile:
        """Add an evaluated answer's score to the running total and streak."""

        if not identity.email:
            return identity
        current = self.resolve_active_identity(identity.email)
        updated = current.model_copy(
            update={
                "total_score": current.total_score + int(score),
                "streak": current.streak + 1,
                "last_interview_date": self._now(),
            }
        )
        self._save_profile(updated)
        return updated

    # exams --------------------------------------------------------------

    def lookup_exam_by_code(self, code: Optional[str]) -> Optional[ExamConfig]:
        if not code or not code.strip():
            return None
        try:
            return exam_store.get_exam(code.strip().upper())
        except Exception:  # noqa: BLE001
            logger.exception("Exam lookup failed for code %s", code)
            return None

    @staticmethod
    def is_invited(exam: Optional[ExamConfig], email: Optional[str]) -> bool:
        if exam is None or not email:
            return False
        if not exam.invited_emails:
            return True
        wanted = email.strip().lower()
        return any(invited.strip().lower() == wanted for invited in exam.invited_emails)

    def exams_by_recruiter(self, email: str) -> List[ExamConfig]:
        try:
            return exam_store.exams_by_creator(email)
        except Exception:  # noqa: BLE001
            logger.exception("Listing exams failed for %s", email)
            return []

    def begin_exam_attempt(self, email: str, exam: ExamConfig) -> None:
        self._exam_attempts[email.strip().lower()] = exam.id

    def active_exam_for(self, email: Optional[str]) -> Optional[str]:
        if not email:
            return None
        return self._exam_attempts.get(email.strip().lower())

    def end_exam_attempt(self, email: Optional[str]) -> None:
        """Log the candidate out of the exam context they entered with."""

        if email:
            self._exam_attempts.pop(email.strip().lower(), None)

    # sessions -----------------------------------------------------------

    def record_session_completion(self, session: Session) -> bool:
        try:
            session_store.insert_session(session)
        except Exception:  # noqa: BLE001
            logger.exception("Persisting session %s failed", session.id)
            return False
        logger.info("Persisted session %s status=%s answers=%d", session.id, session.status.value, len(session.answers))
        return True

    def list_sessions(self, email: Optional[str] = None, *, limit: Optional[int] = None) -> List[Session]:
        if email is None and limit is None:
            limit = DEFAULT_SESSION_LIMIT
        try:
            return session_store.list_sessions(user_email=email, limit=limit)
        except Exception:  # noqa: BLE001
            logger.exception("Listing sessions failed")
            return []

    def sessions_for_exam(self, exam_id: str) -> List[Session]:
        try:
            return session_store.list_sessions(exam_id=exam_id)
        except Exception:  # noqa: BLE001
            logger.exception("Listing sessions failed for exam %s", exam_id)
            return []

    # companies ----------------------------------------------------------

    def get_company(self, recruiter_email: str) -> CompanyProfile:
        try:
            company = company_store.get_company(recruiter_email)
        except Exception:  # noqa: BLE001
            logger.exception("Company lookup failed for %s", recruiter_email)
            company = None
        return company or CompanyProfile()

    def save_company(self, recruiter_email: str, company: CompanyProfile) -> None:
        try:
            company_store.save_company(recruiter_email, company)
        except Exception:  # noqa: BLE001
            logger.exception("Saving company failed for %s", recruiter_email)


__all__ = ["AccessShell", "guest_profile"]
