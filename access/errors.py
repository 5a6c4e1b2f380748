"""Errors raised by the identity/access shell."""
from __future__ import annotations


class AccessDeniedError(PermissionError):
    """Entry to a restricted assessment was refused."""

    def __init__(self, reason: str, *, code: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.code = code


INVALID_CODE = "Invalid Access Code. Please check with your recruiter."
NOT_INVITED = "Access Denied: You are not invited to this private assessment."
EXAM_IN_PROGRESS = "An assessment is already in progress for this account. Sign out to leave it."
