"""Identity and access shell."""
from .errors import EXAM_IN_PROGRESS, INVALID_CODE, NOT_INVITED, AccessDeniedError
from .shell import AccessShell, guest_profile

__all__ = ["EXAM_IN_PROGRESS", "INVALID_CODE", "NOT_INVITED", "AccessDeniedError", "AccessShell", "guest_profile"]
