"""Domain records shared across the interview service."""
from .types import (
    SKIPPED_ANSWER,
    SUPPORTED_ROLES,
    AnswerRecord,
    Category,
    CodeReview,
    CodingChallenge,
    CompanyProfile,
    Difficulty,
    EvaluationResult,
    ExamConfig,
    LeaderboardEntry,
    Profile,
    Question,
    ResumeAnalysis,
    Session,
    SessionStatus,
    StarterCode,
    UserRole,
    clamp_score,
    round_half_up,
)

__all__ = [
    "SKIPPED_ANSWER",
    "SUPPORTED_ROLES",
    "AnswerRecord",
    "Category",
    "CodeReview",
    "CodingChallenge",
    "CompanyProfile",
    "Difficulty",
    "EvaluationResult",
    "ExamConfig",
    "LeaderboardEntry",
    "Profile",
    "Question",
    "ResumeAnalysis",
    "Session",
    "SessionStatus",
    "StarterCode",
    "UserRole",
    "clamp_score",
    "round_half_up",
]
