"""Scoring aggregation over completed sessions.

All helpers are pure: they only read the sessions handed to them, so the
dashboard and leaderboard can be recomputed by any number of readers.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from pydantic import BaseModel

from domain import AnswerRecord, Category, LeaderboardEntry, Profile, Session, round_half_up

READINESS_SCORE_WEIGHT = 0.7
READINESS_PER_SESSION = 2
READINESS_BREADTH_BONUS = 10
CONSISTENCY_PER_STREAK = 10
TREND_WINDOW = 10
RECENT_WINDOW = 4


class SkillScore(BaseModel):
    name: str
    value: int


class TrendPoint(BaseModel):
    name: str
    score: int


class DashboardSummary(BaseModel):
    total_sessions: int
    average_score: int
    readiness: int
    total_score: int
    streak: int
    skills: List[SkillScore]
    trend: List[TrendPoint]
    recent: List[Session]


def _mean(values: Sequence[float]) -> float:
    return sum(values) / max(1, len(values))


def answers_average(answers: Sequence[AnswerRecord]) -> int:
    """Rounded mean of answer scores; an empty list averages to 0."""

    return round_half_up(_mean([answer.score for answer in answers]))


def session_average(session: Session) -> int:
    return answers_average(session.answers)


def overall_average(sessions: Sequence[Session]) -> int:
    """Rounded mean of the unrounded per-session means."""

    if not sessions:
        return 0
    raw = [_mean([a.score for a in s.answers]) for s in sessions]
    return round_half_up(_mean(raw))


def has_breadth(sessions: Iterable[Session]) -> bool:
    categories = {session.category for session in sessions}
    return Category.CODING in categories and Category.TECHNICAL in categories


def readiness_index(sessions: Sequence[Session]) -> int:
    if not sessions:
        return 0
    bonus = READINESS_BREADTH_BONUS if has_breadth(sessions) else 0
    raw = overall_average(sessions) * READINESS_SCORE_WEIGHT + len(sessions) * READINESS_PER_SESSION + bonus
    return max(0, min(100, round_half_up(raw)))


def category_average(sessions: Sequence[Session], category: Category) -> int:
    return overall_average([s for s in sessions if s.category == category])


def consistency(streak: int) -> int:
    return max(0, min(100, streak * CONSISTENCY_PER_STREAK))


def skill_matrix(sessions: Sequence[Session], streak: int = 0) -> List[SkillScore]:
    return [
        SkillScore(name="Technical", value=category_average(sessions, Category.TECHNICAL)),
        SkillScore(name="System Design", value=category_average(sessions, Category.SYSTEM_DESIGN)),
        SkillScore(name="Coding", value=category_average(sessions, Category.CODING)),
        SkillScore(name="Consistency", value=consistency(streak)),
    ]


def score_trend(sessions: Sequence[Session]) -> List[TrendPoint]:
    """Per-session averages for the last few sessions, oldest first."""

    if not sessions:
        return [TrendPoint(name="N/A", score=0)]
    return [
        TrendPoint(name="Code" if s.category == Category.CODING else "Mock", score=session_average(s))
        for s in list(sessions)[-TREND_WINDOW:]
    ]


def recent_sessions(sessions: Sequence[Session]) -> List[Session]:
    return list(reversed(list(sessions)[-RECENT_WINDOW:]))


def dashboard_summary(profile: Profile, sessions: Sequence[Session]) -> DashboardSummary:
    """Dashboard metrics for ``sessions`` given oldest first."""

    return DashboardSummary(
        total_sessions=len(sessions),
        average_score=overall_average(sessions),
        readiness=readiness_index(sessions),
        total_score=profile.total_score,
        streak=profile.streak,
        skills=skill_matrix(sessions, profile.streak),
        trend=score_trend(sessions),
        recent=recent_sessions(sessions),
    )


def display_name(session: Session) -> str:
    return session.candidate_name or f"Candidate {session.id[-4:]}"


def leaderboard(
    sessions: Sequence[Session],
    *,
    exam_id: Optional[str] = None,
    exam_ids: Optional[Iterable[str]] = None,
) -> List[LeaderboardEntry]:
    """Rank sessions by average score, keeping input order among ties."""

    selected = list(sessions)
    if exam_id is not None:
        wanted = exam_id.strip().upper()
        selected = [s for s in selected if s.exam_id and s.exam_id.upper() == wanted]
    if exam_ids is not None:
        allowed = {code.strip().upper() for code in exam_ids}
        selected = [s for s in selected if s.exam_id and s.exam_id.upper() in allowed]

    scored = [(session_average(s), s) for s in selected]
    ordered = sorted(scored, key=lambda pair: -pair[0])
    return [
        LeaderboardEntry(rank=idx + 1, name=display_name(s), score=score, exam_id=s.exam_id)
        for idx, (score, s) in enumerate(ordered)
    ]


__all__ = [
    "DashboardSummary",
    "SkillScore",
    "TrendPoint",
    "answers_average",
    "category_average",
    "consistency",
    "dashboard_summary",
    "has_breadth",
    "leaderboard",
    "overall_average",
    "readiness_index",
    "recent_sessions",
    "score_trend",
    "session_average",
    "skill_matrix",
]
