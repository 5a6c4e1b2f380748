"""Shared domain types for interviews, exams and profiles."""
from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

SKIPPED_ANSWER = "[SKIPPED]"


class UserRole(str, Enum):
    GUEST = "GUEST"
    CANDIDATE = "CANDIDATE"
    RECRUITER = "RECRUITER"


class Category(str, Enum):
    """Kind of assessment round."""

    TECHNICAL = "TECHNICAL"
    CODING = "CODING"
    SYSTEM_DESIGN = "SYSTEM_DESIGN"
    APTITUDE = "APTITUDE"


class Difficulty(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    EXPERT = "EXPERT"


class SessionStatus(str, Enum):
    COMPLETED = "COMPLETED"
    VIOLATION_TAB_SWITCH = "VIOLATION_TAB_SWITCH"


SUPPORTED_ROLES: List[str] = [
    "Software Engineer",
    "Frontend Developer",
    "Backend Developer",
    "Full Stack Developer",
    "Mobile App Developer",
    "Data Analyst",
    "Data Scientist",
    "Machine Learning Engineer",
    "DevOps Engineer",
    "Cloud Engineer",
    "QA Engineer",
    "Automation Test Engineer",
    "UI/UX Designer",
    "Cybersecurity Engineer",
    "System Administrator",
    "Product Manager",
    "Project Manager",
]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values, matching dashboard rounding."""

    return int(math.floor(float(value) + 0.5))


def clamp_score(value: float) -> int:
    """Round and bound a raw score to the 0..100 range."""

    return max(0, min(100, round_half_up(value)))


class Profile(BaseModel):  # Candidate or recruiter identity record
    email: str = ""
    name: str = "Candidate Name"
    role: UserRole = UserRole.GUEST
    target_role: str = "Software Engineer"
    education: str = "Not Specified"
    skills: List[str] = Field(default_factory=list)
    experience_level: str = "Junior"
    total_score: int = 0
    streak: int = 0
    last_interview_date: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        return value.strip().lower()


class CompanyProfile(BaseModel):  # Recruiter branding shown on exams
    name: str = "My Organization"
    logo: str = ""


class ExamConfig(BaseModel):  # Recruiter-issued assessment template
    id: str
    company_name: str
    company_logo: Optional[str] = None
    role: str
    category: Category
    difficulty: Difficulty
    created_at: int
    creator_email: str
    invited_emails: Optional[List[str]] = None

    @field_validator("id")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.strip().upper()


class Question(BaseModel):
    id: str
    text: str
    category: Category
    difficulty: Difficulty
    ideal_keywords: List[str] = Field(default_factory=list)


class EvaluationResult(BaseModel):
    score: int = Field(ge=0, le=100)
    relevance: int = 0
    correctness: int = 0
    grammar: int = 0
    sentiment: str = "Neutral"
    feedback: str = ""
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    ideal_answer: str = ""


class AnswerRecord(BaseModel):
    question_id: str
    question_text: str
    answer_text: str
    score: int = Field(ge=0, le=100)
    evaluation: EvaluationResult

    @property
    def skipped(self) -> bool:
        return self.answer_text == SKIPPED_ANSWER


class Session(BaseModel):  # One finished interview or assessment attempt
    id: str
    category: Category
    start_time: int
    answers: List[AnswerRecord] = Field(default_factory=list)
    exam_id: Optional[str] = None
    user_email: Optional[str] = None
    candidate_name: Optional[str] = None
    status: SessionStatus = SessionStatus.COMPLETED


class LeaderboardEntry(BaseModel):
    rank: int
    name: str
    score: int
    streak: int = 0
    exam_id: Optional[str] = None


class StarterCode(BaseModel):
    python: str
    java: str
    cpp: str


class CodingChallenge(BaseModel):
    id: str
    title: str
    difficulty: str
    points: int
    description: str
    starter_code: StarterCode


class CodeReview(BaseModel):
    status: str
    time_complexity: str = ""
    space_complexity: str = ""
    feedback: str
    score: int = Field(ge=0, le=100)
    optimal_solution: str


class ResumeAnalysis(BaseModel):
    score: int = Field(ge=0, le=100)
    summary: str
    suggested_improvements: List[str] = Field(default_factory=list)
    matching_score: int = Field(ge=0, le=100)
    skill_gaps: List[str] = Field(default_factory=list)
    suggested_roles: List[str] = Field(default_factory=list)
