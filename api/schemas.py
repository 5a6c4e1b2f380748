"""Pydantic schemas for the HirePulse HTTP API."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from domain import AnswerRecord, Category, Difficulty, UserRole
from interview_session import SessionSnapshot


class SignInReq(BaseModel):
    email: str
    role: UserRole = UserRole.CANDIDATE
    name: Optional[str] = None
    signup: bool = False


class SignOutReq(BaseModel):
    email: Optional[str] = None


class CreateExamReq(BaseModel):
    recruiter_email: str
    role: str
    category: Category
    difficulty: Difficulty
    invited_emails: Optional[List[str]] = None


class PracticeSessionReq(BaseModel):
    email: Optional[str] = None


class ExamSessionReq(BaseModel):
    email: str
    code: str


class ConfigureReq(BaseModel):
    role: str
    category: Category
    difficulty: Difficulty


class ConsentReq(BaseModel):
    accepted: bool = True


class AnswerReq(BaseModel):
    answer_text: str = ""


class VisibilityReq(BaseModel):
    hidden: bool


class VisibilityResp(BaseModel):
    suspended: bool
    snapshot: SessionSnapshot


class AnswerResp(BaseModel):
    record: Optional[AnswerRecord] = None
    snapshot: SessionSnapshot


class CodingChallengeReq(BaseModel):
    role: str = "Software Engineer"


class CodeValidateReq(BaseModel):
    problem: str
    language: str = "python"
    code: str


class ResumeAnalyzeReq(BaseModel):
    resume_text: str = Field(min_length=1)
    target_job: str


class OkResp(BaseModel):
    ok: bool = True
