from __future__ import annotations  # Review report models for finished attempts

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from domain import AnswerRecord, Category, SessionStatus
from services.scoring import answers_average


class QuestionBreakdown(BaseModel):  # One row of the per-question review
    number: int
    question_text: str
    answer_text: str
    skipped: bool
    score: int
    feedback: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    ideal_answer: str = ""


class SessionReport(BaseModel):  # Aggregate score plus breakdown shown while reviewing
    category: Category
    role: str
    status: Optional[SessionStatus] = None
    exam_id: Optional[str] = None
    candidate_name: Optional[str] = None
    average_score: int
    answered: int
    total_questions: int
    breakdown: List[QuestionBreakdown] = Field(default_factory=list)


def build_report(
    answers: Sequence[AnswerRecord],
    *,
    category: Category,
    role: str,
    total_questions: int,
    status: Optional[SessionStatus] = None,
    exam_id: Optional[str] = None,
    candidate_name: Optional[str] = None,
) -> SessionReport:  # Assemble the review payload from recorded answers
    breakdown = [
        QuestionBreakdown(
            number=idx + 1,
            question_text=answer.question_text,
            answer_text=answer.answer_text,
            skipped=answer.skipped,
            score=answer.score,
            feedback=answer.evaluation.feedback,
            strengths=list(answer.evaluation.strengths),
            weaknesses=list(answer.evaluation.weaknesses),
            ideal_answer=answer.evaluation.ideal_answer,
        )
        for idx, answer in enumerate(answers)
    ]
    return SessionReport(
        category=category,
        role=role,
        status=status,
        exam_id=exam_id,
        candidate_name=candidate_name,
        average_score=answers_average(answers),
        answered=len(answers),
        total_questions=total_questions,
        breakdown=breakdown,
    )


__all__ = ["QuestionBreakdown", "SessionReport", "build_report"]
