"""Provider-facing JSON schemas for the evaluation gateway."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class QuestionDraft(_Wire):
    text: str = Field(min_length=1)
    difficulty: str
    ideal_keywords: List[str] = Field(default_factory=list, alias="idealKeywords")


class QuestionBatch(_Wire):
    questions: List[QuestionDraft]


class StarterCodeDraft(_Wire):
    python: str
    java: str
    cpp: str


class CodingChallengeDraft(_Wire):
    title: str
    difficulty: str
    description: str
    starter_code: StarterCodeDraft = Field(alias="starterCode")


class AnswerEvaluationDraft(_Wire):
    score: float
    relevance: float
    correctness: float
    grammar: float
    sentiment: str
    feedback: str
    strengths: List[str]
    weaknesses: List[str]
    ideal_answer: str = Field(alias="idealAnswer")


class CodeReviewDraft(_Wire):
    status: str
    time_complexity: str = Field(alias="timeComplexity")
    space_complexity: str = Field(alias="spaceComplexity")
    feedback: str
    score: float
    optimal_solution: str = Field(alias="optimalSolution")


class ResumeAnalysisDraft(_Wire):
    score: float
    summary: str
    suggested_improvements: List[str] = Field(alias="suggestedImprovements")
    matching_score: float = Field(alias="matchingScore")
    skill_gaps: List[str] = Field(alias="skillGaps")
    suggested_roles: List[str] = Field(alias="suggestedRoles")
