"""Evaluation gateway wrapping the generative provider behind fixed contracts."""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel

from config.registry import (
    ANSWER_EVAL_KEY,
    CODE_REVIEW_KEY,
    CODING_KEY,
    QUESTIONS_KEY,
    RESUME_KEY,
    get_model,
)
from config.settings import settings
from domain import (
    Category,
    CodeReview,
    CodingChallenge,
    Difficulty,
    EvaluationResult,
    Question,
    ResumeAnalysis,
    StarterCode,
    clamp_score,
)
from llm_gateway import LlmGatewayError

from . import fallbacks, prompts
from .retry import RetryPolicy
from .schemas import (
    AnswerEvaluationDraft,
    CodeReviewDraft,
    CodingChallengeDraft,
    QuestionBatch,
    ResumeAnalysisDraft,
)

logger = logging.getLogger(__name__)

W = TypeVar("W", bound=BaseModel)

POINTS_BY_DIFFICULTY = {"Hard": 150, "Medium": 100}
DEFAULT_POINTS = 50


def _millis() -> int:
    return int(time.time() * 1000)


def _invoke(key: str, prompt: str, schema: Type[W]) -> W:
    """Call the provider bound to ``key`` and validate its reply."""

    llm = get_model(key)
    raw: Any = llm(prompt=prompt, schema=schema)
    if isinstance(raw, BaseModel):
        raw = raw.model_dump(by_alias=True)
    return schema.model_validate(raw)


def _difficulty(raw: str, default: Difficulty) -> Difficulty:
    try:
        return Difficulty(str(raw).strip().upper())
    except ValueError:
        return default


class EvaluationGateway:
    """Question generation and scoring with retry-then-fallback semantics."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        *,
        question_count: Optional[int] = None,
        clock: Callable[[], int] = _millis,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self.question_count = question_count or settings.QUESTIONS_PER_SESSION
        self._clock = clock

    def generate_questions(self, role: str, category: Category, difficulty: Difficulty) -> List[Question]:
        def _live() -> List[Question]:
            batch = _invoke(
                QUESTIONS_KEY,
                prompts.question_prompt(role, category, difficulty, self.question_count),
                QuestionBatch,
            )
            if not batch.questions:
                raise LlmGatewayError("Provider returned no questions")
            stamp = self._clock()
            return [
                Question(
                    id=f"q-{stamp}-{idx}",
                    text=draft.text,
                    category=category,
                    difficulty=_difficulty(draft.difficulty, difficulty),
                    ideal_keywords=list(draft.ideal_keywords),
                )
                for idx, draft in enumerate(batch.questions[: self.question_count])
            ]

        return self.policy.run(
            "generate_questions",
            _live,
            lambda: fallbacks.fallback_questions(role, category)[: settings.FALLBACK_QUESTION_COUNT],
        )

    def generate_coding_challenge(self, role: str) -> CodingChallenge:
        def _live() -> CodingChallenge:
            draft = _invoke(CODING_KEY, prompts.coding_prompt(role), CodingChallengeDraft)
            return CodingChallenge(
                id=f"code-{self._clock()}",
                title=draft.title,
                difficulty=draft.difficulty,
                points=POINTS_BY_DIFFICULTY.get(draft.difficulty, DEFAULT_POINTS),
                description=draft.description,
                starter_code=StarterCode(**draft.starter_code.model_dump()),
            )

        return self.policy.run("generate_coding_challenge", _live, fallbacks.fallback_coding_challenge)

    def evaluate_answer(self, question: str, answer_text: str, category: Category) -> EvaluationResult:
        def _live() -> EvaluationResult:
            draft = _invoke(
                ANSWER_EVAL_KEY,
                prompts.answer_prompt(question, answer_text, category),
                AnswerEvaluationDraft,
            )
            return EvaluationResult(
                score=clamp_score(draft.score),
                relevance=clamp_score(draft.relevance),
                correctness=clamp_score(draft.correctness),
                grammar=clamp_score(draft.grammar),
                sentiment=draft.sentiment,
                feedback=draft.feedback,
                strengths=list(draft.strengths),
                weaknesses=list(draft.weaknesses),
                ideal_answer=draft.ideal_answer,
            )

        return self.policy.run(
            "evaluate_answer",
            _live,
            lambda: fallbacks.fallback_evaluation(answer_text),
        )

    def validate_code(self, problem: str, language: str, code: str) -> CodeReview:
        def _live() -> CodeReview:
            draft = _invoke(
                CODE_REVIEW_KEY,
                prompts.code_review_prompt(problem, language, code),
                CodeReviewDraft,
            )
            return CodeReview(
                status=draft.status,
                time_complexity=draft.time_complexity,
                space_complexity=draft.space_complexity,
                feedback=draft.feedback,
                score=clamp_score(draft.score),
                optimal_solution=draft.optimal_solution,
            )

        return self.policy.run("validate_code", _live, fallbacks.fallback_code_review)

    def analyze_resume(self, resume_text: str, target_job: str) -> ResumeAnalysis:
        def _live() -> ResumeAnalysis:
            draft = _invoke(RESUME_KEY, prompts.resume_prompt(resume_text, target_job), ResumeAnalysisDraft)
            return ResumeAnalysis(
                score=clamp_score(draft.score),
                summary=draft.summary,
                suggested_improvements=list(draft.suggested_improvements),
                matching_score=clamp_score(draft.matching_score),
                skill_gaps=list(draft.skill_gaps),
                suggested_roles=list(draft.suggested_roles),
            )

        return self.policy.run(
            "analyze_resume",
            _live,
            lambda: fallbacks.fallback_resume_analysis(target_job),
        )


__all__ = ["EvaluationGateway", "POINTS_BY_DIFFICULTY"]
