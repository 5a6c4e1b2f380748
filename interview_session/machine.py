"""State machine driving one candidate through an interview or exam attempt."""
from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Callable, List, Optional, Protocol

from pydantic import BaseModel, Field

from config.settings import settings
from domain import (
    SKIPPED_ANSWER,
    SUPPORTED_ROLES,
    AnswerRecord,
    Category,
    Difficulty,
    EvaluationResult,
    ExamConfig,
    Profile,
    Question,
    SessionStatus,
)
from observability import log_event
from session_reports.models import SessionReport, build_report

from .errors import ConsentRequiredError, IllegalTransitionError, QuestionGenerationError
from .states import (
    Active,
    Briefing,
    Configuring,
    Loading,
    Reviewing,
    SessionState,
    Suspended,
    can_transition,
)
from .timer import QuestionTimer, TimerFactory

logger = logging.getLogger(__name__)

EMPTY_ANSWER_PROMPT = "No answer provided."
SKIPPED_ANSWER_PROMPT = "The candidate skipped this question."
NO_QUESTIONS_ERROR = "Failed to generate questions."


class Gateway(Protocol):
    def generate_questions(self, role: str, category: Category, difficulty: Difficulty) -> List[Question]: ...

    def evaluate_answer(self, question: str, answer_text: str, category: Category) -> EvaluationResult: ...


class ScoreSink(Protocol):
    def record_answer_score(self, identity: Profile, score: int) -> Profile: ...


class SessionEmission(BaseModel):
    """Completed attempt handed back to the caller for id assignment and storage."""

    category: Category
    answers: List[AnswerRecord] = Field(default_factory=list)
    start_time: int
    exam_id: Optional[str] = None
    status: SessionStatus


class SessionSnapshot(BaseModel):
    session_id: str
    state: SessionState
    role: str
    category: Category
    difficulty: Difficulty
    exam_id: Optional[str] = None
    company_name: Optional[str] = None
    proctored: bool
    question: Optional[Question] = None
    question_number: Optional[int] = None
    total_questions: int
    seconds_remaining: Optional[float] = None
    answers: List[AnswerRecord] = Field(default_factory=list)
    closed: bool


def _now_ms() -> int:
    return int(time.time() * 1000)


def _skip_evaluation(ideal_answer: str) -> EvaluationResult:
    return EvaluationResult(
        score=0,
        relevance=0,
        correctness=0,
        grammar=0,
        sentiment="Neutral",
        feedback="Question was passed by the candidate. Zero score attributed for this task.",
        strengths=[],
        weaknesses=["Question was not attempted."],
        ideal_answer=ideal_answer,
    )


class SessionMachine:
    """Configuring -> Loading -> Briefing -> Active(i) -> Reviewing, with Suspended off Active.

    The identity is passed in explicitly and every operation runs under one
    re-entrant lock. Gateway evaluation happens outside the lock after the
    current question has been claimed, so a proctoring interrupt can preempt
    it; the result of an evaluation that returns after suspension is dropped.
    """

    def __init__(
        self,
        identity: Profile,
        gateway: Gateway,
        scores: ScoreSink,
        *,
        exam: Optional[ExamConfig] = None,
        question_seconds: Optional[float] = None,
        timer_factory: TimerFactory = threading.Timer,
        on_complete: Optional[Callable[[SessionEmission], None]] = None,
        clock_ms: Callable[[], int] = _now_ms,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex
        self.identity = identity
        self.exam = exam
        self._gateway = gateway
        self._scores = scores
        self._on_complete = on_complete
        self._clock_ms = clock_ms
        self._lock = threading.RLock()

        if exam is not None:
            self.role = exam.role
            self.category = exam.category
            self.difficulty = exam.difficulty
        else:
            self.role = identity.target_role or SUPPORTED_ROLES[0]
            self.category = Category.TECHNICAL
            self.difficulty = Difficulty.INTERMEDIATE

        self._state: SessionState = Configuring()
        self._questions: List[Question] = []
        self._answers: List[AnswerRecord] = []
        self._claimed: Optional[int] = None
        self._start_time = clock_ms()
        self._closed = False
        self._emission: Optional[SessionEmission] = None
        self._timer = QuestionTimer(
            settings.QUESTION_SECONDS if question_seconds is None else question_seconds,
            self._on_timer_expired,
            factory=timer_factory,
        )

    # introspection ------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def proctored(self) -> bool:
        return self.exam is not None

    @property
    def questions(self) -> List[Question]:
        return list(self._questions)

    @property
    def answers(self) -> List[AnswerRecord]:
        with self._lock:
            return list(self._answers)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def emission(self) -> Optional[SessionEmission]:
        return self._emission

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            question = None
            number = None
            remaining = None
            if isinstance(self._state, Active):
                question = self._questions[self._state.index]
                number = self._state.index + 1
                remaining = round(self._timer.remaining(), 1)
            return SessionSnapshot(
                session_id=self.session_id,
                state=self._state,
                role=self.role,
                category=self.category,
                difficulty=self.difficulty,
                exam_id=self.exam.id if self.exam else None,
                company_name=self.exam.company_name if self.exam else None,
                proctored=self.proctored,
                question=question,
                question_number=number,
                total_questions=len(self._questions),
                seconds_remaining=remaining,
                answers=list(self._answers),
                closed=self._closed,
            )

    def report(self) -> SessionReport:
        with self._lock:
            if not isinstance(self._state, (Reviewing, Suspended)):
                raise IllegalTransitionError("report", self._state.kind)
            status = self._emission.status if self._emission else self._terminal_status()
            return build_report(
                self._answers,
                category=self.category,
                role=self.role,
                total_questions=len(self._questions),
                status=status,
                exam_id=self.exam.id if self.exam else None,
                candidate_name=self.identity.name or None,
            )

    # transitions --------------------------------------------------------

    def _ensure_open(self, action: str) -> None:
        if self._closed:
            raise IllegalTransitionError(action, "closed")

    def _move(self, target: SessionState, **fields: object) -> None:
        current = self._state.kind
        if not can_transition(current, target.kind):
            raise IllegalTransitionError(f"move to {target.kind}", current)
        self._state = target
        log_event(
            "session_transition",
            self.session_id,
            from_state=current,
            to_state=target.kind,
            exam_id=self.exam.id if self.exam else None,
            **fields,
        )

    def configure(self, role: str, category: Category, difficulty: Difficulty) -> None:
        with self._lock:
            self._ensure_open("configure")
            if self.proctored:
                raise IllegalTransitionError("configure an exam session", self._state.kind)
            if not isinstance(self._state, Configuring):
                raise IllegalTransitionError("configure", self._state.kind)
            self.role = role
            self.category = category
            self.difficulty = difficulty

    def start(self) -> List[Question]:
        """Leave configuration and load questions from the gateway."""

        with self._lock:
            self._ensure_open("start")
            if not isinstance(self._state, Configuring):
                raise IllegalTransitionError("start", self._state.kind)
            self._move(Loading())
            role, category, difficulty = self.role, self.category, self.difficulty

        try:
            questions = self._gateway.generate_questions(role, category, difficulty)
        except Exception as exc:
            with self._lock:
                self._move(Configuring(error=str(exc) or NO_QUESTIONS_ERROR))
            raise QuestionGenerationError(str(exc) or NO_QUESTIONS_ERROR) from exc

        with self._lock:
            if not questions:
                self._move(Configuring(error=NO_QUESTIONS_ERROR))
                raise QuestionGenerationError(NO_QUESTIONS_ERROR)
            self._questions = list(questions)
            self._move(Briefing(), outcome=f"{len(self._questions)} questions")
            return list(self._questions)

    def accept_guidelines(self, accepted: bool = True) -> None:
        with self._lock:
            self._ensure_open("accept guidelines")
            if not isinstance(self._state, Briefing):
                raise IllegalTransitionError("accept guidelines", self._state.kind)
            self._state = Briefing(consent_given=bool(accepted))

    def begin(self) -> Question:
        with self._lock:
            self._ensure_open("begin")
            if not isinstance(self._state, Briefing):
                raise IllegalTransitionError("begin", self._state.kind)
            if not self._state.consent_given:
                raise ConsentRequiredError()
            self._start_time = self._clock_ms()
            self._enter_question(0)
            return self._questions[0]

    def cancel(self) -> None:
        with self._lock:
            self._ensure_open("cancel")
            if self.proctored:
                raise IllegalTransitionError("cancel an exam session", self._state.kind)
            if not isinstance(self._state, (Configuring, Briefing)):
                raise IllegalTransitionError("cancel", self._state.kind)
            self._closed = True
            log_event("session_cancelled", self.session_id, from_state=self._state.kind)

    def _enter_question(self, index: int) -> None:
        self._claimed = None
        self._move(Active(index=index), question_index=index)
        self._timer.start(index)

    # answering ----------------------------------------------------------

    def submit(self, answer_text: str) -> Optional[AnswerRecord]:
        """Submit the current answer.

        Returns ``None`` when the question was already claimed by a concurrent
        submit or by timer expiry, or when the session was suspended while the
        answer was being evaluated.
        """

        return self._answer(answer_text, source="submit")

    def pass_question(self) -> Optional[AnswerRecord]:
        return self._answer(SKIPPED_ANSWER, source="pass")

    def _on_timer_expired(self, index: int, generation: int) -> None:
        try:
            self._answer("", source="timeout", expected=(index, generation))
        except Exception:  # noqa: BLE001
            logger.exception("Auto-submit failed for session %s question %d", self.session_id, index)

    def _claim(self, action: str, expected: Optional[tuple[int, int]]) -> Optional[int]:
        with self._lock:
            if expected is not None:
                index, generation = expected
                if (
                    self._closed
                    or generation != self._timer.generation
                    or not isinstance(self._state, Active)
                    or self._state.index != index
                ):
                    return None
            else:
                self._ensure_open(action)
                if not isinstance(self._state, Active):
                    raise IllegalTransitionError(action, self._state.kind)
            index = self._state.index
            if self._claimed == index:
                return None
            self._claimed = index
            self._timer.cancel()
            return index

    def _release(self, index: int) -> None:
        """Hand a claimed question back after a failed evaluation and re-arm its timer."""

        with self._lock:
            if self._claimed != index:
                return
            self._claimed = None
            if not self._closed and isinstance(self._state, Active) and self._state.index == index:
                self._timer.start(index)

    def _answer(self, text: str, *, source: str, expected: Optional[tuple[int, int]] = None) -> Optional[AnswerRecord]:
        index = self._claim(source, expected)
        if index is None:
            return None
        question = self._questions[index]

        try:
            if source == "pass":
                reference = self._gateway.evaluate_answer(question.text, SKIPPED_ANSWER_PROMPT, self.category)
                evaluation = _skip_evaluation(reference.ideal_answer)
                answer_text = SKIPPED_ANSWER
            else:
                evaluation = self._gateway.evaluate_answer(question.text, text or EMPTY_ANSWER_PROMPT, self.category)
                answer_text = text
        except Exception:
            self._release(index)
            raise

        with self._lock:
            if self._claimed != index or not isinstance(self._state, Active) or self._state.index != index:
                log_event("answer_discarded", self.session_id, question_index=index, source=source)
                return None
            record = AnswerRecord(
                question_id=question.id,
                question_text=question.text,
                answer_text=answer_text,
                score=evaluation.score,
                evaluation=evaluation,
            )
            self._answers.append(record)
            log_event(
                "answer_recorded",
                self.session_id,
                question_index=index,
                source=source,
                score=record.score,
            )
            self.identity = self._scores.record_answer_score(self.identity, record.score)
            if index + 1 < len(self._questions):
                self._enter_question(index + 1)
            else:
                self._claimed = None
                self._move(Reviewing())
            return record

    # proctoring ---------------------------------------------------------

    def visibility_changed(self, hidden: bool) -> bool:
        """Handle a focus/visibility signal; returns True when it suspended the session."""

        with self._lock:
            if not hidden or not self.proctored or self._closed:
                return False
            if not isinstance(self._state, Active):
                return False
            index = self._state.index
            self._timer.cancel()
            self._claimed = None
            self._move(Suspended(interrupted_at=index), status=SessionStatus.VIOLATION_TAB_SWITCH.value)
            logger.warning(
                "Proctoring violation session=%s exam=%s question=%d answered=%d",
                self.session_id,
                self.exam.id if self.exam else None,
                index,
                len(self._answers),
            )
            return True

    # completion ---------------------------------------------------------

    def _terminal_status(self) -> SessionStatus:
        if isinstance(self._state, Suspended):
            return SessionStatus.VIOLATION_TAB_SWITCH
        return SessionStatus.COMPLETED

    def finalize(self) -> SessionEmission:
        with self._lock:
            self._ensure_open("finalize")
            if not isinstance(self._state, (Reviewing, Suspended)):
                raise IllegalTransitionError("finalize", self._state.kind)
            self._timer.cancel()
            self._closed = True
            self._emission = SessionEmission(
                category=self.category,
                answers=list(self._answers),
                start_time=self._start_time,
                exam_id=self.exam.id if self.exam else None,
                status=self._terminal_status(),
            )
            emission = self._emission
            log_event(
                "session_finalized",
                self.session_id,
                status=emission.status.value,
                exam_id=emission.exam_id,
                outcome=f"{len(emission.answers)}/{len(self._questions)} answered",
            )
        if self._on_complete is not None:
            self._on_complete(emission)
        return emission


__all__ = [
    "EMPTY_ANSWER_PROMPT",
    "SKIPPED_ANSWER_PROMPT",
    "SessionEmission",
    "SessionMachine",
    "SessionSnapshot",
]
