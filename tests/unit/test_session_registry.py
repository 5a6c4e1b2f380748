import re

import pytest

from access import AccessDeniedError, AccessShell
from domain import Category, Difficulty, ExamConfig, SessionStatus, UserRole
from evaluation_gateway import EvaluationGateway, RetryPolicy
from interview_session import QuestionGenerationError
from services.sessions import SessionRegistry


def _registry(fake_timer, gateway=None, **kwargs):
    def _factory(*args, **kw):
        from interview_session import SessionMachine

        return SessionMachine(*args, timer_factory=fake_timer, **kw)

    gateway = gateway or EvaluationGateway(RetryPolicy(sleep=lambda _: None))
    return SessionRegistry(
        AccessShell(), gateway, machine_factory=_factory, clock_ms=lambda: 1700000000123, **kwargs
    )


def _exam(exam_id="EXAM01"):
    return ExamConfig(
        id=exam_id,
        company_name="Acme",
        role="QA Engineer",
        category=Category.APTITUDE,
        difficulty=Difficulty.BEGINNER,
        created_at=1,
        creator_email="hr@acme.com",
    )


def _run_practice(registry, identity):
    machine = registry.new_practice_session(identity)
    machine.start()
    machine.accept_guidelines(True)
    machine.begin()
    for _ in machine.questions:
        machine.submit("A reasonably detailed answer about the topic.")
    machine.finalize()
    return machine


class EmptyQuestions:
    def generate_questions(self, role, category, difficulty):
        return []

    def evaluate_answer(self, question, answer_text, category):
        raise AssertionError("not reached")


def test_practice_completion_is_persisted(fake_timer, fake_models):
    registry = _registry(fake_timer)
    identity = registry.access.sign_in("cand@example.com", UserRole.CANDIDATE, name="Cand", signup=True)
    machine = _run_practice(registry, identity)

    stored = registry.stored_session(machine.session_id)
    assert re.fullmatch(r"s-1700000000123-[0-9a-f]{6}", stored.id)
    assert stored.user_email == "cand@example.com"
    assert stored.candidate_name == "Cand"
    assert stored.status is SessionStatus.COMPLETED
    persisted = registry.access.list_sessions("cand@example.com")
    assert [s.id for s in persisted] == [stored.id]
    profile = registry.access.resolve_active_identity("cand@example.com")
    assert profile.streak == 5
    assert profile.total_score == 5 * 82


def test_sessions_finished_in_same_millisecond_keep_distinct_ids(fake_timer, fake_models):
    registry = _registry(fake_timer)
    identity = registry.access.sign_in("cand@example.com", UserRole.CANDIDATE, signup=True)
    first = _run_practice(registry, identity)
    second = _run_practice(registry, identity)

    ids = {registry.stored_session(first.session_id).id, registry.stored_session(second.session_id).id}
    assert len(ids) == 2
    persisted = registry.access.list_sessions("cand@example.com")
    assert {s.id for s in persisted} == ids


def test_finished_machine_leaves_live_table_but_stays_reviewable(fake_timer, fake_models):
    registry = _registry(fake_timer)
    identity = registry.access.resolve_active_identity("")
    machine = _run_practice(registry, identity)

    assert registry.live_count == 0
    assert registry.finished_count == 1
    assert registry.get(machine.session_id) is machine
    assert machine.report().total_questions == len(machine.questions)


def test_review_cache_is_bounded(fake_timer, fake_models):
    registry = _registry(fake_timer, review_capacity=2)
    identity = registry.access.resolve_active_identity("")
    machines = [_run_practice(registry, identity) for _ in range(3)]

    assert registry.finished_count == 2
    assert registry.get(machines[0].session_id) is None
    assert registry.stored_session(machines[0].session_id) is None
    assert registry.get(machines[2].session_id) is machines[2]


def test_cancelled_session_is_dropped(fake_timer, fake_models):
    registry = _registry(fake_timer)
    machine = registry.new_practice_session(registry.access.resolve_active_identity(""))
    assert registry.live_count == 1

    registry.cancel(machine)

    assert registry.live_count == 0
    assert registry.get(machine.session_id) is None


def test_exam_session_starts_loaded_and_ends_attempt(fake_timer):
    registry = _registry(fake_timer)
    identity = registry.access.resolve_active_identity("cand@example.com")
    machine = registry.new_exam_session(identity, _exam())
    assert machine.state.kind == "briefing"
    assert len(machine.questions) == 3
    assert registry.access.active_exam_for("cand@example.com") == "EXAM01"

    machine.accept_guidelines(True)
    machine.begin()
    machine.visibility_changed(True)
    machine.finalize()

    assert registry.access.active_exam_for("cand@example.com") is None
    stored = registry.access.sessions_for_exam("EXAM01")
    assert [s.status for s in stored] == [SessionStatus.VIOLATION_TAB_SWITCH]


def test_second_exam_is_refused_while_one_is_open(fake_timer):
    registry = _registry(fake_timer)
    identity = registry.access.resolve_active_identity("cand@example.com")
    registry.new_exam_session(identity, _exam("EXAM01"))

    with pytest.raises(AccessDeniedError):
        registry.new_exam_session(identity, _exam("EXAM02"))
    assert registry.live_count == 1
    assert registry.access.active_exam_for("cand@example.com") == "EXAM01"

    registry.access.end_exam_attempt("cand@example.com")
    registry.new_exam_session(identity, _exam("EXAM02"))
    assert registry.access.active_exam_for("cand@example.com") == "EXAM02"


def test_exam_that_fails_to_load_leaves_nothing_behind(fake_timer):
    registry = _registry(fake_timer, gateway=EmptyQuestions())
    identity = registry.access.resolve_active_identity("cand@example.com")

    with pytest.raises(QuestionGenerationError):
        registry.new_exam_session(identity, _exam())

    assert registry.live_count == 0
    assert registry.access.active_exam_for("cand@example.com") is None
