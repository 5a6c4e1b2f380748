import pytest

from domain import (
    SKIPPED_ANSWER,
    Category,
    Difficulty,
    EvaluationResult,
    ExamConfig,
    Profile,
    Question,
    SessionStatus,
)
from interview_session import (
    Active,
    Briefing,
    Configuring,
    ConsentRequiredError,
    IllegalTransitionError,
    QuestionGenerationError,
    Reviewing,
    SessionMachine,
    Suspended,
)
from interview_session.machine import EMPTY_ANSWER_PROMPT, SKIPPED_ANSWER_PROMPT


class FakeGateway:
    def __init__(self, count=3, score=80, on_evaluate=None, questions_error=None):
        self.count = count
        self.score = score
        self.on_evaluate = on_evaluate
        self.questions_error = questions_error
        self.evaluated = []
        self.requested = []

    def generate_questions(self, role, category, difficulty):
        self.requested.append((role, category, difficulty))
        if self.questions_error is not None:
            raise self.questions_error
        return [
            Question(id=f"q-{i}", text=f"Question {i}", category=category, difficulty=difficulty)
            for i in range(self.count)
        ]

    def evaluate_answer(self, question, answer_text, category):
        self.evaluated.append((question, answer_text))
        if self.on_evaluate is not None:
            self.on_evaluate()
        return EvaluationResult(score=self.score, feedback="ok", ideal_answer=f"Ideal for {question}")


class FakeScores:
    def __init__(self):
        self.recorded = []

    def record_answer_score(self, identity, score):
        self.recorded.append(score)
        return identity.model_copy(update={"total_score": identity.total_score + score})


def _exam():
    return ExamConfig(
        id="abc123",
        company_name="Acme",
        role="Backend Developer",
        category=Category.CODING,
        difficulty=Difficulty.EXPERT,
        created_at=1,
        creator_email="hr@acme.com",
    )


def _machine(fake_timer, gateway=None, exam=None, **kwargs):
    identity = Profile(email="cand@example.com", name="Cand", target_role="Data Scientist")
    return SessionMachine(
        identity,
        gateway or FakeGateway(),
        kwargs.pop("scores", FakeScores()),
        exam=exam,
        question_seconds=180,
        timer_factory=fake_timer,
        clock_ms=lambda: 1234,
        **kwargs,
    )


def _to_active(machine):
    machine.start()
    machine.accept_guidelines(True)
    machine.begin()


def test_defaults_come_from_identity(fake_timer):
    machine = _machine(fake_timer)
    assert machine.role == "Data Scientist"
    assert machine.category is Category.TECHNICAL
    assert machine.difficulty is Difficulty.INTERMEDIATE
    assert isinstance(machine.state, Configuring)


def test_exam_settings_are_authoritative(fake_timer):
    gateway = FakeGateway()
    machine = _machine(fake_timer, gateway=gateway, exam=_exam())
    machine.start()
    assert gateway.requested == [("Backend Developer", Category.CODING, Difficulty.EXPERT)]
    with pytest.raises(IllegalTransitionError):
        machine.configure("Frontend Developer", Category.TECHNICAL, Difficulty.BEGINNER)


def test_full_practice_flow(fake_timer):
    scores = FakeScores()
    emitted = []
    machine = _machine(fake_timer, scores=scores, on_complete=emitted.append)
    machine.configure("Cloud Engineer", Category.SYSTEM_DESIGN, Difficulty.EXPERT)
    questions = machine.start()
    assert len(questions) == 3
    assert isinstance(machine.state, Briefing)

    with pytest.raises(ConsentRequiredError):
        machine.begin()
    machine.accept_guidelines(True)
    first = machine.begin()
    assert first.id == "q-0"
    assert machine.state == Active(index=0)
    assert fake_timer.created[-1].started

    for idx in range(3):
        record = machine.submit(f"answer {idx}")
        assert record is not None
    assert isinstance(machine.state, Reviewing)
    assert scores.recorded == [80, 80, 80]

    emission = machine.finalize()
    assert emission.status is SessionStatus.COMPLETED
    assert emission.category is Category.SYSTEM_DESIGN
    assert emission.start_time == 1234
    assert len(emission.answers) == 3
    assert emitted == [emission]

    with pytest.raises(IllegalTransitionError):
        machine.finalize()
    assert len(emitted) == 1


def test_empty_answer_is_evaluated_as_no_answer(fake_timer):
    gateway = FakeGateway(count=1)
    machine = _machine(fake_timer, gateway=gateway)
    _to_active(machine)
    record = machine.submit("")
    assert gateway.evaluated == [("Question 0", EMPTY_ANSWER_PROMPT)]
    assert record.answer_text == ""


def test_pass_records_zero_with_reference_answer(fake_timer):
    gateway = FakeGateway(count=2)
    scores = FakeScores()
    machine = _machine(fake_timer, gateway=gateway, scores=scores)
    _to_active(machine)
    record = machine.pass_question()
    assert record.answer_text == SKIPPED_ANSWER
    assert record.skipped
    assert record.score == 0
    assert record.evaluation.ideal_answer == "Ideal for Question 0"
    assert gateway.evaluated[0][1] == SKIPPED_ANSWER_PROMPT
    assert scores.recorded == [0]
    assert machine.state == Active(index=1)


def test_timer_expiry_auto_submits_empty_answer(fake_timer):
    gateway = FakeGateway(count=2)
    machine = _machine(fake_timer, gateway=gateway)
    _to_active(machine)
    fake_timer.created[-1].fire()
    assert len(machine.answers) == 1
    assert machine.answers[0].answer_text == ""
    assert machine.state == Active(index=1)
    assert fake_timer.created[0].cancelled


def test_stale_timer_is_ignored(fake_timer):
    machine = _machine(fake_timer, gateway=FakeGateway(count=2))
    _to_active(machine)
    first_timer = fake_timer.created[-1]
    machine.submit("manual answer")
    first_timer.fire()
    assert len(machine.answers) == 1
    assert machine.state == Active(index=1)


def test_submit_racing_timer_yields_one_record(fake_timer):
    holder = {}

    def _race():
        fake_timer.created[0].fire()
        holder["second"] = holder["machine"].submit("again")

    gateway = FakeGateway(count=1, on_evaluate=_race)
    machine = _machine(fake_timer, gateway=gateway)
    holder["machine"] = machine
    _to_active(machine)
    record = machine.submit("first")
    assert record is not None
    assert holder["second"] is None
    assert len(machine.answers) == 1
    assert isinstance(machine.state, Reviewing)


def test_failed_evaluation_releases_question(fake_timer):
    failures = [RuntimeError("provider exploded")]

    def _fail_once():
        if failures:
            raise failures.pop()

    machine = _machine(fake_timer, gateway=FakeGateway(count=2, on_evaluate=_fail_once))
    _to_active(machine)
    timers_before = len(fake_timer.created)

    with pytest.raises(RuntimeError):
        machine.submit("first try")

    assert machine.state == Active(index=0)
    assert machine.answers == []
    assert len(fake_timer.created) == timers_before + 1
    assert fake_timer.created[-1].started
    record = machine.submit("second try")
    assert record is not None
    assert record.answer_text == "second try"
    assert machine.state == Active(index=1)


def test_suspension_discards_in_flight_evaluation(fake_timer):
    holder = {}
    gateway = FakeGateway(count=3, on_evaluate=lambda: holder["machine"].visibility_changed(True))
    scores = FakeScores()
    emitted = []
    machine = _machine(fake_timer, gateway=gateway, exam=_exam(), scores=scores, on_complete=emitted.append)
    holder["machine"] = machine
    machine.start()
    machine.accept_guidelines(True)
    machine.begin()

    assert machine.submit("answer") is None
    assert machine.state == Suspended(interrupted_at=0)
    assert machine.answers == []
    assert scores.recorded == []

    emission = machine.finalize()
    assert emission.status is SessionStatus.VIOLATION_TAB_SWITCH
    assert emission.exam_id == "ABC123"
    assert emission.answers == []


def test_violation_keeps_answers_recorded_before_interrupt(fake_timer):
    machine = _machine(fake_timer, exam=_exam())
    _to_active(machine)
    machine.submit("first")
    assert machine.visibility_changed(True) is True
    assert machine.visibility_changed(True) is False
    assert machine.state == Suspended(interrupted_at=1)
    with pytest.raises(IllegalTransitionError):
        machine.submit("late")
    emission = machine.finalize()
    assert len(emission.answers) == 1
    assert emission.status is SessionStatus.VIOLATION_TAB_SWITCH


def test_visibility_ignored_outside_exam_or_active(fake_timer):
    practice = _machine(fake_timer)
    _to_active(practice)
    assert practice.visibility_changed(True) is False
    assert isinstance(practice.state, Active)

    exam = _machine(fake_timer, exam=_exam())
    exam.start()
    assert exam.visibility_changed(True) is False
    exam.accept_guidelines(True)
    exam.begin()
    assert exam.visibility_changed(False) is False
    assert isinstance(exam.state, Active)


def test_exam_session_cannot_be_cancelled(fake_timer):
    machine = _machine(fake_timer, exam=_exam())
    machine.start()
    with pytest.raises(IllegalTransitionError):
        machine.cancel()


def test_practice_session_cancel_closes_it(fake_timer):
    machine = _machine(fake_timer)
    machine.cancel()
    assert machine.closed
    with pytest.raises(IllegalTransitionError):
        machine.start()


def test_zero_questions_returns_to_configuring(fake_timer):
    machine = _machine(fake_timer, gateway=FakeGateway(count=0))
    with pytest.raises(QuestionGenerationError):
        machine.start()
    assert isinstance(machine.state, Configuring)
    assert machine.state.error


def test_gateway_exception_returns_to_configuring(fake_timer):
    machine = _machine(fake_timer, gateway=FakeGateway(questions_error=RuntimeError("boom")))
    with pytest.raises(QuestionGenerationError):
        machine.start()
    assert machine.state == Configuring(error="boom")


def test_report_summarises_answers(fake_timer):
    gateway = FakeGateway(count=2, score=75)
    machine = _machine(fake_timer, gateway=gateway)
    _to_active(machine)
    with pytest.raises(IllegalTransitionError):
        machine.report()
    machine.submit("one")
    gateway.score = 80
    machine.submit("two")
    report = machine.report()
    assert report.average_score == 78
    assert report.answered == 2
    assert [item.number for item in report.breakdown] == [1, 2]


def test_snapshot_exposes_current_question(fake_timer):
    machine = _machine(fake_timer, exam=_exam())
    _to_active(machine)
    snap = machine.snapshot()
    assert snap.proctored
    assert snap.question.id == "q-0"
    assert snap.question_number == 1
    assert snap.total_questions == 3
    assert snap.company_name == "Acme"
    assert 0 < snap.seconds_remaining <= 180


def test_real_timer_expiry_and_concurrent_submits_record_once():
    import threading
    import time

    machine = SessionMachine(
        Profile(email="t@example.com"),
        FakeGateway(count=1),
        FakeScores(),
        question_seconds=0.05,
    )
    _to_active(machine)

    def _submit(text):
        try:
            machine.submit(text)
        except IllegalTransitionError:
            pass

    workers = [threading.Thread(target=_submit, args=(f"answer {i}",)) for i in range(4)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()
    deadline = time.monotonic() + 2
    while not isinstance(machine.state, Reviewing) and time.monotonic() < deadline:
        time.sleep(0.01)
    time.sleep(0.1)
    assert isinstance(machine.state, Reviewing)
    assert len(machine.answers) == 1
