from config.registry import ANSWER_EVAL_KEY, CODING_KEY, QUESTIONS_KEY, bind_model
from domain import Category, Difficulty
from evaluation_gateway import EvaluationGateway, RetryPolicy
from llm_gateway import LlmRateLimitError


def _gateway(**kwargs):
    return EvaluationGateway(RetryPolicy(sleep=lambda _: None), clock=lambda: 1700000000000, **kwargs)


def test_live_questions_are_capped_and_stamped(fake_models):
    bind_model(
        QUESTIONS_KEY,
        lambda **_: {"questions": [{"text": f"Q{i}", "difficulty": "expert"} for i in range(7)]},
    )
    questions = _gateway().generate_questions("Backend Developer", Category.TECHNICAL, Difficulty.BEGINNER)
    assert len(questions) == 5
    assert questions[0].id == "q-1700000000000-0"
    assert questions[4].id == "q-1700000000000-4"
    assert questions[0].difficulty is Difficulty.EXPERT
    assert all(q.category is Category.TECHNICAL for q in questions)


def test_unbound_provider_serves_three_fallback_questions():
    questions = _gateway().generate_questions("Data Analyst", Category.SYSTEM_DESIGN, Difficulty.EXPERT)
    assert len(questions) == 3
    assert "Data Analyst" in questions[0].text


def test_aptitude_fallback_uses_puzzles():
    questions = _gateway().generate_questions("QA Engineer", Category.APTITUDE, Difficulty.BEGINNER)
    assert len(questions) == 3
    assert all(q.category is Category.APTITUDE for q in questions)
    assert "bat and a ball" in questions[0].text


def test_empty_batch_falls_back():
    bind_model(QUESTIONS_KEY, lambda **_: {"questions": []})
    questions = _gateway().generate_questions("Software Engineer", Category.TECHNICAL, Difficulty.INTERMEDIATE)
    assert len(questions) == 3


def test_evaluation_scores_are_clamped(fake_models):
    bind_model(
        ANSWER_EVAL_KEY,
        lambda **_: {
            "score": 140,
            "relevance": -5,
            "correctness": 99.5,
            "grammar": 80,
            "sentiment": "Positive",
            "feedback": "ok",
            "strengths": [],
            "weaknesses": [],
            "idealAnswer": "ideal",
        },
    )
    result = _gateway().evaluate_answer("What is a mutex?", "A lock.", Category.TECHNICAL)
    assert result.score == 100
    assert result.relevance == 0
    assert result.correctness == 100
    assert result.ideal_answer == "ideal"


def test_evaluation_fallback_rewards_long_answers():
    long_answer = "A mutex serialises access to a shared resource across threads."
    result = _gateway().evaluate_answer("What is a mutex?", long_answer, Category.TECHNICAL)
    assert result.score == 75
    assert result.relevance == 70
    assert result.grammar == 100


def test_evaluation_fallback_zero_for_short_answers():
    result = _gateway().evaluate_answer("What is a mutex?", "A lock", Category.TECHNICAL)
    assert result.score == 0


def test_evaluation_retries_throttled_provider(fake_models):
    calls = {"n": 0}

    def _throttled(**_):
        calls["n"] += 1
        if calls["n"] < 3:
            raise LlmRateLimitError("429")
        return {
            "score": 64,
            "relevance": 60,
            "correctness": 60,
            "grammar": 60,
            "sentiment": "Neutral",
            "feedback": "fine",
            "strengths": [],
            "weaknesses": [],
            "idealAnswer": "",
        }

    bind_model(ANSWER_EVAL_KEY, _throttled)
    result = _gateway().evaluate_answer("q", "a", Category.TECHNICAL)
    assert result.score == 64
    assert calls["n"] == 3


def test_coding_challenge_points_follow_difficulty(fake_models):
    challenge = _gateway().generate_coding_challenge("Software Engineer")
    assert challenge.points == 150
    assert challenge.starter_code.python == "def f(): pass"

    bind_model(
        CODING_KEY,
        lambda **_: {
            "title": "Easy one",
            "difficulty": "Easy",
            "description": "d",
            "starterCode": {"python": "", "java": "", "cpp": ""},
        },
    )
    assert _gateway().generate_coding_challenge("Software Engineer").points == 50


def test_coding_challenge_fallback():
    challenge = _gateway().generate_coding_challenge("Software Engineer")
    assert challenge.title == "Optimized Array Search"
    assert challenge.difficulty == "Medium"
    assert challenge.points == 100


def test_code_review_live_and_fallback(fake_models):
    review = _gateway().validate_code("two sum", "python", "def f(): ...")
    assert review.status == "Accepted"
    assert review.score == 100


def test_code_review_fallback_when_unbound():
    review = _gateway().validate_code("two sum", "python", "def f(): ...")
    assert review.status == "System Busy"
    assert review.score == 80


def test_resume_fallback_lists_target_job():
    analysis = _gateway().analyze_resume("Python, SQL", "Data Engineer")
    assert analysis.score == 50
    assert analysis.matching_score == 50
    assert analysis.suggested_roles[0] == "Data Engineer"


def test_resume_live(fake_models):
    analysis = _gateway().analyze_resume("Python, SQL", "Backend Developer")
    assert analysis.matching_score == 65
    assert analysis.skill_gaps == ["Kubernetes"]


def test_fallback_question_count_follows_settings(monkeypatch):
    from config.settings import settings

    monkeypatch.setattr(settings, "FALLBACK_QUESTION_COUNT", 2)
    questions = _gateway().generate_questions("Data Analyst", Category.TECHNICAL, Difficulty.BEGINNER)
    assert len(questions) == 2
