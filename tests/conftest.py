import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from config.registry import (
    ANSWER_EVAL_KEY,
    CODE_REVIEW_KEY,
    CODING_KEY,
    GATEWAY_KEYS,
    QUESTIONS_KEY,
    RESUME_KEY,
    bind_model,
    unbind_model,
)


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(settings, "LLM_CONFIG_PATH", os.path.join(td.name, "missing.json"), raising=False)
    migrate(db_path)
    try:
        yield
    finally:
        td.cleanup()


@pytest.fixture(autouse=True)
def clean_registry():
    for key in GATEWAY_KEYS:
        unbind_model(key)
    yield
    for key in GATEWAY_KEYS:
        unbind_model(key)


class FakeTimer:
    """Stand-in for threading.Timer that only fires when told to."""

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    return FakeTimer


def question_batch(count=5):
    return {
        "questions": [
            {"text": f"Question {idx}?", "difficulty": "Intermediate", "idealKeywords": ["k"]}
            for idx in range(count)
        ]
    }


def evaluation(score=82, ideal="Reference answer"):
    return {
        "score": score,
        "relevance": 80,
        "correctness": 85,
        "grammar": 90,
        "sentiment": "Positive",
        "feedback": "Solid answer.",
        "strengths": ["Clear"],
        "weaknesses": [],
        "idealAnswer": ideal,
    }


@pytest.fixture
def fake_models():
    bind_model(QUESTIONS_KEY, lambda **_: question_batch())
    bind_model(ANSWER_EVAL_KEY, lambda **_: evaluation())
    bind_model(
        CODING_KEY,
        lambda **_: {
            "title": "Two Sum",
            "difficulty": "Hard",
            "description": "Find two numbers adding up to target.",
            "starterCode": {"python": "def f(): pass", "java": "class S {}", "cpp": "int f();"},
        },
    )
    bind_model(
        CODE_REVIEW_KEY,
        lambda **_: {
            "status": "Accepted",
            "timeComplexity": "O(n)",
            "spaceComplexity": "O(n)",
            "feedback": "Good use of a hash map.",
            "score": 104,
            "optimalSolution": "def f(): ...",
        },
    )
    bind_model(
        RESUME_KEY,
        lambda **_: {
            "score": 70,
            "summary": "Strong backend profile.",
            "suggestedImprovements": ["Quantify impact"],
            "matchingScore": 65,
            "skillGaps": ["Kubernetes"],
            "suggestedRoles": ["Backend Developer"],
        },
    )
    return True
