import pytest

from evaluation_gateway import RetryPolicy
from llm_gateway import LlmGatewayError, LlmRateLimitError, is_rate_limited


class _Flaky:
    def __init__(self, failures, exc_factory, result="ok"):
        self.failures = failures
        self.exc_factory = exc_factory
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc_factory()
        return self.result


def _policy(sleeps):
    return RetryPolicy(base_delay_s=1.5, max_retries=2, sleep=sleeps.append)


def test_success_on_first_attempt_does_not_sleep():
    sleeps = []
    fn = _Flaky(0, lambda: LlmRateLimitError("429"))
    assert _policy(sleeps).run("op", fn, lambda: "fallback") == "ok"
    assert fn.calls == 1
    assert sleeps == []


def test_rate_limit_retries_with_doubling_backoff():
    sleeps = []
    fn = _Flaky(2, lambda: LlmRateLimitError("LLM returned status 429"))
    assert _policy(sleeps).run("op", fn, lambda: "fallback") == "ok"
    assert fn.calls == 3
    assert sleeps == [1.5, 3.0]


def test_exhausted_retries_yield_fallback():
    sleeps = []
    fn = _Flaky(10, lambda: LlmRateLimitError("quota exceeded"))
    assert _policy(sleeps).run("op", fn, lambda: "fallback") == "fallback"
    assert fn.calls == 3
    assert sleeps == [1.5, 3.0]


def test_non_rate_limit_failure_falls_back_immediately():
    sleeps = []
    fn = _Flaky(10, lambda: LlmGatewayError("LLM output validation failed"))
    assert _policy(sleeps).run("op", fn, lambda: "fallback") == "fallback"
    assert fn.calls == 1
    assert sleeps == []


def test_unbound_model_is_treated_as_failure():
    sleeps = []

    def _missing():
        raise KeyError("Model not bound in registry")

    assert _policy(sleeps).run("op", _missing, lambda: 42) == 42
    assert sleeps == []


class _StatusError(Exception):
    def __init__(self, status):
        super().__init__("provider error")
        self.status = status


@pytest.mark.parametrize(
    "exc, expected",
    [
        (LlmRateLimitError("throttled"), True),
        (_StatusError(429), True),
        (_StatusError(500), False),
        (RuntimeError("RESOURCE_EXHAUSTED: try later"), True),
        (RuntimeError("daily quota reached"), True),
        (RuntimeError("HTTP 429 Too Many Requests"), True),
        (ValueError("bad json"), False),
    ],
)
def test_rate_limit_classification(exc, expected):
    assert is_rate_limited(exc) is expected
