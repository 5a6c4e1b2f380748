"""In-memory model registry for evaluation providers."""
from typing import Any, Callable, Dict, Tuple

_REGISTRY: Dict[str, Callable[..., Any]] = {}


def bind_model(key: str, fn: Callable[..., Any]) -> None:
    """Bind a callable implementation to a registry key."""
    _REGISTRY[key] = fn


def unbind_model(key: str) -> None:
    """Remove any callable bound to ``key``."""
    _REGISTRY.pop(key, None)


def get_model(key: str) -> Callable[..., Any]:
    """Retrieve a callable from the registry.

    Raises:
        KeyError: If no callable has been bound for ``key``.
    """

    if key not in _REGISTRY:
        raise KeyError(f"Model not bound in registry: {key}")
    return _REGISTRY[key]


QUESTIONS_KEY = "models.question_generator"
CODING_KEY = "models.coding_challenge"
ANSWER_EVAL_KEY = "models.answer_evaluator"
CODE_REVIEW_KEY = "models.code_reviewer"
RESUME_KEY = "models.resume_analyzer"

GATEWAY_KEYS: Tuple[str, ...] = (
    QUESTIONS_KEY,
    CODING_KEY,
    ANSWER_EVAL_KEY,
    CODE_REVIEW_KEY,
    RESUME_KEY,
)
