"""Evaluation gateway: provider calls with retry and canned fallbacks."""
from .bindings import bind_from_file, bind_llm_routes
from .gateway import POINTS_BY_DIFFICULTY, EvaluationGateway
from .retry import RetryPolicy

__all__ = [
    "POINTS_BY_DIFFICULTY",
    "EvaluationGateway",
    "RetryPolicy",
    "bind_from_file",
    "bind_llm_routes",
]
