"""Configuration package for the interview assessment service."""
from .routes import AppConfig, LlmRoute, load_config, resolve_registry
from .registry import (
    ANSWER_EVAL_KEY,
    CODE_REVIEW_KEY,
    CODING_KEY,
    GATEWAY_KEYS,
    QUESTIONS_KEY,
    RESUME_KEY,
    bind_model,
    get_model,
    unbind_model,
)
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "LlmRoute",
    "load_config",
    "resolve_registry",
    "ANSWER_EVAL_KEY",
    "CODE_REVIEW_KEY",
    "CODING_KEY",
    "GATEWAY_KEYS",
    "QUESTIONS_KEY",
    "RESUME_KEY",
    "bind_model",
    "get_model",
    "unbind_model",
    "Settings",
    "settings",
]
