"""Errors raised by the session state machine."""
from __future__ import annotations


class SessionError(RuntimeError):
    """Base error for session state machine failures."""


class IllegalTransitionError(SessionError):
    def __init__(self, action: str, state: str) -> None:
        super().__init__(f"Cannot {action} while session is {state}")
        self.action = action
        self.state = state


class ConsentRequiredError(SessionError):
    def __init__(self) -> None:
        super().__init__("Guidelines must be accepted before the assessment can begin")


class QuestionGenerationError(SessionError):
    """The gateway produced no questions for this configuration."""
