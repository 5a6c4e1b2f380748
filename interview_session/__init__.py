"""Proctored interview session state machine."""
from .errors import ConsentRequiredError, IllegalTransitionError, QuestionGenerationError, SessionError
from .machine import SessionEmission, SessionMachine, SessionSnapshot
from .states import Active, Briefing, Configuring, Loading, Reviewing, SessionState, Suspended
from .timer import QuestionTimer

__all__ = [
    "Active",
    "Briefing",
    "Configuring",
    "ConsentRequiredError",
    "IllegalTransitionError",
    "Loading",
    "QuestionGenerationError",
    "QuestionTimer",
    "Reviewing",
    "SessionEmission",
    "SessionError",
    "SessionMachine",
    "SessionSnapshot",
    "SessionState",
    "Suspended",
]
