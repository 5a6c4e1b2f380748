"""Tagged-union states for one interview or assessment attempt."""
from __future__ import annotations

from typing import Annotated, Dict, FrozenSet, Literal, Optional, Union

from pydantic import BaseModel, Field


class Configuring(BaseModel):
    kind: Literal["configuring"] = "configuring"
    error: Optional[str] = None


class Loading(BaseModel):
    kind: Literal["loading"] = "loading"


class Briefing(BaseModel):
    kind: Literal["briefing"] = "briefing"
    consent_given: bool = False


class Active(BaseModel):
    kind: Literal["active"] = "active"
    index: int = Field(ge=0)


class Suspended(BaseModel):
    kind: Literal["suspended"] = "suspended"
    interrupted_at: int = Field(ge=0)


class Reviewing(BaseModel):
    kind: Literal["reviewing"] = "reviewing"


SessionState = Annotated[
    Union[Configuring, Loading, Briefing, Active, Suspended, Reviewing],
    Field(discriminator="kind"),
]

# Legal kind-to-kind moves; finalize and cancel close the session without a move.
TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "configuring": frozenset({"loading"}),
    "loading": frozenset({"briefing", "configuring"}),
    "briefing": frozenset({"active"}),
    "active": frozenset({"active", "reviewing", "suspended"}),
    "suspended": frozenset(),
    "reviewing": frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


__all__ = [
    "Active",
    "Briefing",
    "Configuring",
    "Loading",
    "Reviewing",
    "SessionState",
    "Suspended",
    "TRANSITIONS",
    "can_transition",
]
