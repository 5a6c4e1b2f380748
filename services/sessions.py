"""Registry of live session machines and their completion handoff."""
from __future__ import annotations

import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import Callable, Dict, Optional, Tuple

from access import EXAM_IN_PROGRESS, AccessDeniedError, AccessShell
from config.settings import settings
from domain import ExamConfig, Profile, Session
from interview_session import SessionEmission, SessionMachine
from interview_session.machine import Gateway

logger = logging.getLogger(__name__)


def _millis() -> int:
    return int(time.time() * 1000)


class SessionRegistry:
    """Holds in-progress machines by id.

    Finalized machines leave the live table and move to a bounded review
    cache together with their persisted ``Session``; the oldest entries are
    evicted once ``review_capacity`` is reached. Cancelled machines are dropped.
    """

    def __init__(
        self,
        access: AccessShell,
        gateway: Gateway,
        *,
        machine_factory: Callable[..., SessionMachine] = SessionMachine,
        clock_ms: Callable[[], int] = _millis,
        review_capacity: Optional[int] = None,
    ) -> None:
        self.access = access
        self.gateway = gateway
        self._factory = machine_factory
        self._clock_ms = clock_ms
        self._capacity = settings.REVIEW_CACHE_SIZE if review_capacity is None else review_capacity
        self._lock = threading.Lock()
        self._machines: Dict[str, SessionMachine] = {}
        self._finished: "OrderedDict[str, Tuple[SessionMachine, Session]]" = OrderedDict()

    @property
    def live_count(self) -> int:
        with self._lock:
            return len(self._machines)

    @property
    def finished_count(self) -> int:
        with self._lock:
            return len(self._finished)

    def _build(self, identity: Profile, exam: Optional[ExamConfig] = None) -> SessionMachine:
        session_id = uuid.uuid4().hex
        holder: Dict[str, SessionMachine] = {}

        def _on_complete(emission: SessionEmission) -> None:
            self.complete(holder["machine"], emission)

        machine = self._factory(
            identity,
            self.gateway,
            self.access,
            exam=exam,
            on_complete=_on_complete,
            session_id=session_id,
        )
        holder["machine"] = machine
        with self._lock:
            self._machines[session_id] = machine
        return machine

    def _discard(self, session_id: str) -> None:
        with self._lock:
            self._machines.pop(session_id, None)

    def new_practice_session(self, identity: Profile) -> SessionMachine:
        return self._build(identity)

    def new_exam_session(self, identity: Profile, exam: ExamConfig) -> SessionMachine:
        """Open an exam attempt and load its questions straight away.

        One exam at a time per account: a second attempt is refused until the
        first is finalized or the candidate signs out.
        """

        if self.access.active_exam_for(identity.email) is not None:
            raise AccessDeniedError(EXAM_IN_PROGRESS, code=exam.id)
        machine = self._build(identity, exam)
        try:
            machine.start()
        except Exception:
            self._discard(machine.session_id)
            raise
        if identity.email:
            self.access.begin_exam_attempt(identity.email, exam)
        return machine

    def get(self, session_id: str) -> Optional[SessionMachine]:
        with self._lock:
            machine = self._machines.get(session_id)
            if machine is None and session_id in self._finished:
                machine = self._finished[session_id][0]
            return machine

    def stored_session(self, session_id: str) -> Optional[Session]:
        with self._lock:
            entry = self._finished.get(session_id)
        return entry[1] if entry else None

    def cancel(self, machine: SessionMachine) -> None:
        machine.cancel()
        self._discard(machine.session_id)

    def complete(self, machine: SessionMachine, emission: SessionEmission) -> Session:
        """Assign the persisted id and hand the finished attempt to the access shell."""

        identity = machine.identity
        session = Session(
            id=f"s-{self._clock_ms()}-{uuid.uuid4().hex[:6]}",
            category=emission.category,
            start_time=emission.start_time,
            answers=emission.answers,
            exam_id=emission.exam_id,
            user_email=identity.email or None,
            candidate_name=identity.name or None,
            status=emission.status,
        )
        self.access.record_session_completion(session)
        if emission.exam_id:
            self.access.end_exam_attempt(identity.email)
        with self._lock:
            self._machines.pop(machine.session_id, None)
            self._finished[machine.session_id] = (machine, session)
            while len(self._finished) > self._capacity:
                evicted, _ = self._finished.popitem(last=False)
                logger.debug("Evicted finished session %s from review cache", evicted)
        return session


__all__ = ["SessionRegistry"]
