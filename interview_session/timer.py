"""Cancellable per-question countdown."""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

TimerFactory = Callable[..., Any]


class QuestionTimer:
    """Single scheduled expiry owned by the active question.

    Each ``start`` bumps a generation counter that is handed to the expiry
    callback, so a timer that fires after being replaced or cancelled can be
    recognised as stale by its owner.
    """

    def __init__(
        self,
        seconds: float,
        on_expire: Callable[[int, int], None],
        *,
        factory: TimerFactory = threading.Timer,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.seconds = seconds
        self._on_expire = on_expire
        self._factory = factory
        self._clock = clock
        self._handle: Optional[Any] = None
        self._deadline: Optional[float] = None
        self.generation = 0

    def start(self, index: int) -> int:
        self.cancel()
        self.generation += 1
        self._deadline = self._clock() + self.seconds
        handle = self._factory(self.seconds, self._on_expire, args=(index, self.generation))
        if hasattr(handle, "daemon"):
            handle.daemon = True
        handle.start()
        self._handle = handle
        return self.generation

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._deadline = None
        self.generation += 1

    @property
    def running(self) -> bool:
        return self._handle is not None

    def remaining(self) -> float:
        if self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self._clock())


__all__ = ["QuestionTimer", "TimerFactory"]
