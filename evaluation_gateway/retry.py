"""Bounded retry with exponential backoff and a fixed fallback."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TypeVar

from config.settings import settings
from llm_gateway import is_rate_limited

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Run a provider call, retrying only throttled attempts.

    Any other failure, or running out of retries, yields ``fallback()``; the
    policy itself never raises for provider problems. Attempts run back to
    back on the calling thread so no two retries of one call overlap.
    """

    def __init__(
        self,
        *,
        base_delay_s: Optional[float] = None,
        max_retries: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        classify: Callable[[BaseException], bool] = is_rate_limited,
    ) -> None:
        self.base_delay_s = settings.RETRY_BASE_DELAY_S if base_delay_s is None else base_delay_s
        self.max_retries = settings.RETRY_MAX if max_retries is None else max_retries
        self._sleep = sleep
        self._classify = classify

    def run(self, operation: str, fn: Callable[[], T], fallback: Callable[[], T]) -> T:
        delay = self.base_delay_s
        for attempt in range(self.max_retries + 1):
            try:
                return fn()
            except Exception as exc:  # noqa: BLE001
                if self._classify(exc) and attempt < self.max_retries:
                    logger.warning(
                        "Provider rate limited op=%s retry_in=%.2fs attempt=%d/%d",
                        operation,
                        delay,
                        attempt + 1,
                        self.max_retries,
                    )
                    self._sleep(delay)
                    delay *= 2
                    continue
                logger.warning("Provider call failed op=%s, using fallback: %s", operation, exc)
                return fallback()
        return fallback()  # pragma: no cover - loop always returns


__all__ = ["RetryPolicy"]
