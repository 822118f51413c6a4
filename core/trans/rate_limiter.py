"""Sliding-window admission control for outbound provider calls.

The window is a ring buffer holding at most ``max_requests`` admission timestamps, so memory
stays bounded no matter how many requests are rejected.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import TYPE_CHECKING, ClassVar

from models.translation_models import RequestStats
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["SlidingWindowRateLimiter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class SlidingWindowRateLimiter:
    """Bounds the number of admissions within a trailing time window.

    ``admit`` and ``record_admission`` are exposed separately for inspection, but callers
    that admit concurrently must use ``try_acquire``, which performs the purge, the check
    and the record under one lock.

    Attributes:
        DEFAULT_WINDOW_SEC (ClassVar[float]): Default window width.
        DEFAULT_MAX_REQUESTS (ClassVar[int]): Default ceiling per window.
    """

    DEFAULT_WINDOW_SEC: ClassVar[float] = 60.0
    DEFAULT_MAX_REQUESTS: ClassVar[int] = 100

    def __init__(
        self,
        window: float = DEFAULT_WINDOW_SEC,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the limiter.

        Raises:
            ValueError: If the window or the ceiling is not positive.
        """
        if window <= 0 or max_requests <= 0:
            msg: str = f"Rate limit window and ceiling must be positive: window={window}, max_requests={max_requests}"
            raise ValueError(msg)
        self._window: float = window
        self._max_requests: int = max_requests
        self._clock: Callable[[], float] = clock
        self._timestamps: deque[float] = deque(maxlen=max_requests)
        self._lock: threading.Lock = threading.Lock()

    @property
    def window(self) -> float:
        return self._window

    @property
    def max_requests(self) -> int:
        return self._max_requests

    def _purge(self, now: float) -> None:
        """Drop timestamps that have left the window. Caller must hold the lock."""
        cutoff: float = now - self._window
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()

    def admit(self) -> bool:
        """Check whether one more admission fits into the current window."""
        with self._lock:
            self._purge(self._clock())
            return len(self._timestamps) < self._max_requests

    def record_admission(self) -> None:
        """Record an admission at the current time.

        When the buffer is full the oldest timestamp is overwritten.
        """
        with self._lock:
            now: float = self._clock()
            self._purge(now)
            self._timestamps.append(now)

    def try_acquire(self) -> bool:
        """Atomically admit and record one request.

        Returns:
            bool: True if the request was admitted, False if the window is full.
        """
        with self._lock:
            now: float = self._clock()
            self._purge(now)
            if len(self._timestamps) >= self._max_requests:
                logger.warning(
                    "Rate limit reached: %d requests within %.0f seconds", len(self._timestamps), self._window
                )
                return False
            self._timestamps.append(now)
            return True

    def stats(self) -> RequestStats:
        """Return a snapshot of the current window."""
        with self._lock:
            self._purge(self._clock())
            count: int = len(self._timestamps)
        return RequestStats(
            total_requests_in_window=count,
            window_seconds=self._window,
            max_requests=self._max_requests,
            is_rate_limited=count >= self._max_requests,
        )
