"""Sliding-window request admission control."""

from __future__ import annotations

import inspect
import logging
import math
import threading
import time
from collections import deque
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from astrocache.duration import to_seconds
from astrocache.errors import RateLimitExceeded
from astrocache.types import Duration

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_LIMIT = 1
DEFAULT_WINDOW: Duration = "60s"


class RateLimiter:
    """Per-client sliding-window limiter.

    A client may make at most ``limit`` admitted requests in any trailing
    ``window``. Denied requests are not recorded. One lock guards all
    clients. Clients with no requests left in the window are swept every
    ``sweep_interval`` (defaults to the window).
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window: Duration = DEFAULT_WINDOW,
        *,
        sweep_interval: Duration | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self._limit = limit
        self._window = to_seconds(window)
        if self._window <= 0:
            raise ValueError("window must be positive")
        self._sweep_interval = (
            self._window if sweep_interval is None else to_seconds(sweep_interval)
        )
        self._clock = clock
        self._requests: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window(self) -> float:
        """Window length in seconds."""
        return self._window

    @property
    def retry_after(self) -> int:
        """Seconds a denied client is told to wait."""
        return math.ceil(self._window)

    def allow(self, client_key: str) -> bool:
        """Admit or deny one request from ``client_key``. Never raises."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep_locked(now)

            window_start = now - self._window
            timestamps = self._requests.get(client_key)
            if timestamps is None:
                timestamps = self._requests[client_key] = deque()
            while timestamps and timestamps[0] <= window_start:
                timestamps.popleft()

            if len(timestamps) >= self._limit:
                logger.debug("Rate limit reached for %s", client_key)
                return False

            timestamps.append(now)
            return True

    def check(self, client_key: str) -> None:
        """Like :meth:`allow`, but raise :class:`RateLimitExceeded` on deny."""
        if not self.allow(client_key):
            raise RateLimitExceeded(retry_after=self.retry_after)

    def sweep(self) -> int:
        """Forget clients with no requests in the current window."""
        with self._lock:
            return self._sweep_locked(self._clock())

    def tracked_clients(self) -> int:
        """Number of clients currently holding window state."""
        with self._lock:
            return len(self._requests)

    def _sweep_locked(self, now: float) -> int:
        window_start = now - self._window
        idle = [
            key
            for key, timestamps in self._requests.items()
            if not timestamps or timestamps[-1] <= window_start
        ]
        for key in idle:
            del self._requests[key]
        self._last_sweep = now
        if idle:
            logger.debug("Swept %d idle rate-limit clients", len(idle))
        return len(idle)


def rate_limited(
    limiter: RateLimiter,
    key: Callable[..., str],
) -> Callable[[F], F]:
    """Guard a function with ``limiter``.

    ``key`` receives the guarded function's arguments and returns the
    client key. A denied call raises :class:`RateLimitExceeded` and the
    function body does not run. Works for sync and async functions.
    """

    def decorator(fn: F) -> F:
        if inspect.iscoroutinefunction(fn):

            @wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                limiter.check(key(*args, **kwargs))
                return await fn(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            limiter.check(key(*args, **kwargs))
            return fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
