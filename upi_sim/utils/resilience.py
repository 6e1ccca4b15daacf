"""Resilience utilities - circuit breaker for the remote payment service."""

import time
from threading import Lock
from typing import Awaitable, Callable, TypeVar, ParamSpec

from upi_sim.errors import TransportError
from upi_sim.utils.logging import get_logger


P = ParamSpec("P")
T = TypeVar("T")

logger = get_logger("upi_sim.resilience")


class CircuitBreakerOpen(TransportError):
    """Raised when circuit breaker is open."""

    def __init__(self, message: str = "Circuit breaker is open"):
        super().__init__(message)


class CircuitBreaker:
    """Circuit breaker pattern for fault tolerance.

    Only ``TransportError`` counts as a failure: a remote service that
    answers FAILED is healthy.
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        recovery_timeout: float = 30.0,
        half_open_requests: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.half_open_requests = half_open_requests
        self._clock = clock

        self._failures = 0
        self._last_failure_time: float | None = None
        self._state = "closed"  # closed, open, half-open
        self._half_open_successes = 0
        self._lock = Lock()

    @property
    def state(self) -> str:
        """Get current circuit breaker state."""
        with self._lock:
            self._check_state_transition()
            return self._state

    def _check_state_transition(self):
        """Check if state should transition."""
        if self._state == "open" and self._last_failure_time is not None:
            if self._clock() - self._last_failure_time >= self.recovery_timeout:
                self._state = "half-open"
                self._half_open_successes = 0
                logger.info("Circuit breaker transitioning to half-open")

    def _record_success(self):
        """Record a successful call."""
        with self._lock:
            if self._state == "half-open":
                self._half_open_successes += 1
                if self._half_open_successes >= self.half_open_requests:
                    self._state = "closed"
                    self._failures = 0
                    logger.info("Circuit breaker closed")
            elif self._state == "closed":
                self._failures = 0

    def _record_failure(self):
        """Record a failed call."""
        with self._lock:
            self._failures += 1
            self._last_failure_time = self._clock()

            if self._state == "half-open":
                self._state = "open"
                logger.warning("Circuit breaker re-opened from half-open")
            elif self._failures >= self.failure_threshold:
                self._state = "open"
                logger.warning(
                    f"Circuit breaker opened after {self._failures} failures"
                )

    async def call(
        self, func: Callable[P, Awaitable[T]], *args: P.args, **kwargs: P.kwargs
    ) -> T:
        """Await a coroutine function through the circuit breaker."""
        with self._lock:
            self._check_state_transition()
            current_state = self._state

        if current_state == "open":
            raise CircuitBreakerOpen()

        try:
            result = await func(*args, **kwargs)
        except TransportError:
            self._record_failure()
            raise
        self._record_success()
        return result

    def reset(self):
        """Manually reset the circuit breaker."""
        with self._lock:
            self._state = "closed"
            self._failures = 0
            self._last_failure_time = None
            self._half_open_successes = 0
        logger.info("Circuit breaker manually reset")
