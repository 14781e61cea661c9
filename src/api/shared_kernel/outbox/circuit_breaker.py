"""Process-local circuit breaker for outbound event delivery.

The breaker tracks consecutive delivery failures. Once the failure
threshold is reached it opens for a cooldown period, during which the
worker makes no delivery attempts at all. After the cooldown passes the
breaker is implicitly half-open: the next attempt decides whether it
closes (success) or re-opens (failure).

State is in-memory and owned by a single worker. A restart clears it.
Running several workers against the same table would need this state in
a shared store or leader election, neither of which is provided here.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta


def _utc_now() -> datetime:
    return datetime.now(UTC)


class CircuitBreaker:
    """Consecutive-failure circuit breaker.

    Not thread-safe; it must only be used from the worker's own loop.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        cooldown_seconds: float = 60,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize a closed breaker.

        Args:
            failure_threshold: Consecutive failures that open the circuit
            cooldown_seconds: How long the circuit stays open
            clock: Source of the current time (UTC)
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if cooldown_seconds < 0:
            raise ValueError("cooldown_seconds must be >= 0")

        self._failure_threshold = failure_threshold
        self._cooldown = timedelta(seconds=cooldown_seconds)
        self._clock = clock
        self._consecutive_failures = 0
        self._open_until = datetime.min.replace(tzinfo=UTC)

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    @property
    def open_until(self) -> datetime:
        return self._open_until

    @property
    def failure_threshold(self) -> int:
        return self._failure_threshold

    def is_open(self) -> bool:
        """Return True while the threshold is reached and the cooldown has not passed."""
        return (
            self._consecutive_failures >= self._failure_threshold
            and self._clock() < self._open_until
        )

    def record_success(self) -> int:
        """Close the circuit.

        Returns:
            The number of consecutive failures that were cleared
        """
        cleared = self._consecutive_failures
        self._consecutive_failures = 0
        return cleared

    def record_failure(self) -> bool:
        """Count a failure, opening the circuit when the threshold is reached.

        Every failure at or above the threshold pushes open_until forward
        by a full cooldown.

        Returns:
            True if this failure opened (or re-opened) the circuit
        """
        self._consecutive_failures += 1
        if self._consecutive_failures >= self._failure_threshold:
            self._open_until = self._clock() + self._cooldown
            return True
        return False
