"""Unit tests for the delivery circuit breaker."""

from datetime import UTC, datetime, timedelta

import pytest

from shared_kernel.outbox.circuit_breaker import CircuitBreaker


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 8, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def breaker(clock) -> CircuitBreaker:
    return CircuitBreaker(failure_threshold=5, cooldown_seconds=60, clock=clock)


class TestCircuitBreakerOpening:
    """Tests for the closed -> open transition."""

    def test_starts_closed(self, breaker):
        assert breaker.is_open() is False
        assert breaker.consecutive_failures == 0

    def test_stays_closed_below_threshold(self, breaker):
        for _ in range(4):
            assert breaker.record_failure() is False

        assert breaker.is_open() is False
        assert breaker.consecutive_failures == 4

    def test_opens_at_threshold(self, breaker, clock):
        for _ in range(4):
            breaker.record_failure()

        assert breaker.record_failure() is True
        assert breaker.is_open() is True
        assert breaker.open_until == clock.now + timedelta(seconds=60)

    def test_threshold_of_one_opens_on_first_failure(self, clock):
        breaker = CircuitBreaker(failure_threshold=1, cooldown_seconds=60, clock=clock)

        assert breaker.record_failure() is True
        assert breaker.is_open() is True


class TestCircuitBreakerCooldown:
    """Tests for the open -> half-open -> closed/open transitions."""

    def _trip(self, breaker: CircuitBreaker) -> None:
        for _ in range(breaker.failure_threshold):
            breaker.record_failure()

    def test_still_open_just_before_cooldown_ends(self, breaker, clock):
        self._trip(breaker)
        clock.advance(59)

        assert breaker.is_open() is True

    def test_allows_attempt_after_cooldown(self, breaker, clock):
        self._trip(breaker)
        clock.advance(60)

        assert breaker.is_open() is False

    def test_success_after_cooldown_closes(self, breaker, clock):
        self._trip(breaker)
        clock.advance(61)

        assert breaker.record_success() == 5
        assert breaker.consecutive_failures == 0
        assert breaker.is_open() is False

    def test_failure_after_cooldown_reopens_for_full_cooldown(self, breaker, clock):
        self._trip(breaker)
        clock.advance(61)

        assert breaker.record_failure() is True
        assert breaker.consecutive_failures == 6
        assert breaker.is_open() is True
        assert breaker.open_until == clock.now + timedelta(seconds=60)

    def test_success_below_threshold_resets_count(self, breaker):
        breaker.record_failure()
        breaker.record_failure()

        assert breaker.record_success() == 2
        for _ in range(4):
            breaker.record_failure()
        assert breaker.is_open() is False

    def test_zero_cooldown_never_blocks(self, clock):
        breaker = CircuitBreaker(failure_threshold=1, cooldown_seconds=0, clock=clock)
        breaker.record_failure()

        assert breaker.is_open() is False


class TestCircuitBreakerValidation:
    def test_rejects_zero_threshold(self):
        with pytest.raises(ValueError):
            CircuitBreaker(failure_threshold=0)

    def test_rejects_negative_cooldown(self):
        with pytest.raises(ValueError):
            CircuitBreaker(cooldown_seconds=-1)
