"""
Tests unitaires pour Network - CircuitBreaker

- CLOSED -> OPEN après failure_threshold échecs consécutifs
- OPEN -> HALF_OPEN après recovery_timeout
- HALF_OPEN -> CLOSED après success_threshold succès, -> OPEN sur échec
"""

import pytest

from src.logging import LogLevel
from src.network import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitOpenError,
    CircuitState,
    with_circuit_breaker,
)


def make_breaker(clock, logger=None, **config) -> CircuitBreaker:
    return CircuitBreaker("stacks-api", CircuitBreakerConfig(**config), clock=clock, logger=logger)


class TestTransitions:
    """Machine à états."""

    def test_starts_closed(self, clock) -> None:
        breaker = make_breaker(clock)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.can_execute() is True

    def test_opens_after_threshold(self, clock, logger) -> None:
        breaker = make_breaker(clock, logger, failure_threshold=3)

        for _ in range(3):
            breaker.record_failure()

        assert breaker.state == CircuitState.OPEN
        assert breaker.can_execute() is False
        assert logger.get_entries_by_level(LogLevel.WARN)[-1].message == "Circuit opened"

    def test_success_resets_consecutive_failures(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=3)

        breaker.record_failure()
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()

        assert breaker.state == CircuitState.CLOSED

    def test_half_open_after_recovery_timeout(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1, recovery_timeout=60.0)
        breaker.record_failure()

        clock.advance(59)
        assert breaker.state == CircuitState.OPEN
        assert breaker.get_time_until_recovery() == pytest.approx(1.0)

        clock.advance(1)
        assert breaker.state == CircuitState.HALF_OPEN

    def test_half_open_success_closes(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1, recovery_timeout=10.0, success_threshold=2)
        breaker.record_failure()
        clock.advance(10)

        breaker.record_success()
        assert breaker.state == CircuitState.HALF_OPEN

        breaker.record_success()
        assert breaker.state == CircuitState.CLOSED

    def test_half_open_failure_reopens(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1, recovery_timeout=10.0)
        breaker.record_failure()
        clock.advance(10)
        assert breaker.state == CircuitState.HALF_OPEN

        breaker.record_failure()

        assert breaker.state == CircuitState.OPEN

    def test_first_record_after_timeout_sees_half_open(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1, recovery_timeout=10.0, success_threshold=1)
        breaker.record_failure()
        clock.advance(10)

        # aucune lecture de state avant le succès
        breaker.record_success()

        assert breaker.state == CircuitState.CLOSED

    def test_failure_after_timeout_reopens_with_fresh_time(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1, recovery_timeout=10.0)
        breaker.record_failure()
        clock.advance(10)

        breaker.record_failure()

        assert breaker.state == CircuitState.OPEN
        assert breaker.get_state().last_failure_time == clock.now()
        assert breaker.get_time_until_recovery() == pytest.approx(10.0)

    def test_reset_closes(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1)
        breaker.record_failure()

        breaker.reset()

        assert breaker.state == CircuitState.CLOSED
        assert breaker.get_time_until_recovery() is None

    def test_state_snapshot(self, clock) -> None:
        breaker = make_breaker(clock)
        breaker.record_success()
        breaker.record_failure()

        snapshot = breaker.get_state()

        assert snapshot.total_requests == 2
        assert snapshot.total_failures == 1
        assert snapshot.last_failure_time == clock.now()

    def test_empty_name_rejected(self, clock) -> None:
        with pytest.raises(ValueError):
            CircuitBreaker(" ", clock=clock)


class TestCall:
    """CircuitBreaker.call et decorator."""

    @pytest.mark.asyncio
    async def test_call_returns_value(self, clock) -> None:
        breaker = make_breaker(clock)

        async def operation() -> int:
            return 7

        assert await breaker.call(operation) == 7

    @pytest.mark.asyncio
    async def test_call_propagates_and_records_failure(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1)

        def operation() -> None:
            raise ConnectionError("down")

        with pytest.raises(ConnectionError):
            await breaker.call(operation)

        assert breaker.state == CircuitState.OPEN

    @pytest.mark.asyncio
    async def test_call_rejected_when_open(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=1, recovery_timeout=30.0)
        breaker.record_failure()
        calls = 0

        def operation() -> None:
            nonlocal calls
            calls += 1

        with pytest.raises(CircuitOpenError) as exc_info:
            await breaker.call(operation)

        assert calls == 0
        assert exc_info.value.breaker_name == "stacks-api"
        assert exc_info.value.retry_after == pytest.approx(30.0)

    @pytest.mark.asyncio
    async def test_decorator(self, clock) -> None:
        breaker = make_breaker(clock, failure_threshold=2)

        @with_circuit_breaker(breaker)
        async def fetch_balance(address: str) -> int:
            raise ConnectionError(address)

        for _ in range(2):
            with pytest.raises(ConnectionError):
                await fetch_balance("SP2J6")

        with pytest.raises(CircuitOpenError):
            await fetch_balance("SP2J6")
