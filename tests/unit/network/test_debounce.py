"""
Tests unitaires pour Network - DebouncedRecovery

- Des déclenchements rapprochés donnent une seule exécution
- Deux exécutions sont espacées d'au moins delay secondes
"""

import asyncio

import pytest

from src.logging import LogLevel
from src.network import DebouncedRecovery


class TestDebouncedRecovery:
    """Regroupement et espacement des récupérations."""

    def test_negative_delay_rejected(self) -> None:
        with pytest.raises(ValueError):
            DebouncedRecovery(lambda: None, delay=-1)

    @pytest.mark.asyncio
    async def test_rapid_triggers_coalesce_to_last(self, clock) -> None:
        calls = []
        recovery = DebouncedRecovery(calls.append, clock=clock)

        recovery.trigger("first")
        recovery.trigger("second")
        recovery.trigger("third")
        await recovery.drain()

        assert calls == ["third"]
        assert clock.sleeps == []
        assert recovery.last_attempt == clock.now()

    @pytest.mark.asyncio
    async def test_retrigger_right_after_run_waits_delay(self, clock) -> None:
        calls = []
        recovery = DebouncedRecovery(calls.append, delay=2.0, clock=clock)

        recovery.trigger(1)
        await recovery.drain()
        recovery.trigger(2)
        assert recovery.is_pending is True
        await recovery.drain()

        assert calls == [1, 2]
        assert clock.sleeps == [2.0]

    @pytest.mark.asyncio
    async def test_retrigger_after_quiet_period_runs_at_once(self, clock) -> None:
        calls = []
        recovery = DebouncedRecovery(calls.append, delay=2.0, clock=clock)

        recovery.trigger(1)
        await recovery.drain()
        clock.advance(5)
        recovery.trigger(2)
        await recovery.drain()

        assert calls == [1, 2]
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_running_recovery_not_interrupted(self, clock) -> None:
        calls = []
        gate = asyncio.Event()

        async def reconnect(tag: str) -> None:
            calls.append(tag)
            await gate.wait()

        recovery = DebouncedRecovery(reconnect, clock=clock)
        recovery.trigger("a")
        await asyncio.sleep(0)
        recovery.trigger("b")
        gate.set()
        await recovery.drain()

        assert calls == ["a", "b"]
        assert clock.sleeps == [2.0]

    @pytest.mark.asyncio
    async def test_failure_logged_not_raised(self, clock, logger) -> None:
        async def reconnect() -> None:
            raise ConnectionError("still offline")

        recovery = DebouncedRecovery(reconnect, clock=clock, logger=logger)
        recovery.trigger()
        await recovery.drain()

        assert logger.get_entries_by_level(LogLevel.WARN)[-1].message == "Debounced recovery failed"
        assert recovery.is_pending is False

    @pytest.mark.asyncio
    async def test_cancel_prevents_run(self, clock) -> None:
        calls = []
        recovery = DebouncedRecovery(calls.append, clock=clock)

        recovery.trigger("x")
        await recovery.cancel()
        await asyncio.sleep(0)

        assert calls == []
        assert recovery.is_pending is False
