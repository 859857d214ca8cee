"""
Resilience Layer - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

import asyncio
from typing import List

import pytest

from src.core.interfaces import IClock
from src.logging import LogConfig, LogLevel, StructuredLogger


class FakeClock(IClock):
    """Horloge virtuelle: sleep() avance le temps instantanément."""

    def __init__(self, start: float = 1000.0) -> None:
        self._now = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now += max(0.0, seconds)
        # Laisse tourner les autres tâches comme un vrai sleep
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    """Horloge virtuelle partagée."""
    return FakeClock()


@pytest.fixture
def logger() -> StructuredLogger:
    """Logger capturant toutes les entrées, sans sortie."""
    return StructuredLogger("test", config=LogConfig(min_level=LogLevel.DEBUG))
