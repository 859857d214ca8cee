"""
Resilience Layer - System Clock
Horloge réelle basée sur time.monotonic et asyncio.sleep.
"""

import asyncio
import time

from .interfaces import IClock


class SystemClock(IClock):
    """Horloge monotone du processus."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))
