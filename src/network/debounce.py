"""
Resilience Layer: Network - Debounced Recovery

Évite les tempêtes de tentatives de récupération: des déclenchements
rapprochés sont regroupés en une seule exécution, et une exécution trop
proche de la précédente est repoussée de delay secondes.
"""

import asyncio
import inspect
from typing import Any, Callable, Optional

from src.core.clock import SystemClock
from src.core.interfaces import IClock
from src.logging import IStructuredLogger, StructuredLogger


class DebouncedRecovery:
    """
    Récupération anti-rebond pilotée par l'horloge injectée.

    trigger() remplace tout déclenchement encore en attente. Si la dernière
    exécution date de moins de delay secondes, la nouvelle attend delay
    secondes; sinon elle part au prochain tour de boucle.

    Example:
        reconnect = DebouncedRecovery(monitor.wait_for_network, delay=2.0)
        reconnect.trigger()
    """

    DEFAULT_DELAY: float = 2.0

    def __init__(
        self,
        recovery: Callable[..., Any],
        delay: float = DEFAULT_DELAY,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            recovery: Fonction de récupération (sync ou async)
            delay: Intervalle minimal entre deux exécutions, en secondes
            clock: Horloge injectable
            logger: Logger structuré

        Raises:
            ValueError: Si delay négatif
        """
        if delay < 0:
            raise ValueError("delay must be >= 0")

        self._recovery = recovery
        self._delay = delay
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("recovery")
        self._pending: Optional["asyncio.Task[None]"] = None
        self._waiting = False
        self._last_attempt: Optional[float] = None

    @property
    def last_attempt(self) -> Optional[float]:
        return self._last_attempt

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """
        Programme une exécution de recovery(*args, **kwargs).

        Doit être appelé depuis une boucle asyncio active.
        """
        if self.is_pending and self._waiting:
            self._pending.cancel()

        now = self._clock.now()
        recent = self._last_attempt is not None and now - self._last_attempt < self._delay
        wait = self._delay if recent else 0.0

        self._waiting = True
        self._pending = asyncio.get_running_loop().create_task(self._run(wait, args, kwargs))

    async def _run(self, wait: float, args: tuple, kwargs: dict) -> None:
        if wait > 0:
            await self._clock.sleep(wait)

        self._waiting = False
        self._last_attempt = self._clock.now()
        try:
            result = self._recovery(*args, **kwargs)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self._logger.warn("Debounced recovery failed", error=repr(e))

    async def drain(self) -> None:
        """Attend la fin de l'exécution programmée, s'il y en a une."""
        task = self._pending
        if task is not None:
            await asyncio.wait([task])

    async def cancel(self) -> None:
        """Annule l'exécution programmée."""
        task = self._pending
        self._pending = None
        if task is None or task.done():
            return
        task.cancel()
        await asyncio.wait([task])
