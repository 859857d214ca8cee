"""
Resilience Layer: Network - Network Monitor

Sonde de joignabilité réseau et attente bornée du retour de connectivité.
Toute erreur de sonde (timeout, DNS, statut HTTP) devient False.
"""

from typing import Any, Awaitable, Callable, Optional

import httpx

from src.core.clock import SystemClock
from src.core.interfaces import DEFAULT_PROBE_URL, IClock
from src.logging import IStructuredLogger, StructuredLogger
from .interfaces import INetworkMonitor

ProbeCheck = Callable[[], Awaitable[Any]]


class NetworkMonitor(INetworkMonitor):
    """
    Moniteur de disponibilité réseau.

    Ne conserve aucun historique: chaque probe() est une vérification
    indépendante, wait_for_network() une boucle de sondage bornée par une
    échéance.

    Example:
        monitor = NetworkMonitor(poll_interval=2.0)
        if await monitor.wait_for_network(max_wait=5.0):
            await submit_transaction()
    """

    DEFAULT_PROBE_TIMEOUT: float = 5.0
    DEFAULT_POLL_INTERVAL: float = 2.0
    DEFAULT_MAX_WAIT: float = 30.0

    def __init__(
        self,
        probe_url: str = DEFAULT_PROBE_URL,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        default_max_wait: float = DEFAULT_MAX_WAIT,
        check: Optional[ProbeCheck] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            probe_url: Endpoint externe connu comme fiable
            probe_timeout: Timeout HTTP d'une sonde, en secondes
            poll_interval: Intervalle fixe entre deux sondes, en secondes
            default_max_wait: Attente maximale si wait_for_network n'en reçoit pas
            check: Vérification async injectable (requête HTTP GET par défaut)
            clock: Horloge injectable
            logger: Logger structuré

        Raises:
            ValueError: Si poll_interval n'est pas strictement positif
        """
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

        self._probe_url = probe_url
        self._probe_timeout = probe_timeout
        self._poll_interval = poll_interval
        self._default_max_wait = default_max_wait
        self._check = check or self._http_check
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("network")

    @property
    def probe_url(self) -> str:
        return self._probe_url

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    async def _http_check(self) -> None:
        """GET sur probe_url; le corps de la réponse est ignoré."""
        async with httpx.AsyncClient(timeout=self._probe_timeout) as client:
            response = await client.get(self._probe_url)
            response.raise_for_status()

    async def probe(self) -> bool:
        try:
            await self._check()
        except Exception as e:
            self._logger.debug("Network probe failed", url=self._probe_url, error=repr(e))
            return False
        return True

    async def wait_for_network(self, max_wait: Optional[float] = None) -> bool:
        """
        Sonde toutes les poll_interval secondes jusqu'au succès ou à l'échéance.

        Au plus ceil(max_wait / poll_interval) sondes sont effectuées; aucune
        sonde n'est lancée une fois l'échéance atteinte. Avec max_wait <= 0,
        une seule sonde est effectuée.

        Args:
            max_wait: Attente maximale en secondes (défaut du moniteur si None)

        Returns:
            True dès qu'une sonde réussit, False à l'échéance
        """
        wait = self._default_max_wait if max_wait is None else max_wait
        deadline = self._clock.now() + wait
        probes = 0

        while True:
            probes += 1
            if await self.probe():
                if probes > 1:
                    self._logger.info("Network reachable again", probes=probes)
                return True

            remaining = deadline - self._clock.now()
            if remaining <= 0:
                break

            await self._clock.sleep(min(self._poll_interval, remaining))
            if self._clock.now() >= deadline:
                break

        self._logger.warn("Network unreachable, giving up", max_wait=wait, probes=probes)
        return False
