"""
Resilience Layer - Bootstrap
Assemble les composants de résilience à partir d'une configuration validée.
"""

from dataclasses import dataclass
from typing import Any, Optional

from src.cache import TTLCache
from src.degradation import DegradationWrapper, IKeyValueStore, InMemoryKeyValueStore
from src.logging import LogConfig, StructuredLogger, parse_level, stderr_handler
from src.network import NetworkMonitor, RetryExecutor, RetryPlan
from .clock import SystemClock
from .interfaces import IClock, ResilienceSettings


@dataclass
class ResilienceToolkit:
    """Composants assemblés, partageant horloge et logger."""

    settings: ResilienceSettings
    clock: IClock
    logger: StructuredLogger
    cache: TTLCache[Any]
    executor: RetryExecutor
    monitor: NetworkMonitor
    wrapper: DegradationWrapper

    async def start(self) -> None:
        """Démarre le balayage périodique du cache."""
        self.cache.start()

    async def stop(self) -> None:
        """Arrête le balayage périodique du cache."""
        await self.cache.stop()

    async def __aenter__(self) -> "ResilienceToolkit":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()


def build_logger(settings: ResilienceSettings) -> StructuredLogger:
    """Crée le logger racine selon la section logging."""
    config = LogConfig(
        min_level=parse_level(settings.logging.min_level),
        max_entries=settings.logging.max_entries,
    )
    handler = stderr_handler if settings.logging.emit_to_stderr else None
    return StructuredLogger("resilience", config=config, output_handler=handler)


def build_toolkit(
    settings: Optional[ResilienceSettings] = None,
    clock: Optional[IClock] = None,
    store: Optional[IKeyValueStore] = None,
) -> ResilienceToolkit:
    """
    Construit cache, exécuteur de retry, moniteur réseau et wrapper dégradé.

    Args:
        settings: Configuration validée (valeurs par défaut si None)
        clock: Horloge partagée (SystemClock si None)
        store: Stockage clé/valeur (InMemoryKeyValueStore si None)

    Returns:
        ResilienceToolkit prêt à l'emploi (balayage du cache non démarré)
    """
    settings = settings or ResilienceSettings()
    clock = clock or SystemClock()
    logger = build_logger(settings)

    cache: TTLCache[Any] = TTLCache(
        default_ttl=settings.cache.default_ttl,
        sweep_interval=settings.cache.sweep_interval,
        clock=clock,
        logger=logger.with_context("cache"),
    )
    executor = RetryExecutor(
        default_plan=RetryPlan(
            max_attempts=settings.retry.max_attempts,
            base_delay=settings.retry.base_delay,
        ),
        clock=clock,
        logger=logger.with_context("retry"),
    )
    monitor = NetworkMonitor(
        probe_url=settings.network.probe_url,
        probe_timeout=settings.network.probe_timeout,
        poll_interval=settings.network.poll_interval,
        default_max_wait=settings.network.default_max_wait,
        clock=clock,
        logger=logger.with_context("network"),
    )
    wrapper = DegradationWrapper(
        store=store if store is not None else InMemoryKeyValueStore(),
        logger=logger.with_context("degradation"),
    )

    logger.debug("Resilience toolkit built", probe_url=settings.network.probe_url)

    return ResilienceToolkit(
        settings=settings,
        clock=clock,
        logger=logger,
        cache=cache,
        executor=executor,
        monitor=monitor,
        wrapper=wrapper,
    )
