"""
Resilience Layer: Cache - TTL Cache Implementation

Cache mémoire à TTL par entrée, avec balayage périodique possédé par
l'instance (start/stop) plutôt qu'un singleton global.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar, Union

from src.core.clock import SystemClock
from src.core.interfaces import IClock
from src.logging import IStructuredLogger, StructuredLogger
from .interfaces import CacheEntry, ITTLCache

T = TypeVar("T")

_MISSING = object()


def make_cache_key(namespace: str, *parts: Any) -> str:
    """
    Construit une clé de cache hiérarchique.

    Example:
        make_cache_key("portfolio:balance", "SP2J6...") -> "portfolio:balance:SP2J6..."
    """
    return ":".join([namespace, *(str(part) for part in parts)])


class TTLCache(ITTLCache[T]):
    """
    Cache mémoire à expiration par entrée.

    Aucune opération ne lève d'exception ni ne bloque. Le balayage
    périodique est une tâche asyncio démarrée par start() et arrêtée par
    stop(); le cache fonctionne aussi sans (éviction paresseuse seule).

    Example:
        cache: TTLCache[float] = TTLCache(default_ttl=300.0)
        async with cache:
            cache.set("portfolio:price:STX", 1.23)
            price = cache.get("portfolio:price:STX")
    """

    DEFAULT_TTL: float = 300.0
    DEFAULT_SWEEP_INTERVAL: float = 60.0

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            default_ttl: TTL par défaut des entrées, en secondes
            sweep_interval: Intervalle du balayage périodique, en secondes
            clock: Horloge injectable (SystemClock par défaut)
            logger: Logger structuré
        """
        if sweep_interval <= 0:
            raise ValueError("sweep_interval must be positive")

        self._default_ttl = default_ttl
        self._sweep_interval = sweep_interval
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("cache")
        self._entries: Dict[str, CacheEntry[T]] = {}
        self._sweep_task: Optional["asyncio.Task[None]"] = None
        self._stats: Dict[str, int] = {"hits": 0, "misses": 0, "evictions": 0}

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    @property
    def sweep_interval(self) -> float:
        return self._sweep_interval

    # ──────────────────────────────────────────────────────────────────────
    # Opérations clé/valeur
    # ──────────────────────────────────────────────────────────────────────

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(
            value=value,
            created_at=self._clock.now(),
            ttl=self._default_ttl if ttl is None else ttl,
        )

    def _lookup(self, key: str) -> Any:
        """Retourne la valeur vivante ou _MISSING, en évinçant l'entrée périmée."""
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING

        if not entry.is_live(self._clock.now()):
            # pop(key, None): un balayage concurrent a pu la retirer déjà
            if self._entries.pop(key, None) is not None:
                self._stats["evictions"] += 1
            return _MISSING

        return entry.value

    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        value = self._lookup(key)
        if value is _MISSING:
            self._stats["misses"] += 1
            return default
        self._stats["hits"] += 1
        return value

    def has(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING

    def clear(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear_all(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        now = self._clock.now()
        stale_keys = [key for key, entry in list(self._entries.items()) if not entry.is_live(now)]

        removed = 0
        for key in stale_keys:
            if self._entries.pop(key, None) is not None:
                removed += 1

        self._stats["evictions"] += removed
        if removed:
            self._logger.debug("Cache sweep removed stale entries", removed=removed, remaining=len(self._entries))
        return removed

    def size(self) -> int:
        return len(self._entries)

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Union[T, Awaitable[T]]],
        ttl: Optional[float] = None,
    ) -> T:
        """
        Retourne la valeur vivante de key, sinon charge et stocke le résultat de loader.

        Les échecs du loader sont propagés et rien n'est stocké.

        Args:
            key: Clé du cache
            loader: Fonction sans argument (sync ou async) produisant la valeur
            ttl: TTL de la nouvelle entrée

        Returns:
            Valeur en cache ou fraîchement chargée
        """
        cached = self._lookup(key)
        if cached is not _MISSING:
            self._stats["hits"] += 1
            return cached

        self._stats["misses"] += 1
        value = loader()
        if inspect.isawaitable(value):
            value = await value

        self.set(key, value, ttl)
        return value

    def get_stats(self) -> Dict[str, Any]:
        """Statistiques du cache (entrées stockées, vivantes, périmées, hits/misses)."""
        now = self._clock.now()
        total = len(self._entries)
        live = sum(1 for entry in list(self._entries.values()) if entry.is_live(now))
        return {
            "total_entries": total,
            "live_entries": live,
            "stale_entries": total - live,
            "hits": self._stats["hits"],
            "misses": self._stats["misses"],
            "evictions": self._stats["evictions"],
            "default_ttl": self._default_ttl,
            "sweeping": self.is_running,
        }

    # ──────────────────────────────────────────────────────────────────────
    # Cycle de vie du balayage
    # ──────────────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def start(self) -> None:
        """
        Démarre le balayage périodique.

        Doit être appelé depuis une boucle asyncio active. Sans effet si
        déjà démarré.
        """
        if self.is_running:
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())
        self._logger.info("Cache sweeper started", interval=self._sweep_interval)

    async def stop(self) -> None:
        """Arrête le balayage périodique. Sans effet si arrêté."""
        task = self._sweep_task
        self._sweep_task = None
        if task is None or task.done():
            return

        task.cancel()
        # wait() n'absorbe pas une annulation visant l'appelant
        await asyncio.wait([task])
        self._logger.info("Cache sweeper stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await self._clock.sleep(self._sweep_interval)
            self.sweep()

    async def __aenter__(self) -> "TTLCache[T]":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
