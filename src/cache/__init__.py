"""
Resilience Layer: Cache

Cache mémoire à TTL par entrée:
- Éviction paresseuse à la lecture
- Balayage périodique possédé par l'instance (start/stop)
- Prédicat de fraîcheur unique pour lecture, has() et balayage
"""

from .interfaces import (
    # Data classes
    CacheEntry,
    # Interfaces
    ITTLCache,
)
from .ttl_cache import (
    TTLCache,
    make_cache_key,
)

__all__ = [
    "CacheEntry",
    "ITTLCache",
    "TTLCache",
    "make_cache_key",
]
