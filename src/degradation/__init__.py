"""
Resilience Layer: Degradation

Mode dégradé gracieux:
- Valeur de repli en cas d'échec, sans propagation
- Résultat explicite indiquant la dégradation
- Accès best-effort au stockage clé/valeur
"""

from .interfaces import (
    # Data classes
    FallbackResult,
    # Interfaces
    IKeyValueStore,
)
from .storage import (
    InMemoryKeyValueStore,
    # Exceptions
    StorageFailure,
    StorageQuotaExceededError,
    StorageUnavailableError,
)
from .fallback import (
    DegradationWrapper,
    degrade_to,
    FallbackOperationError,
)

__all__ = [
    "FallbackResult",
    "IKeyValueStore",
    "InMemoryKeyValueStore",
    "DegradationWrapper",
    "degrade_to",
    "StorageFailure",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "FallbackOperationError",
]
