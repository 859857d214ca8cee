"""
Resilience Layer: Degradation - Interfaces

Contrats du mode dégradé:
- Substitution d'une valeur de repli en cas d'échec (sans retry ni délai)
- Stockage clé/valeur traité comme best-effort
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class FallbackResult(Generic[T]):
    """
    Résultat d'une exécution protégée.

    degraded indique que la valeur de repli a été substituée; error porte
    alors l'échec absorbé.
    """

    value: T
    degraded: bool = False
    error: Optional[Exception] = None


class IKeyValueStore(ABC):
    """
    Stockage clé/valeur de chaînes, synchrone et borné.

    Toutes les méthodes peuvent lever StorageFailure (quota dépassé,
    stockage désactivé).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Retourne la valeur de key ou None."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Écrit value sous key."""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Supprime key (sans effet si absente)."""
        pass
