"""
Resilience Layer: Cache - Interfaces

Cache clé/valeur à expiration individuelle (TTL par entrée).

Règles:
    - Une entrée est vivante ssi now - created_at <= ttl
    - Une entrée périmée n'est jamais retournée par une lecture
    - Suppression paresseuse (à la lecture) ou par balayage périodique,
      toutes deux idempotentes
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """
    Entrée du cache.

    La valeur appartient au cache une fois insérée: les appelants ne
    doivent pas la muter.
    """

    value: T
    created_at: float
    ttl: float

    def age(self, now: float) -> float:
        """Âge de l'entrée en secondes."""
        return now - self.created_at

    def is_live(self, now: float) -> bool:
        """Prédicat unique de fraîcheur, partagé par lecture et balayage."""
        return self.age(now) <= self.ttl


class ITTLCache(ABC, Generic[T]):
    """Interface cache TTL."""

    @abstractmethod
    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """
        Insère ou remplace l'entrée de key.

        Args:
            key: Clé du cache
            value: Valeur à stocker
            ttl: Durée de vie en secondes (défaut du cache si None)
        """
        pass

    @abstractmethod
    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        """
        Retourne la valeur vivante de key.

        Une entrée périmée est supprimée et default est retourné.
        """
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        """True ssi get(key) retournerait une valeur."""
        pass

    @abstractmethod
    def clear(self, key: str) -> None:
        """Supprime l'entrée de key (idempotent)."""
        pass

    @abstractmethod
    def clear_all(self) -> None:
        """Supprime toutes les entrées."""
        pass

    @abstractmethod
    def sweep(self) -> int:
        """
        Supprime toutes les entrées périmées.

        Returns:
            Nombre d'entrées supprimées
        """
        pass

    @abstractmethod
    def size(self) -> int:
        """
        Nombre d'entrées stockées, périmées non balayées incluses.

        Métrique de stockage, pas de fraîcheur.
        """
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Statistiques pour monitoring."""
        pass
