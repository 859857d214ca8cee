"""
Resilience Layer: Network - Interfaces

Interfaces pour:
- Retry séquentiel avec délai linéaire (base_delay * tentative)
- Sondage de disponibilité réseau
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

T = TypeVar("T")

Operation = Callable[[], Union[T, Awaitable[T]]]


@dataclass(frozen=True)
class RetryPlan:
    """
    Plan de retry.

    Le délai croît linéairement: tentative 1 échouée -> base_delay * 1,
    tentative 2 échouée -> base_delay * 2, etc. Pas de jitter, pas de plafond.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    retryable_exceptions: tuple = field(default_factory=lambda: (Exception,))
    retry_if: Optional[Callable[[Exception], bool]] = None

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")

    def delay(self, attempt: int) -> float:
        """
        Délai à attendre après l'échec de la tentative attempt (1-indexed).

        Returns:
            base_delay * attempt, en secondes
        """
        return self.base_delay * attempt

    def is_retryable(self, error: Exception) -> bool:
        """True si error autorise une nouvelle tentative."""
        if not isinstance(error, self.retryable_exceptions):
            return False
        if self.retry_if is not None:
            return bool(self.retry_if(error))
        return True


# Soumission de transaction: 3 tentatives, attentes de 2s puis 4s
TRANSACTION_RETRY_PLAN = RetryPlan(max_attempts=3, base_delay=2.0)


@dataclass
class RetryResult:
    """Résultat d'une opération avec retry."""

    success: bool
    result: Optional[Any]
    attempts: int
    total_delay: float
    last_error: Optional[Exception]


class IRetryExecutor(ABC):
    """Interface exécution avec retry."""

    @abstractmethod
    async def run(self, operation: Operation, plan: Optional[RetryPlan] = None) -> Any:
        """
        Exécute operation avec retry.

        Args:
            operation: Fonction sans argument (sync ou async)
            plan: Plan de retry (plan par défaut si None)

        Returns:
            Résultat de la première tentative réussie

        Raises:
            Exception: Dernier échec observé, inchangé
        """
        pass

    @abstractmethod
    async def execute_with_retry(
        self, operation: Operation, plan: Optional[RetryPlan] = None
    ) -> RetryResult:
        """Variante sans exception: retourne un RetryResult."""
        pass


class INetworkMonitor(ABC):
    """Interface sondage de disponibilité réseau."""

    @abstractmethod
    async def probe(self) -> bool:
        """
        Effectue une vérification unique.

        Returns:
            True si la vérification réussit, False pour toute erreur
        """
        pass

    @abstractmethod
    async def wait_for_network(self, max_wait: Optional[float] = None) -> bool:
        """
        Sonde à intervalle fixe jusqu'au succès ou à l'échéance.

        Args:
            max_wait: Attente maximale en secondes

        Returns:
            True dès qu'une sonde réussit, False à l'échéance
        """
        pass
