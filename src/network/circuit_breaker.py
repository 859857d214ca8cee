"""
Resilience Layer: Network - Circuit Breaker

Coupe les appels vers un service après une série d'échecs consécutifs,
pour éviter les cascades d'échecs, puis laisse passer des appels de test
après un délai de récupération.
"""

import functools
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from src.core.clock import SystemClock
from src.core.interfaces import IClock
from src.logging import IStructuredLogger, StructuredLogger
from .interfaces import Operation


class CircuitState(Enum):
    """États du circuit breaker."""

    CLOSED = "closed"  # Normal - appels autorisés
    OPEN = "open"  # Échecs - appels bloqués
    HALF_OPEN = "half_open"  # Test - appels autorisés jusqu'à décision


@dataclass
class CircuitBreakerConfig:
    """Configuration du circuit breaker."""

    failure_threshold: int = 5
    recovery_timeout: float = 60.0
    success_threshold: int = 1


@dataclass
class CircuitBreakerState:
    """Instantané de l'état du circuit pour monitoring."""

    state: CircuitState
    failure_count: int
    success_count: int
    last_failure_time: Optional[float]
    last_state_change: float
    total_requests: int
    total_failures: int


class CircuitOpenError(Exception):
    """Circuit ouvert - appel refusé."""

    def __init__(self, breaker_name: str, retry_after: float) -> None:
        self.breaker_name = breaker_name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit '{breaker_name}' is OPEN. Service temporarily unavailable, retry after {retry_after:.1f}s"
        )


class CircuitBreaker:
    """
    Circuit breaker CLOSED -> OPEN -> HALF_OPEN -> CLOSED.

    - CLOSED: failure_threshold échecs consécutifs ouvrent le circuit
    - OPEN: appels refusés jusqu'à recovery_timeout après le dernier échec
    - HALF_OPEN: un échec rouvre, success_threshold succès referment
    """

    def __init__(
        self,
        name: str,
        config: Optional[CircuitBreakerConfig] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            name: Nom du circuit (pour logs)
            config: Configuration optionnelle
            clock: Horloge injectable
            logger: Logger structuré

        Raises:
            ValueError: Si name vide
        """
        if not name or not name.strip():
            raise ValueError("Circuit breaker name cannot be empty")

        self._name = name
        self._config = config or CircuitBreakerConfig()
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("circuit_breaker")
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: Optional[float] = None
        self._last_state_change = self._clock.now()
        self._total_requests = 0
        self._total_failures = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> CircuitState:
        self._check_recovery()
        return self._state

    def can_execute(self) -> bool:
        """True si un appel peut passer (CLOSED ou HALF_OPEN)."""
        self._check_recovery()
        return self._state != CircuitState.OPEN

    def record_success(self) -> None:
        """
        Enregistre un succès.

        HALF_OPEN: ferme le circuit après success_threshold succès.
        CLOSED: remet le compteur d'échecs consécutifs à zéro.
        """
        self._check_recovery()
        self._total_requests += 1

        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self._config.success_threshold:
                self._transition_to(CircuitState.CLOSED)
        elif self._state == CircuitState.CLOSED:
            self._failure_count = 0

    def record_failure(self) -> None:
        """Enregistre un échec; peut ouvrir le circuit."""
        self._check_recovery()
        self._total_requests += 1
        self._total_failures += 1
        self._failure_count += 1
        self._last_failure_time = self._clock.now()

        if self._state == CircuitState.HALF_OPEN:
            self._transition_to(CircuitState.OPEN)
        elif self._state == CircuitState.CLOSED:
            if self._failure_count >= self._config.failure_threshold:
                self._transition_to(CircuitState.OPEN)

    async def call(self, operation: Operation) -> Any:
        """
        Exécute operation sous protection du circuit.

        Raises:
            CircuitOpenError: Si le circuit est ouvert
            Exception: Échec de operation, propagé inchangé
        """
        if not self.can_execute():
            raise CircuitOpenError(self._name, self.get_time_until_recovery() or 0.0)

        try:
            value = operation()
            if inspect.isawaitable(value):
                value = await value
        except Exception:
            self.record_failure()
            raise

        self.record_success()
        return value

    def _check_recovery(self) -> None:
        if self._state != CircuitState.OPEN or self._last_failure_time is None:
            return

        elapsed = self._clock.now() - self._last_failure_time
        if elapsed >= self._config.recovery_timeout:
            self._transition_to(CircuitState.HALF_OPEN)

    def _transition_to(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return

        previous = self._state
        self._state = new_state
        self._last_state_change = self._clock.now()

        if new_state == CircuitState.CLOSED:
            self._failure_count = 0
            self._success_count = 0
        elif new_state == CircuitState.HALF_OPEN:
            self._success_count = 0

        if new_state == CircuitState.OPEN:
            self._logger.warn(
                "Circuit opened",
                breaker=self._name,
                failures=self._failure_count,
                previous=previous.value,
            )
        else:
            self._logger.info(
                "Circuit state changed",
                breaker=self._name,
                state=new_state.value,
                previous=previous.value,
            )

    def get_state(self) -> CircuitBreakerState:
        """Retourne l'état complet du circuit."""
        self._check_recovery()

        return CircuitBreakerState(
            state=self._state,
            failure_count=self._failure_count,
            success_count=self._success_count,
            last_failure_time=self._last_failure_time,
            last_state_change=self._last_state_change,
            total_requests=self._total_requests,
            total_failures=self._total_failures,
        )

    def reset(self) -> None:
        """Force le retour à CLOSED (intervention manuelle)."""
        self._transition_to(CircuitState.CLOSED)
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time = None

    def get_time_until_recovery(self) -> Optional[float]:
        """
        Temps restant avant passage en HALF_OPEN.

        Returns:
            Secondes restantes, ou None si le circuit n'est pas ouvert
        """
        if self._state != CircuitState.OPEN or self._last_failure_time is None:
            return None

        elapsed = self._clock.now() - self._last_failure_time
        return max(0.0, self._config.recovery_timeout - elapsed)


def with_circuit_breaker(breaker: CircuitBreaker) -> Callable:
    """
    Decorator de protection par circuit breaker.

    Usage:
        breaker = CircuitBreaker("stacks-api")

        @with_circuit_breaker(breaker)
        async def fetch_balance(address):
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            return await breaker.call(lambda: func(*args, **kwargs))

        return wrapper

    return decorator
