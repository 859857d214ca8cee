"""
Resilience Layer: Network - Error Classifier

Classe les échecs d'opérations d'après leur message pour décider s'il faut
réessayer, attendre ou abandonner.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .interfaces import RetryPlan

NON_RECOVERABLE_PATTERNS = (
    "not found",
    "unauthorized",
    "forbidden",
    "invalid",
    "parse error",
    "syntax error",
)

RECOVERABLE_PATTERNS = (
    "timeout",
    "timed out",
    "network",
    "connection",
    "rate limit",
    "server error",
    "service unavailable",
)

# asyncio.TimeoutError n'est un alias de TimeoutError qu'à partir de 3.11
TIMEOUT_ERRORS = (TimeoutError, asyncio.TimeoutError)


class RecoveryKind(Enum):
    """Stratégies de récupération."""

    RETRY = "retry"
    WAIT = "wait"
    NONE = "none"


@dataclass(frozen=True)
class RecoveryStrategy:
    """Stratégie de récupération suggérée pour un échec."""

    kind: RecoveryKind
    reason: str
    max_attempts: int = 1
    delay: float = 0.0

    def to_retry_plan(self) -> Optional[RetryPlan]:
        """
        Construit le RetryPlan correspondant.

        Returns:
            RetryPlan pour RETRY, None sinon
        """
        if self.kind != RecoveryKind.RETRY:
            return None
        return RetryPlan(max_attempts=self.max_attempts, base_delay=self.delay)


def _message(error: Optional[BaseException]) -> str:
    if error is None:
        return ""
    return str(error).lower()


def is_recoverable_error(error: Optional[BaseException]) -> bool:
    """
    Indique si un échec est transitoire.

    Les motifs non récupérables l'emportent; un message sans motif connu
    est considéré non récupérable. TimeoutError et ConnectionError sont
    récupérables quel que soit leur message.
    """
    message = _message(error)

    if any(pattern in message for pattern in NON_RECOVERABLE_PATTERNS):
        return False

    if isinstance(error, TIMEOUT_ERRORS + (ConnectionError,)):
        return True

    return any(pattern in message for pattern in RECOVERABLE_PATTERNS)


def get_recovery_strategy(error: Optional[BaseException]) -> RecoveryStrategy:
    """Retourne la stratégie de récupération adaptée au message de l'échec."""
    message = _message(error)

    if "timeout" in message or "timed out" in message or isinstance(error, TIMEOUT_ERRORS):
        return RecoveryStrategy(
            kind=RecoveryKind.RETRY,
            max_attempts=3,
            delay=2.0,
            reason="Request timed out, retrying",
        )

    if "network" in message or "connection" in message or isinstance(error, ConnectionError):
        return RecoveryStrategy(
            kind=RecoveryKind.RETRY,
            max_attempts=5,
            delay=3.0,
            reason="Network error, retrying after delay",
        )

    if "rate limit" in message:
        return RecoveryStrategy(
            kind=RecoveryKind.WAIT,
            delay=60.0,
            reason="Rate limited, waiting before retry",
        )

    if "server error" in message or "500" in message:
        return RecoveryStrategy(
            kind=RecoveryKind.RETRY,
            max_attempts=3,
            delay=5.0,
            reason="Server error, retrying after delay",
        )

    return RecoveryStrategy(
        kind=RecoveryKind.NONE,
        reason="Error is not recoverable automatically",
    )
