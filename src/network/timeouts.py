"""
Resilience Layer: Network - Timeouts

Borne la durée d'une opération asynchrone.
"""

import asyncio
import inspect
from typing import Any

from .interfaces import Operation

DEFAULT_OPERATION_TIMEOUT: float = 30.0


class OperationTimeoutError(TimeoutError):
    """Opération non terminée dans le délai imparti."""

    def __init__(self, timeout_value: float) -> None:
        self.timeout_value = timeout_value
        super().__init__(f"Operation timed out after {timeout_value}s")


class InvalidTimeoutError(ValueError):
    """Valeur de timeout invalide."""

    pass


async def with_timeout(operation: Operation, timeout_seconds: float = DEFAULT_OPERATION_TIMEOUT) -> Any:
    """
    Exécute operation en la bornant à timeout_seconds.

    L'opération en cours est annulée quand le délai expire.

    Args:
        operation: Fonction sans argument (sync ou async)
        timeout_seconds: Délai maximal en secondes

    Returns:
        Résultat de operation

    Raises:
        InvalidTimeoutError: Si timeout_seconds <= 0
        OperationTimeoutError: Si le délai est dépassé
    """
    if timeout_seconds <= 0:
        raise InvalidTimeoutError("timeout_seconds must be positive")

    value = operation()
    if not inspect.isawaitable(value):
        return value

    try:
        return await asyncio.wait_for(value, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise OperationTimeoutError(timeout_seconds)
