"""
Resilience Layer: Network - Retry Executor

Ré-exécute une opération faillible avec un délai linéaire entre tentatives.
Le dernier échec est propagé tel quel: aucun type d'erreur n'est ajouté.
"""

import functools
import inspect
from typing import Any, Callable, Dict, Optional, Tuple

from src.core.clock import SystemClock
from src.core.interfaces import IClock
from src.logging import IStructuredLogger, StructuredLogger
from .interfaces import TRANSACTION_RETRY_PLAN, IRetryExecutor, Operation, RetryPlan, RetryResult


class RetryExecutor(IRetryExecutor):
    """
    Exécution séquentielle avec retry.

    Chaque appel possède son propre compteur de tentatives; rien n'est
    conservé entre appels hormis les statistiques agrégées. Les tentatives
    ne se chevauchent jamais et l'attente est une suspension via l'horloge.

    Example:
        executor = RetryExecutor()
        balance = await executor.run(fetch_balance, RetryPlan(max_attempts=3, base_delay=1.0))
    """

    def __init__(
        self,
        default_plan: Optional[RetryPlan] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            default_plan: Plan utilisé quand run() n'en reçoit pas
            clock: Horloge injectable pour les attentes
            logger: Logger structuré
        """
        self._default_plan = default_plan or RetryPlan()
        self._clock = clock or SystemClock()
        self._logger = logger or StructuredLogger("retry")
        self._retry_stats: Dict[str, int] = {
            "total_retries": 0,
            "successful_retries": 0,
            "failed_retries": 0,
        }

    @property
    def default_plan(self) -> RetryPlan:
        return self._default_plan

    async def run(self, operation: Operation, plan: Optional[RetryPlan] = None) -> Any:
        result, error = await self._attempt(operation, plan or self._default_plan)
        if error is not None:
            raise error
        return result.result

    async def execute_with_retry(
        self, operation: Operation, plan: Optional[RetryPlan] = None
    ) -> RetryResult:
        result, _ = await self._attempt(operation, plan or self._default_plan)
        return result

    async def _attempt(
        self, operation: Operation, plan: RetryPlan
    ) -> Tuple[RetryResult, Optional[Exception]]:
        """
        Boucle de tentatives.

        Returns:
            (RetryResult, dernière erreur ou None si succès)
        """
        total_delay = 0.0
        attempt = 1

        while True:
            try:
                value = operation()
                if inspect.isawaitable(value):
                    value = await value
            except Exception as e:
                exhausted = attempt >= plan.max_attempts
                if exhausted or not plan.is_retryable(e):
                    if attempt > 1:
                        self._retry_stats["failed_retries"] += 1
                    self._logger.error(
                        "Operation failed, giving up",
                        attempts=attempt,
                        max_attempts=plan.max_attempts,
                        error=repr(e),
                    )
                    return (
                        RetryResult(
                            success=False,
                            result=None,
                            attempts=attempt,
                            total_delay=total_delay,
                            last_error=e,
                        ),
                        e,
                    )

                delay = plan.delay(attempt)
                self._retry_stats["total_retries"] += 1
                self._logger.warn(
                    "Attempt failed, retrying",
                    attempt=attempt,
                    delay_seconds=delay,
                    error=repr(e),
                )
                await self._clock.sleep(delay)
                total_delay += delay
                attempt += 1
                continue

            if attempt > 1:
                self._retry_stats["successful_retries"] += 1
            return (
                RetryResult(
                    success=True,
                    result=value,
                    attempts=attempt,
                    total_delay=total_delay,
                    last_error=None,
                ),
                None,
            )

    def get_retry_stats(self) -> Dict[str, int]:
        """
        Retourne les statistiques de retry.

        Returns:
            Dict avec total_retries, successful_retries, failed_retries
        """
        return dict(self._retry_stats)

    def reset_stats(self) -> None:
        """Remet les statistiques à zéro."""
        self._retry_stats = {
            "total_retries": 0,
            "successful_retries": 0,
            "failed_retries": 0,
        }


def with_retry(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retryable_exceptions: tuple = (Exception,),
    clock: Optional[IClock] = None,
) -> Callable:
    """
    Decorator pour retry automatique d'une fonction async.

    Usage:
        @with_retry(max_attempts=3, base_delay=1.0)
        async def submit_transaction(tx):
            ...

    Le dernier échec est propagé inchangé.
    """
    plan = RetryPlan(
        max_attempts=max_attempts,
        base_delay=base_delay,
        retryable_exceptions=retryable_exceptions,
    )

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            executor = RetryExecutor(default_plan=plan, clock=clock)
            return await executor.run(lambda: func(*args, **kwargs))

        return wrapper

    return decorator


async def retry_transaction(
    operation: Operation,
    clock: Optional[IClock] = None,
    logger: Optional[IStructuredLogger] = None,
) -> Any:
    """
    Soumet une transaction avec TRANSACTION_RETRY_PLAN.

    Raises:
        Exception: Dernier échec observé, inchangé
    """
    executor = RetryExecutor(default_plan=TRANSACTION_RETRY_PLAN, clock=clock, logger=logger)
    return await executor.run(operation)
