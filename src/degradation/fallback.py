"""
Resilience Layer: Degradation - Fallback Wrapper

Garantit à l'appelant une valeur: tout échec d'une opération est remplacé
par une valeur de repli, sans retry ni délai. FallbackResult permet
d'observer qu'une dégradation a eu lieu. Seul
with_fallback_operation_async propage l'échec conjoint de ses deux opérations.
"""

import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from src.logging import IStructuredLogger, StructuredLogger
from .interfaces import FallbackResult, IKeyValueStore
from .storage import StorageUnavailableError

T = TypeVar("T")


class FallbackOperationError(Exception):
    """Opération principale et opération de repli ont toutes deux échoué."""

    def __init__(self, primary_error: Exception, fallback_error: Exception) -> None:
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(
            f"Both primary and fallback operations failed: {primary_error!r}, {fallback_error!r}"
        )


class DegradationWrapper:
    """
    Exécution en mode dégradé gracieux.

    Seules les Exception sont absorbées: l'annulation asyncio et les
    interruptions (BaseException) se propagent normalement.

    Example:
        wrapper = DegradationWrapper(store=InMemoryKeyValueStore())
        price = wrapper.with_fallback(lambda: parse_price(raw), 0.0)
        cached = wrapper.safe_storage_get("portfolio:snapshot")
    """

    def __init__(
        self,
        store: Optional[IKeyValueStore] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            store: Stockage clé/valeur sous-jacent (best-effort)
            logger: Logger structuré pour les notices de diagnostic
        """
        self._store = store
        self._logger = logger or StructuredLogger("degradation")

    # ──────────────────────────────────────────────────────────────────────
    # Substitution de valeur
    # ──────────────────────────────────────────────────────────────────────

    def with_fallback(self, operation: Callable[[], T], fallback_value: T) -> T:
        """
        Exécute operation de façon synchrone.

        Returns:
            Résultat de operation, ou fallback_value si elle lève
        """
        return self.with_fallback_result(operation, fallback_value).value

    def with_fallback_result(self, operation: Callable[[], T], fallback_value: T) -> FallbackResult[T]:
        """
        Variante de with_fallback indiquant si la dégradation a eu lieu.

        Returns:
            FallbackResult(value, degraded, error)
        """
        try:
            return FallbackResult(value=operation())
        except Exception as e:
            self._notice(e)
            return FallbackResult(value=fallback_value, degraded=True, error=e)

    async def with_fallback_async(
        self, operation: Callable[[], Awaitable[T]], fallback_value: T
    ) -> T:
        """Équivalent de with_fallback pour une opération asynchrone."""
        result = await self.with_fallback_result_async(operation, fallback_value)
        return result.value

    async def with_fallback_result_async(
        self, operation: Callable[[], Awaitable[T]], fallback_value: T
    ) -> FallbackResult[T]:
        """Équivalent de with_fallback_result pour une opération asynchrone."""
        try:
            value = operation()
            if inspect.isawaitable(value):
                value = await value
            return FallbackResult(value=value)
        except Exception as e:
            self._notice(e)
            return FallbackResult(value=fallback_value, degraded=True, error=e)

    async def with_fallback_operation_async(
        self,
        primary: Callable[[], Union[T, Awaitable[T]]],
        fallback: Callable[[], Union[T, Awaitable[T]]],
    ) -> T:
        """
        Exécute primary, puis fallback si primary échoue.

        Contrairement à with_fallback, l'échec conjoint est propagé.

        Returns:
            Résultat de primary, sinon de fallback

        Raises:
            FallbackOperationError: Si les deux opérations échouent
        """
        try:
            return await _resolve(primary())
        except Exception as primary_error:
            self._logger.warn("Primary operation failed, trying fallback", error=repr(primary_error))
            try:
                return await _resolve(fallback())
            except Exception as fallback_error:
                self._logger.error(
                    "Fallback operation also failed",
                    primary_error=repr(primary_error),
                    error=repr(fallback_error),
                )
                raise FallbackOperationError(primary_error, fallback_error) from fallback_error

    def _notice(self, error: Exception) -> None:
        self._logger.debug("Operation failed, fallback value used", error=repr(error))

    # ──────────────────────────────────────────────────────────────────────
    # Stockage best-effort
    # ──────────────────────────────────────────────────────────────────────

    def _require_store(self) -> IKeyValueStore:
        if self._store is None:
            raise StorageUnavailableError("No storage configured")
        return self._store

    def safe_storage_get(self, key: str) -> Optional[str]:
        """
        Lit key dans le stockage.

        Returns:
            Valeur stockée, ou None si absente ou en cas d'échec du stockage
        """
        try:
            return self._require_store().get(key)
        except Exception as e:
            self._logger.warn("Storage read failed", key=key, error=repr(e))
            return None

    def safe_storage_set(self, key: str, value: str) -> bool:
        """
        Écrit value sous key.

        Returns:
            True si l'écriture a réussi, False sinon (quota, stockage désactivé...)
        """
        try:
            self._require_store().set(key, value)
        except Exception as e:
            self._logger.warn("Storage write failed", key=key, error=repr(e))
            return False
        return True

    def safe_storage_remove(self, key: str) -> bool:
        """
        Supprime key du stockage.

        Returns:
            True si la suppression a réussi (ou clé absente), False en cas d'échec
        """
        try:
            self._require_store().remove(key)
        except Exception as e:
            self._logger.warn("Storage remove failed", key=key, error=repr(e))
            return False
        return True


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def degrade_to(fallback_value: Any) -> Callable:
    """
    Decorator substituant fallback_value à tout échec (fonctions sync ou async).

    Usage:
        @degrade_to([])
        async def fetch_transactions(address):
            ...
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        wrapper_impl = DegradationWrapper()

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                return await wrapper_impl.with_fallback_async(
                    lambda: func(*args, **kwargs), fallback_value
                )

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            return wrapper_impl.with_fallback(lambda: func(*args, **kwargs), fallback_value)

        return sync_wrapper

    return decorator
