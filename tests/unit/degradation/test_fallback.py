"""
Tests unitaires pour Degradation - DegradationWrapper

- Toute Exception est remplacée par la valeur de repli, sans retry
- Le stockage est best-effort: ses échecs ne remontent jamais
"""

import asyncio

import pytest

from src.degradation import (
    DegradationWrapper,
    FallbackOperationError,
    FallbackResult,
    InMemoryKeyValueStore,
    degrade_to,
)
from src.logging import LogLevel


class TestWithFallback:
    """Substitution synchrone."""

    def test_success_returns_operation_value(self) -> None:
        wrapper = DegradationWrapper()

        assert wrapper.with_fallback(lambda: 42, 0) == 42

    def test_failure_returns_fallback(self, logger) -> None:
        wrapper = DegradationWrapper(logger=logger)

        def operation() -> int:
            raise ValueError("bad json")

        assert wrapper.with_fallback(operation, 0) == 0
        assert logger.get_entries_by_level(LogLevel.DEBUG)

    def test_operation_called_once(self) -> None:
        wrapper = DegradationWrapper()
        calls = 0

        def operation() -> None:
            nonlocal calls
            calls += 1
            raise ConnectionError("down")

        wrapper.with_fallback(operation, None)

        assert calls == 1

    def test_result_marks_degradation(self) -> None:
        wrapper = DegradationWrapper()
        error = RuntimeError("boom")

        def operation() -> str:
            raise error

        result = wrapper.with_fallback_result(operation, "default")

        assert result == FallbackResult(value="default", degraded=True, error=error)

    def test_result_without_degradation(self) -> None:
        wrapper = DegradationWrapper()

        result = wrapper.with_fallback_result(lambda: "live", "default")

        assert result.value == "live"
        assert result.degraded is False
        assert result.error is None

    def test_base_exception_not_absorbed(self) -> None:
        wrapper = DegradationWrapper()

        def operation() -> None:
            raise KeyboardInterrupt()

        with pytest.raises(KeyboardInterrupt):
            wrapper.with_fallback(operation, None)


class TestWithFallbackAsync:
    """Substitution asynchrone."""

    @pytest.mark.asyncio
    async def test_async_success(self) -> None:
        wrapper = DegradationWrapper()

        async def operation() -> list:
            return [1, 2]

        assert await wrapper.with_fallback_async(operation, []) == [1, 2]

    @pytest.mark.asyncio
    async def test_async_failure_returns_fallback(self) -> None:
        wrapper = DegradationWrapper()

        async def operation() -> list:
            raise ConnectionError("down")

        assert await wrapper.with_fallback_async(operation, []) == []

    @pytest.mark.asyncio
    async def test_async_result_marks_degradation(self) -> None:
        wrapper = DegradationWrapper()

        async def operation() -> float:
            raise TimeoutError("slow")

        result = await wrapper.with_fallback_result_async(operation, 0.0)

        assert result.degraded is True
        assert isinstance(result.error, TimeoutError)

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        wrapper = DegradationWrapper()

        async def operation() -> None:
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await wrapper.with_fallback_async(operation, None)


class TestFallbackOperation:
    """Opération de repli calculée, échec conjoint propagé."""

    @pytest.mark.asyncio
    async def test_primary_success_skips_fallback(self) -> None:
        wrapper = DegradationWrapper()
        fallback_calls = 0

        async def primary() -> str:
            return "live"

        def fallback() -> str:
            nonlocal fallback_calls
            fallback_calls += 1
            return "cached"

        assert await wrapper.with_fallback_operation_async(primary, fallback) == "live"
        assert fallback_calls == 0

    @pytest.mark.asyncio
    async def test_primary_failure_uses_fallback(self, logger) -> None:
        wrapper = DegradationWrapper(logger=logger)

        async def primary() -> str:
            raise ConnectionError("down")

        async def fallback() -> str:
            return "cached"

        assert await wrapper.with_fallback_operation_async(primary, fallback) == "cached"
        assert logger.get_entries_by_level(LogLevel.WARN)[-1].message == (
            "Primary operation failed, trying fallback"
        )

    @pytest.mark.asyncio
    async def test_both_failures_raise_combined_error(self, logger) -> None:
        wrapper = DegradationWrapper(logger=logger)
        primary_error = ConnectionError("api down")
        fallback_error = KeyError("no snapshot")

        def primary() -> None:
            raise primary_error

        async def fallback() -> None:
            raise fallback_error

        with pytest.raises(FallbackOperationError) as exc_info:
            await wrapper.with_fallback_operation_async(primary, fallback)

        assert exc_info.value.primary_error is primary_error
        assert exc_info.value.fallback_error is fallback_error
        assert exc_info.value.__cause__ is fallback_error
        assert len(logger.get_entries_by_level(LogLevel.ERROR)) == 1

    @pytest.mark.asyncio
    async def test_cancellation_not_converted(self) -> None:
        wrapper = DegradationWrapper()

        async def primary() -> None:
            raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await wrapper.with_fallback_operation_async(primary, lambda: "cached")


class TestSafeStorage:
    """Accès best-effort au stockage."""

    def test_roundtrip(self) -> None:
        wrapper = DegradationWrapper(store=InMemoryKeyValueStore())

        assert wrapper.safe_storage_set("wallet:address", "SP2J6") is True
        assert wrapper.safe_storage_get("wallet:address") == "SP2J6"
        assert wrapper.safe_storage_remove("wallet:address") is True
        assert wrapper.safe_storage_get("wallet:address") is None

    def test_quota_exceeded_returns_false(self, logger) -> None:
        wrapper = DegradationWrapper(store=InMemoryKeyValueStore(quota_bytes=8), logger=logger)

        assert wrapper.safe_storage_set("key", "a much too long value") is False
        assert logger.get_entries_by_level(LogLevel.WARN)[-1].message == "Storage write failed"

    def test_disabled_store_degrades(self) -> None:
        wrapper = DegradationWrapper(store=InMemoryKeyValueStore(enabled=False))

        assert wrapper.safe_storage_get("k") is None
        assert wrapper.safe_storage_set("k", "v") is False
        assert wrapper.safe_storage_remove("k") is False

    def test_missing_store_degrades(self) -> None:
        wrapper = DegradationWrapper()

        assert wrapper.safe_storage_get("k") is None
        assert wrapper.safe_storage_set("k", "v") is False


class TestDecorator:
    """Decorator degrade_to."""

    def test_sync_function(self) -> None:
        @degrade_to(0.0)
        def parse_price(raw: str) -> float:
            return float(raw)

        assert parse_price("1.5") == 1.5
        assert parse_price("n/a") == 0.0

    @pytest.mark.asyncio
    async def test_async_function(self) -> None:
        @degrade_to([])
        async def fetch_transactions(address: str) -> list:
            raise ConnectionError(address)

        assert await fetch_transactions("SP2J6") == []
        assert fetch_transactions.__name__ == "fetch_transactions"
