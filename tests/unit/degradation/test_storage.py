"""
Tests unitaires pour Degradation - InMemoryKeyValueStore
"""

import pytest

from src.degradation import (
    IKeyValueStore,
    InMemoryKeyValueStore,
    StorageFailure,
    StorageQuotaExceededError,
    StorageUnavailableError,
)


class TestInMemoryKeyValueStore:
    """Stockage mémoire à quota."""

    def test_set_get_remove(self) -> None:
        store = InMemoryKeyValueStore()

        store.set("k", "v")
        assert store.get("k") == "v"

        store.remove("k")
        assert store.get("k") is None

    def test_remove_unknown_key_is_noop(self) -> None:
        store = InMemoryKeyValueStore()

        store.remove("unknown")

        assert store.used_bytes == 0

    def test_used_bytes_counts_utf8(self) -> None:
        store = InMemoryKeyValueStore()

        store.set("k", "é")

        assert store.used_bytes == 3

    def test_quota_exceeded(self) -> None:
        store = InMemoryKeyValueStore(quota_bytes=10)

        with pytest.raises(StorageQuotaExceededError) as exc_info:
            store.set("key", "12345678")

        assert exc_info.value.required == 11
        assert store.get("key") is None

    def test_overwrite_frees_previous_value(self) -> None:
        store = InMemoryKeyValueStore(quota_bytes=10)

        store.set("k", "123456789")
        store.set("k", "987654321")

        assert store.used_bytes == 10

    def test_disabled_store_raises(self) -> None:
        store = InMemoryKeyValueStore(enabled=False)

        with pytest.raises(StorageUnavailableError):
            store.get("k")

        store.enable()
        store.set("k", "v")
        store.disable()

        with pytest.raises(StorageFailure):
            store.set("k", "w")

    def test_non_string_value_rejected(self) -> None:
        store = InMemoryKeyValueStore()

        with pytest.raises(TypeError):
            store.set("k", 1)

    def test_negative_quota_rejected(self) -> None:
        with pytest.raises(ValueError):
            InMemoryKeyValueStore(quota_bytes=-1)

    def test_default_quota(self) -> None:
        store = InMemoryKeyValueStore()

        assert store.quota_bytes == 5 * 1024 * 1024
        assert isinstance(store, IKeyValueStore)
