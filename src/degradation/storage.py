"""
Resilience Layer: Degradation - Key/Value Storage

Stockage de chaînes en mémoire, borné en taille comme un stockage local de
navigateur, et pouvant être désactivé.
"""

from typing import Dict, List, Optional

from .interfaces import IKeyValueStore


class StorageFailure(Exception):
    """Échec du stockage clé/valeur."""

    pass


class StorageQuotaExceededError(StorageFailure):
    """Écriture refusée: quota dépassé."""

    def __init__(self, key: str, required: int, quota: int) -> None:
        self.key = key
        self.required = required
        self.quota = quota
        super().__init__(f"Storage quota exceeded writing '{key}': {required} > {quota} bytes")


class StorageUnavailableError(StorageFailure):
    """Stockage désactivé ou indisponible."""

    pass


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class InMemoryKeyValueStore(IKeyValueStore):
    """
    Stockage clé/valeur mémoire à quota.

    La taille consommée est la somme des tailles UTF-8 des clés et valeurs.

    Example:
        store = InMemoryKeyValueStore(quota_bytes=1024)
        store.set("wallet:last_address", "SP2J6...")
    """

    DEFAULT_QUOTA_BYTES: int = 5 * 1024 * 1024

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES, enabled: bool = True) -> None:
        """
        Args:
            quota_bytes: Taille maximale totale en octets
            enabled: False pour simuler un stockage désactivé

        Raises:
            ValueError: Si quota_bytes négatif
        """
        if quota_bytes < 0:
            raise ValueError("quota_bytes must be >= 0")

        self._quota = quota_bytes
        self._enabled = enabled
        self._data: Dict[str, str] = {}
        self._used = 0

    @property
    def used_bytes(self) -> int:
        return self._used

    @property
    def quota_bytes(self) -> int:
        return self._quota

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def _ensure_enabled(self) -> None:
        if not self._enabled:
            raise StorageUnavailableError("Storage is disabled")

    def get(self, key: str) -> Optional[str]:
        self._ensure_enabled()
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._ensure_enabled()
        if not isinstance(value, str):
            raise TypeError("Storage values must be strings")

        previous = self._data.get(key)
        freed = _entry_size(key, previous) if previous is not None else 0
        required = self._used - freed + _entry_size(key, value)
        if required > self._quota:
            raise StorageQuotaExceededError(key, required, self._quota)

        self._data[key] = value
        self._used = required

    def remove(self, key: str) -> None:
        self._ensure_enabled()
        previous = self._data.pop(key, None)
        if previous is not None:
            self._used -= _entry_size(key, previous)

    def keys(self) -> List[str]:
        self._ensure_enabled()
        return list(self._data)
