"""
Resilience Layer - Core Interfaces
Contrats partagés: horloge injectable et modèles de configuration.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


DEFAULT_PROBE_URL = "https://api.hiro.so/extended/v1/status"

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR", "CRITICAL")


class CacheSettings(BaseModel):
    """Paramètres du cache TTL."""

    default_ttl: float = Field(default=300.0, gt=0)
    sweep_interval: float = Field(default=60.0, gt=0)


class RetrySettings(BaseModel):
    """Paramètres du plan de retry par défaut."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=1.0, ge=0)


class NetworkSettings(BaseModel):
    """Paramètres du moniteur réseau."""

    probe_url: str = DEFAULT_PROBE_URL
    probe_timeout: float = Field(default=5.0, gt=0)
    poll_interval: float = Field(default=2.0, gt=0)
    default_max_wait: float = Field(default=30.0, ge=0)

    @field_validator("probe_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("probe_url doit être une URL http(s)")
        return value


class LoggingSettings(BaseModel):
    """Paramètres du logger structuré."""

    min_level: str = "INFO"
    emit_to_stderr: bool = True
    max_entries: int = Field(default=100, ge=1)

    @field_validator("min_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level == "WARNING":
            level = "WARN"
        if level not in VALID_LOG_LEVELS:
            raise ValueError(f"niveau de log inconnu: {value}")
        return level


class ResilienceSettings(BaseModel):
    """Configuration complète de la couche de résilience."""

    cache: CacheSettings = Field(default_factory=CacheSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    network: NetworkSettings = Field(default_factory=NetworkSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IClock(ABC):
    """Source de temps et de suspension injectable."""

    @abstractmethod
    def now(self) -> float:
        """
        Retourne le temps courant.

        Returns:
            Secondes monotones (origine arbitraire)
        """
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """
        Suspend la tâche appelante sans bloquer la boucle.

        Args:
            seconds: Durée de suspension en secondes
        """
        pass
