"""
Resilience Layer: Logging - Structured Logger

Logger JSON structuré utilisé par le cache, l'exécuteur de retry,
le moniteur réseau et le wrapper de dégradation.
"""

import sys
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, List, Optional

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogConfig,
    LogEntry,
    LogLevel,
    LogListener,
)
from .sensitive_masker import SensitiveMasker


class MissingRequiredFieldError(Exception):
    """Champ obligatoire manquant dans une entrée de log."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Required field missing: {field_name}")


class InvalidLogLevelError(Exception):
    """Niveau de log inconnu."""

    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Invalid log level: {level}")


def parse_level(name: str) -> LogLevel:
    """
    Convertit un nom de niveau ("info", "WARN"...) en LogLevel.

    "WARNING" est accepté comme alias de WARN.

    Raises:
        InvalidLogLevelError: Si le nom ne correspond à aucun niveau
    """
    normalized = (name or "").strip().upper()
    if normalized == "WARNING":
        normalized = "WARN"
    try:
        return LogLevel(normalized)
    except ValueError:
        raise InvalidLogLevelError(name)


def stderr_handler(line: str) -> None:
    """Handler de sortie par défaut: une ligne JSON par entrée sur stderr."""
    print(line, file=sys.stderr, flush=True)


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON structuré avec historique borné.

    Les entrées sont conservées dans un historique de taille max_entries
    (les plus anciennes sont évincées) et transmises à l'output_handler
    ainsi qu'aux listeners abonnés.

    Example:
        logger = StructuredLogger("cache", output_handler=stderr_handler)
        logger.info("Cache sweep", removed=3)
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Initialise le logger structuré.

        Args:
            name: Nom du logger (composant émetteur)
            config: Configuration optionnelle
            masker: Masker pour données sensibles
            output_handler: Destination des lignes JSON (aucune sortie si None)

        Raises:
            ValueError: Si name vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._output_handler = output_handler
        self._entries: Deque[LogEntry] = deque(maxlen=max(1, self._config.max_entries))
        self._listeners: List[LogListener] = []
        self._default_context: Optional[str] = self._config.default_context
        self._default_correlation_id: Optional[str] = self._config.default_correlation_id

    @property
    def name(self) -> str:
        """Retourne le nom du logger."""
        return self._name

    @property
    def config(self) -> LogConfig:
        """Retourne la configuration."""
        return self._config

    def set_default_correlation(self, correlation_id: str) -> None:
        """Définit correlation_id par défaut."""
        self._default_correlation_id = correlation_id

    def set_default_context(self, context: str) -> None:
        """Définit le contexte par défaut."""
        self._default_context = context

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        context: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Crée une entrée de log structurée.

        Processus:
            1. Filtre sur min_level
            2. Résout correlation_id (généré si absent) et context
            3. Masque les données sensibles de extra
            4. Conserve l'entrée, l'émet en JSON, notifie les listeners

        Raises:
            MissingRequiredFieldError: Si message vide
        """
        if not self._should_log(level):
            return None

        if not message:
            raise MissingRequiredFieldError("message")

        resolved_correlation = (
            correlation_id or self._default_correlation_id or self._generate_correlation_id()
        )
        resolved_context = context or self._default_context or self._name

        filtered_extra = {}
        if extra and self._config.include_extra:
            if self._config.mask_sensitive:
                filtered_extra = self._masker.mask(dict(extra))
            else:
                filtered_extra = dict(extra)

        entry = LogEntry(
            timestamp=self._generate_timestamp(),
            level=level,
            correlation_id=resolved_correlation,
            context=resolved_context,
            message=message,
            extra=filtered_extra,
            logger_name=self._name,
        )

        self._entries.append(entry)

        if self._output_handler:
            self._output_handler(entry.to_json())

        self._notify_listeners(entry)
        return entry

    def _notify_listeners(self, entry: LogEntry) -> None:
        # Un listener défaillant ne doit pas casser le logging
        for listener in list(self._listeners):
            try:
                listener(entry)
            except Exception:
                continue

    def _generate_timestamp(self) -> str:
        """Timestamp ISO 8601 UTC avec millisecondes (2024-12-04T14:30:00.123Z)."""
        now = datetime.now(timezone.utc)
        return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

    def _generate_correlation_id(self) -> str:
        return str(uuid.uuid4())

    def _should_log(self, level: LogLevel) -> bool:
        return LogLevel.get_priority(level) >= LogLevel.get_priority(self._config.min_level)

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau DEBUG."""
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau INFO."""
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau WARN."""
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau ERROR."""
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        """Log niveau CRITICAL."""
        return self.log(LogLevel.CRITICAL, message, **extra)

    def subscribe(self, listener: LogListener) -> Callable[[], None]:
        """
        Abonne un listener aux nouvelles entrées.

        Args:
            listener: Fonction appelée avec chaque LogEntry émise

        Returns:
            Fonction de désabonnement (idempotente)
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_entries(self) -> List[LogEntry]:
        """Retourne les entrées retenues, de la plus ancienne à la plus récente."""
        return list(self._entries)

    def clear_entries(self) -> None:
        """Efface l'historique."""
        self._entries.clear()

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        """Filtre l'historique par niveau."""
        return [e for e in self._entries if e.level == level]

    def get_entries_by_context(self, context: str) -> List[LogEntry]:
        """Filtre l'historique par contexte."""
        return [e for e in self._entries if e.context == context]

    def with_context(
        self,
        context: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> "ContextualLogger":
        """
        Crée un logger dont contexte et corrélation sont fixés.

        Args:
            context: Contexte pour ce logger
            correlation_id: ID corrélation pour ce logger

        Returns:
            ContextualLogger partageant l'historique de ce logger
        """
        return ContextualLogger(
            self,
            context=context or self._default_context,
            correlation_id=correlation_id or self._default_correlation_id,
        )


class ContextualLogger(IStructuredLogger):
    """Vue d'un StructuredLogger avec contexte et corrélation pré-définis."""

    def __init__(
        self,
        logger: StructuredLogger,
        context: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        self._logger = logger
        self._context = context
        self._correlation_id = correlation_id

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        context: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        return self._logger.log(
            level,
            message,
            correlation_id=correlation_id or self._correlation_id,
            context=context or self._context,
            **extra,
        )

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)

    def get_entries(self) -> List[LogEntry]:
        return self._logger.get_entries()
