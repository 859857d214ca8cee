"""
Resilience Layer: Logging

Logging structuré JSON des composants de résilience:
- Entrées {timestamp, level, correlation_id, context, message, extra}
- Timestamp ISO 8601 UTC
- Niveaux DEBUG, INFO, WARN, ERROR, CRITICAL
- Masquage des secrets de portefeuille
- Historique borné et abonnements
"""

from .interfaces import (
    # Enums
    LogLevel,
    # Dataclasses
    LogEntry,
    LogConfig,
    # Interfaces
    IStructuredLogger,
    ISensitiveMasker,
)
from .sensitive_masker import (
    SensitiveMasker,
)
from .structured_logger import (
    StructuredLogger,
    ContextualLogger,
    parse_level,
    stderr_handler,
    # Exceptions
    MissingRequiredFieldError,
    InvalidLogLevelError,
)

__all__ = [
    # Enums
    "LogLevel",
    # Dataclasses
    "LogEntry",
    "LogConfig",
    # Interfaces
    "IStructuredLogger",
    "ISensitiveMasker",
    # Implementations
    "SensitiveMasker",
    "StructuredLogger",
    "ContextualLogger",
    "parse_level",
    "stderr_handler",
    # Exceptions
    "MissingRequiredFieldError",
    "InvalidLogLevelError",
]
