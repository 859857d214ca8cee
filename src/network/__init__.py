"""
Resilience Layer: Network

Module réseau avec:
- Retry séquentiel à délai linéaire (base_delay * tentative)
- Sondage de joignabilité et attente bornée du retour réseau
- Circuit breaker
- Timeout d'opération
- Classification des échecs récupérables
- Récupération anti-rebond
"""

from .interfaces import (
    # Data classes
    RetryPlan,
    RetryResult,
    TRANSACTION_RETRY_PLAN,
    # Interfaces
    IRetryExecutor,
    INetworkMonitor,
)
from .retry_executor import (
    RetryExecutor,
    with_retry,
    retry_transaction,
)
from .debounce import (
    DebouncedRecovery,
)
from .network_monitor import (
    NetworkMonitor,
)
from .circuit_breaker import (
    # Enums
    CircuitState,
    # Data classes
    CircuitBreakerConfig,
    CircuitBreakerState,
    # Implementations
    CircuitBreaker,
    # Decorators
    with_circuit_breaker,
    # Exceptions
    CircuitOpenError,
)
from .timeouts import (
    with_timeout,
    OperationTimeoutError,
    InvalidTimeoutError,
)
from .error_classifier import (
    RecoveryKind,
    RecoveryStrategy,
    is_recoverable_error,
    get_recovery_strategy,
)

__all__ = [
    # Enums
    "CircuitState",
    "RecoveryKind",
    # Data classes
    "RetryPlan",
    "RetryResult",
    "TRANSACTION_RETRY_PLAN",
    "CircuitBreakerConfig",
    "CircuitBreakerState",
    "RecoveryStrategy",
    # Interfaces
    "IRetryExecutor",
    "INetworkMonitor",
    # Implementations
    "RetryExecutor",
    "NetworkMonitor",
    "CircuitBreaker",
    "DebouncedRecovery",
    # Functions / decorators
    "with_retry",
    "retry_transaction",
    "with_circuit_breaker",
    "with_timeout",
    "is_recoverable_error",
    "get_recovery_strategy",
    # Exceptions
    "CircuitOpenError",
    "OperationTimeoutError",
    "InvalidTimeoutError",
]
