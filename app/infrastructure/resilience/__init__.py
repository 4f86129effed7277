"""Resilience patterns and implementations.

Contains the retry ledger and scheduler used to redeliver failed webhook
deliveries.
"""

from infrastructure.resilience.retry import (
    DeadLetterEntry,
    HandlerRegistry,
    InMemoryRetryStore,
    RetryConfig,
    RetryLedgerEntry,
    RetryScheduler,
    RetryStore,
)

__all__ = [
    "DeadLetterEntry",
    "HandlerRegistry",
    "InMemoryRetryStore",
    "RetryConfig",
    "RetryLedgerEntry",
    "RetryScheduler",
    "RetryStore",
]
