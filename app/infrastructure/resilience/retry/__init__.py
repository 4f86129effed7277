"""Retry ledger and scheduler for failed webhook deliveries.

Architecture:
- RetryLedgerEntry: failed delivery with an opaque serialized payload
- RetryStore: storage interface with in-memory and DynamoDB implementations
- HandlerRegistry: topic → handler(payload, shop)
- RetryScheduler: background loop redelivering due entries with fixed backoff
- RetryConfig: scheduler configuration

Usage:
    from infrastructure.resilience.retry import (
        InMemoryRetryStore,
        RetryConfig,
        RetryScheduler,
    )

    scheduler = RetryScheduler(InMemoryRetryStore(), config=RetryConfig())
    scheduler.register_handler("products/update", handle_product_update)
    scheduler.schedule_retry(shop, "products/update", payload, cause=exc)
    scheduler.start()
    ...
    scheduler.stop()
"""

from infrastructure.resilience.retry.config import RetryConfig
from infrastructure.resilience.retry.dynamodb_store import DynamoDBRetryStore
from infrastructure.resilience.retry.factory import create_retry_store
from infrastructure.resilience.retry.models import DeadLetterEntry, RetryLedgerEntry
from infrastructure.resilience.retry.registry import (
    HandlerRegistrationError,
    HandlerRegistry,
    RetryHandler,
)
from infrastructure.resilience.retry.scheduler import RetryScheduler
from infrastructure.resilience.retry.store import InMemoryRetryStore, RetryStore

__all__ = [
    # Models
    "RetryLedgerEntry",
    "DeadLetterEntry",
    # Configuration
    "RetryConfig",
    # Store
    "RetryStore",
    "InMemoryRetryStore",
    "DynamoDBRetryStore",
    "create_retry_store",
    # Handlers
    "HandlerRegistry",
    "HandlerRegistrationError",
    "RetryHandler",
    # Scheduler
    "RetryScheduler",
]
