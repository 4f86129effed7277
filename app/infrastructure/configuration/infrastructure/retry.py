"""Retry ledger infrastructure settings."""

from pydantic import Field, field_validator

from infrastructure.configuration.base import InfrastructureSettings


class RetrySettings(InfrastructureSettings):
    """Retry ledger and scheduler configuration for failed webhook deliveries.

    Environment Variables:
        RETRY_ENABLED: Start the background retry scheduler (default: True)
        RETRY_BACKEND: Ledger backend - 'memory' or 'dynamodb'
        RETRY_DYNAMODB_TABLE_NAME: DynamoDB table for ledger entries
        RETRY_DEAD_LETTER_TABLE_NAME: DynamoDB table for exhausted entries
        RETRY_DEAD_LETTER_ENABLED: Keep a copy of exhausted entries (default: True)
        RETRY_MAX_ATTEMPTS: Redelivery attempts before giving up (default: 5)
        RETRY_DELAYS_SECONDS: JSON list backoff table (default: [1,2,4,8,16,60])
        RETRY_BATCH_SIZE: Entries processed per scheduler pass (default: 10)
        RETRY_POLL_INTERVAL_SECONDS: Seconds between scheduler passes (default: 5)
        RETRY_RETENTION_DAYS: Age after which housekeeping deletes entries (default: 7)
        RETRY_CLEANUP_INTERVAL_HOURS: Hours between housekeeping sweeps (default: 24)

    Backoff:
        The delay for a failed attempt ``n`` is
        ``RETRY_DELAYS_SECONDS[min(n, len(RETRY_DELAYS_SECONDS) - 1)]``.

        Example with defaults:
            First schedule: 1s
            Attempt 1 failed: 2s
            Attempt 2 failed: 4s
            Attempt 3 failed: 8s
            Attempt 4 failed: 16s
            Attempt 5 failed: dropped (dead-lettered)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        if settings.retry.enabled:
            delays = settings.retry.delays_seconds
        ```
    """

    enabled: bool = Field(
        default=True,
        alias="RETRY_ENABLED",
        description="Start the background retry scheduler",
    )
    backend: str = Field(
        default="memory",
        alias="RETRY_BACKEND",
        description="Retry ledger backend: 'memory' or 'dynamodb'",
    )
    dynamodb_table_name: str = Field(
        default="webhook-retry-ledger",
        alias="RETRY_DYNAMODB_TABLE_NAME",
        description="DynamoDB table name for retry ledger entries",
    )
    dead_letter_table_name: str = Field(
        default="webhook-retry-dead-letters",
        alias="RETRY_DEAD_LETTER_TABLE_NAME",
        description="DynamoDB table name for exhausted retry entries",
    )
    dead_letter_enabled: bool = Field(
        default=True,
        alias="RETRY_DEAD_LETTER_ENABLED",
        description="Keep exhausted entries for operator inspection",
    )
    max_attempts: int = Field(
        default=5,
        alias="RETRY_MAX_ATTEMPTS",
        description="Maximum redelivery attempts before an entry is dropped",
    )
    delays_seconds: list[int] = Field(
        default=[1, 2, 4, 8, 16, 60],
        alias="RETRY_DELAYS_SECONDS",
        description="Backoff table in seconds, indexed by attempt",
    )
    batch_size: int = Field(
        default=10,
        alias="RETRY_BATCH_SIZE",
        description="Number of due entries processed per scheduler pass",
    )
    poll_interval_seconds: int = Field(
        default=5,
        alias="RETRY_POLL_INTERVAL_SECONDS",
        description="Seconds between scheduler passes",
    )
    retention_days: int = Field(
        default=7,
        alias="RETRY_RETENTION_DAYS",
        description="Entries older than this are removed by housekeeping",
    )
    cleanup_interval_hours: int = Field(
        default=24,
        alias="RETRY_CLEANUP_INTERVAL_HOURS",
        description="Hours between housekeeping sweeps of the ledger",
    )

    @field_validator("delays_seconds")
    @classmethod
    def validate_delays(cls, value: list[int]) -> list[int]:
        """Reject empty or non-positive backoff tables."""
        if not value:
            raise ValueError("RETRY_DELAYS_SECONDS must contain at least one delay")
        if any(delay < 0 for delay in value):
            raise ValueError("RETRY_DELAYS_SECONDS must not contain negative delays")
        return value
