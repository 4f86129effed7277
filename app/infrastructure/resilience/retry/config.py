"""Retry system configuration.

This module defines configuration for the retry ledger and scheduler.
"""

from dataclasses import dataclass
from typing import Tuple

from infrastructure.configuration.infrastructure.retry import RetrySettings

DEFAULT_DELAYS_SECONDS: Tuple[int, ...] = (1, 2, 4, 8, 16, 60)


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry scheduler behavior.

    Attributes:
        max_attempts: Failed redeliveries before an entry is dropped
        delays_seconds: Fixed backoff table indexed by attempt
        batch_size: Due entries processed per scheduler pass
        poll_interval_seconds: Seconds between scheduler passes
        retention_days: Entries older than this are removed by cleanup()
        cleanup_interval_hours: Hours between cleanup() runs
        dead_letter_enabled: Keep a copy of exhausted entries

    Example:
        config = RetryConfig()
        config.delay_for(0)   # 1
        config.delay_for(3)   # 8
        config.delay_for(42)  # 60
    """

    max_attempts: int = 5
    delays_seconds: Tuple[int, ...] = DEFAULT_DELAYS_SECONDS
    batch_size: int = 10
    poll_interval_seconds: int = 5
    retention_days: int = 7
    cleanup_interval_hours: int = 24
    dead_letter_enabled: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not self.delays_seconds:
            raise ValueError("delays_seconds must contain at least one delay")
        if any(delay < 0 for delay in self.delays_seconds):
            raise ValueError("delays_seconds must not contain negative delays")
        if list(self.delays_seconds) != sorted(self.delays_seconds):
            raise ValueError("delays_seconds must be non-decreasing")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.poll_interval_seconds < 1:
            raise ValueError("poll_interval_seconds must be at least 1")
        if self.retention_days < 1:
            raise ValueError("retention_days must be at least 1")
        if self.cleanup_interval_hours < 1:
            raise ValueError("cleanup_interval_hours must be at least 1")

    def delay_for(self, attempt: int) -> int:
        """Return the backoff delay after ``attempt`` failed redeliveries.

        Attempts beyond the table reuse its last value.
        """
        index = min(max(attempt, 0), len(self.delays_seconds) - 1)
        return self.delays_seconds[index]

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> "RetryConfig":
        return cls(
            max_attempts=settings.max_attempts,
            delays_seconds=tuple(settings.delays_seconds),
            batch_size=settings.batch_size,
            poll_interval_seconds=settings.poll_interval_seconds,
            retention_days=settings.retention_days,
            cleanup_interval_hours=settings.cleanup_interval_hours,
            dead_letter_enabled=settings.dead_letter_enabled,
        )
