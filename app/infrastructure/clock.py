"""Clock abstraction for time-dependent infrastructure.

Task expiry, stuck-task detection and retry scheduling read the current time
through a Clock so tests can drive time explicitly.
"""

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
