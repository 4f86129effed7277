"""Retry ledger storage.

This module provides the storage interface for ledger entries and an
in-memory implementation. The protocol-based design allows multiple
backends (in-memory, DynamoDB).
"""

import dataclasses
import threading
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.resilience.retry.models import DeadLetterEntry, RetryLedgerEntry

logger = get_module_logger()


class RetryStore(Protocol):
    """Storage interface for retry ledger entries.

    Methods:
        save: Persist a new entry and return its ID
        get: Return an entry by ID
        fetch_due: Entries due for redelivery, earliest first
        fetch_exhausted: Entries that used up their attempts
        update: Persist attempt/next_retry/last_error after a failure
        delete: Remove an entry
        delete_stale: Remove entries older than a cutoff or exhausted
        record_dead_letter: Keep a copy of an entry that will not be retried
        list_dead_letters: Inspect dead-lettered entries
        get_stats: Ledger statistics
    """

    def save(self, entry: RetryLedgerEntry) -> str:
        ...

    def get(self, entry_id: str) -> Optional[RetryLedgerEntry]:
        ...

    def fetch_due(self, now: datetime, limit: int) -> List[RetryLedgerEntry]:
        """Return up to ``limit`` entries with ``next_retry <= now`` and
        ``attempt < max_attempts``, ordered by ``next_retry`` ascending."""
        ...

    def fetch_exhausted(self) -> List[RetryLedgerEntry]:
        """Return every entry with ``attempt >= max_attempts``, due or not."""
        ...

    def update(
        self,
        entry_id: str,
        attempt: int,
        next_retry: datetime,
        last_error: Optional[str],
    ) -> None:
        ...

    def delete(self, entry_id: str) -> bool:
        ...

    def delete_stale(self, cutoff: datetime) -> int:
        """Delete entries created before ``cutoff`` or exhausted; return the count."""
        ...

    def record_dead_letter(self, entry: RetryLedgerEntry, reason: str) -> None:
        ...

    def list_dead_letters(self, limit: int = 100) -> List[DeadLetterEntry]:
        ...

    def get_stats(self, shop: Optional[str] = None) -> Dict[str, Any]:
        """Return ``{"total", "by_topic", "by_attempt"}`` optionally for one shop."""
        ...


def build_stats(entries: List[RetryLedgerEntry]) -> Dict[str, Any]:
    """Aggregate ledger entries into the stats shape exposed by get_stats()."""
    by_topic = Counter(entry.topic for entry in entries)
    by_attempt = Counter(str(entry.attempt) for entry in entries)
    return {
        "total": len(entries),
        "by_topic": dict(by_topic),
        "by_attempt": dict(by_attempt),
    }


class InMemoryRetryStore:
    """Thread-safe in-memory implementation of RetryStore.

    Suitable for single-instance deployments and tests. Entries do not survive
    a restart; use the DynamoDB store when they must.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, RetryLedgerEntry] = {}
        self._dead_letters: List[DeadLetterEntry] = []
        self._lock = threading.Lock()

    def save(self, entry: RetryLedgerEntry) -> str:
        with self._lock:
            self._entries[entry.id] = dataclasses.replace(entry)
        logger.debug("retry_entry_saved", entry_id=entry.id, topic=entry.topic)
        return entry.id

    def get(self, entry_id: str) -> Optional[RetryLedgerEntry]:
        with self._lock:
            entry = self._entries.get(entry_id)
            return dataclasses.replace(entry) if entry else None

    def fetch_due(self, now: datetime, limit: int) -> List[RetryLedgerEntry]:
        with self._lock:
            due = [
                dataclasses.replace(entry)
                for entry in self._entries.values()
                if entry.next_retry <= now and not entry.is_exhausted
            ]
        due.sort(key=lambda entry: entry.next_retry)
        return due[:limit]

    def fetch_exhausted(self) -> List[RetryLedgerEntry]:
        with self._lock:
            return [
                dataclasses.replace(entry)
                for entry in self._entries.values()
                if entry.is_exhausted
            ]

    def update(
        self,
        entry_id: str,
        attempt: int,
        next_retry: datetime,
        last_error: Optional[str],
    ) -> None:
        with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                logger.warning("retry_entry_update_not_found", entry_id=entry_id)
                return
            entry.attempt = attempt
            entry.next_retry = next_retry
            entry.last_error = last_error

    def delete(self, entry_id: str) -> bool:
        with self._lock:
            return self._entries.pop(entry_id, None) is not None

    def delete_stale(self, cutoff: datetime) -> int:
        with self._lock:
            stale = [
                entry_id
                for entry_id, entry in self._entries.items()
                if entry.created_at < cutoff or entry.is_exhausted
            ]
            for entry_id in stale:
                del self._entries[entry_id]
        return len(stale)

    def record_dead_letter(self, entry: RetryLedgerEntry, reason: str) -> None:
        with self._lock:
            self._dead_letters.append(
                DeadLetterEntry(entry=dataclasses.replace(entry), reason=reason)
            )

    def list_dead_letters(self, limit: int = 100) -> List[DeadLetterEntry]:
        with self._lock:
            return list(self._dead_letters[-limit:])

    def get_stats(self, shop: Optional[str] = None) -> Dict[str, Any]:
        with self._lock:
            entries = [
                entry
                for entry in self._entries.values()
                if shop is None or entry.shop == shop
            ]
        return build_stats(entries)
