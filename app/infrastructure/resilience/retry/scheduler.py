"""Retry scheduler for failed webhook deliveries.

The scheduler owns the background polling loop that drains the retry ledger.
It is created by the composition root, which calls start() on startup and
stop() on shutdown.

Each pass (run_once):
    1. dead-letters and deletes exhausted entries, due or not
    2. fetches up to batch_size due entries, earliest first
    3. deletes entries whose topic has no handler
    4. invokes the handler: success deletes the entry, failure increments
       attempt and either reschedules with the backoff table or dead-letters
       and deletes the entry once attempts are used up

One entry's failure never aborts the pass.
"""

import json
import threading
from datetime import timedelta
from typing import Any, Dict, Optional

import schedule

from infrastructure.clock import Clock, SystemClock
from infrastructure.logging import get_module_logger
from infrastructure.resilience.retry.config import RetryConfig
from infrastructure.resilience.retry.models import RetryLedgerEntry
from infrastructure.resilience.retry.registry import HandlerRegistry, RetryHandler
from infrastructure.resilience.retry.store import RetryStore

logger = get_module_logger()

EXHAUSTED_REASON = "max_attempts_exceeded"
UNDECODABLE_REASON = "payload_not_deserializable"


class RetryScheduler:
    """Drains the retry ledger on a fixed polling interval.

    Args:
        store: RetryStore holding ledger entries
        registry: HandlerRegistry mapping topics to handlers
        config: RetryConfig (defaults apply when omitted)
        clock: Clock for scheduling decisions
        scheduler: schedule.Scheduler driving the background jobs
    """

    def __init__(
        self,
        store: RetryStore,
        registry: Optional[HandlerRegistry] = None,
        config: Optional[RetryConfig] = None,
        clock: Optional[Clock] = None,
        scheduler: Optional[schedule.Scheduler] = None,
    ) -> None:
        self.store = store
        self.registry = registry or HandlerRegistry()
        self.config = config or RetryConfig()
        self.clock = clock or SystemClock()
        self._scheduler = scheduler or schedule.Scheduler()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.log = logger.bind(component="retry_scheduler")

    def register_handler(self, topic: str, handler: RetryHandler) -> None:
        self.registry.register(topic, handler)

    def schedule_retry(
        self, shop: str, topic: str, payload: Any, cause: Any
    ) -> Optional[str]:
        """Record a failed delivery for later redelivery.

        Never raises. Returns the entry id, or None when the entry could not
        be recorded.
        """
        try:
            now = self.clock.now()
            entry = RetryLedgerEntry(
                shop=shop,
                topic=topic,
                payload=json.dumps(payload, default=str),
                attempt=0,
                max_attempts=self.config.max_attempts,
                next_retry=now + timedelta(seconds=self.config.delay_for(0)),
                last_error=str(cause),
                created_at=now,
            )
            entry_id = self.store.save(entry)
            self.log.info(
                "retry_scheduled",
                entry_id=entry_id,
                shop=shop,
                topic=topic,
                next_retry=entry.next_retry.isoformat(),
                cause=str(cause),
            )
            return entry_id
        except Exception as e:  # pylint: disable=broad-except
            self.log.error(
                "retry_schedule_failed",
                shop=shop,
                topic=topic,
                error=str(e),
                cause=str(cause),
            )
            return None

    def run_once(self) -> Dict[str, int]:
        """Run one scheduler pass and return its statistics."""
        stats = {
            "purged": 0,
            "processed": 0,
            "succeeded": 0,
            "rescheduled": 0,
            "exhausted": 0,
            "dropped": 0,
        }

        stats["purged"] = self._purge_exhausted()

        entries = self.store.fetch_due(self.clock.now(), self.config.batch_size)
        if not entries:
            if stats["purged"]:
                self.log.info("retry_pass_complete", **stats)
            return stats

        self.log.info("retry_pass_start", entry_count=len(entries))

        for entry in entries:
            try:
                outcome = self._process(entry)
            except Exception as e:  # pylint: disable=broad-except
                self.log.error(
                    "retry_entry_processing_error",
                    entry_id=entry.id,
                    topic=entry.topic,
                    error=str(e),
                    exc_info=True,
                )
                continue
            stats["processed"] += 1
            stats[outcome] += 1

        self.log.info("retry_pass_complete", **stats)
        return stats

    def _purge_exhausted(self) -> int:
        """Dead-letter and delete entries that are out of attempts."""
        try:
            exhausted = self.store.fetch_exhausted()
        except Exception as e:  # pylint: disable=broad-except
            self.log.error("retry_exhausted_scan_failed", error=str(e))
            return 0

        purged = 0
        for entry in exhausted:
            try:
                self._discard(entry, EXHAUSTED_REASON)
            except Exception as e:  # pylint: disable=broad-except
                self.log.error(
                    "retry_entry_purge_failed",
                    entry_id=entry.id,
                    topic=entry.topic,
                    error=str(e),
                )
                continue
            purged += 1
        return purged

    def _process(self, entry: RetryLedgerEntry) -> str:
        handler = self.registry.get(entry.topic)
        if handler is None:
            self.log.error(
                "retry_handler_missing",
                entry_id=entry.id,
                topic=entry.topic,
                shop=entry.shop,
            )
            self.store.delete(entry.id)
            return "dropped"

        try:
            payload = json.loads(entry.payload)
        except ValueError as e:
            self.log.error(
                "retry_payload_invalid",
                entry_id=entry.id,
                topic=entry.topic,
                error=str(e),
            )
            self._discard(entry, UNDECODABLE_REASON)
            return "dropped"

        try:
            handler(payload, entry.shop)
        except Exception as e:  # pylint: disable=broad-except
            return self._record_failure(entry, e)

        self.store.delete(entry.id)
        self.log.info(
            "retry_succeeded",
            entry_id=entry.id,
            topic=entry.topic,
            shop=entry.shop,
            attempt=entry.attempt + 1,
        )
        return "succeeded"

    def _record_failure(self, entry: RetryLedgerEntry, error: Exception) -> str:
        entry.attempt += 1
        entry.last_error = str(error)

        if entry.is_exhausted:
            self.log.error(
                "retry_exhausted",
                entry_id=entry.id,
                topic=entry.topic,
                shop=entry.shop,
                attempts=entry.attempt,
                last_error=entry.last_error,
            )
            self._discard(entry, EXHAUSTED_REASON)
            return "exhausted"

        delay = self.config.delay_for(entry.attempt)
        entry.next_retry = self.clock.now() + timedelta(seconds=delay)
        self.store.update(entry.id, entry.attempt, entry.next_retry, entry.last_error)
        self.log.warning(
            "retry_rescheduled",
            entry_id=entry.id,
            topic=entry.topic,
            shop=entry.shop,
            attempt=entry.attempt,
            max_attempts=entry.max_attempts,
            delay_seconds=delay,
            error=entry.last_error,
        )
        return "rescheduled"

    def _discard(self, entry: RetryLedgerEntry, reason: str) -> None:
        """Dead-letter then delete ``entry``.

        The entry is deleted even when the dead-letter write fails.
        """
        kept = self.config.dead_letter_enabled
        if kept:
            try:
                self.store.record_dead_letter(entry, reason)
            except Exception as e:  # pylint: disable=broad-except
                kept = False
                self.log.error(
                    "retry_dead_letter_failed",
                    entry_id=entry.id,
                    topic=entry.topic,
                    shop=entry.shop,
                    reason=reason,
                    error=str(e),
                )
        self.store.delete(entry.id)
        self.log.warning(
            "retry_entry_dead_lettered",
            entry_id=entry.id,
            topic=entry.topic,
            shop=entry.shop,
            attempts=entry.attempt,
            reason=reason,
            kept=kept,
        )

    def cleanup(self) -> int:
        """Delete entries past the retention window or out of attempts."""
        cutoff = self.clock.now() - timedelta(days=self.config.retention_days)
        deleted = self.store.delete_stale(cutoff)
        self.log.info(
            "retry_cleanup_complete",
            deleted=deleted,
            retention_days=self.config.retention_days,
        )
        return deleted

    def get_stats(self, shop: Optional[str] = None) -> Dict[str, Any]:
        return self.store.get_stats(shop)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background polling thread. Calling it twice is a no-op."""
        with self._lock:
            if self.is_running:
                return
            self._scheduler.clear()
            self._scheduler.every(self.config.poll_interval_seconds).seconds.do(
                self._safe_run_once
            )
            self._scheduler.every(self.config.cleanup_interval_hours).hours.do(
                self._safe_cleanup
            )
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run, daemon=True, name="retry-scheduler"
            )
            self._thread.start()
        self.log.info(
            "retry_scheduler_started",
            poll_interval_seconds=self.config.poll_interval_seconds,
            batch_size=self.config.batch_size,
        )

    def stop(self, timeout: float = 10.0) -> None:
        """Cancel polling and join the background thread."""
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._scheduler.clear()
            self._thread = None
        if thread is not None:
            thread.join(timeout)
            self.log.info("retry_scheduler_stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            self._scheduler.run_pending()
            self._stop_event.wait(1)

    def _safe_run_once(self) -> None:
        try:
            self.run_once()
        except Exception as e:  # pylint: disable=broad-except
            self.log.error("retry_pass_failed", error=str(e), exc_info=True)

    def _safe_cleanup(self) -> None:
        try:
            self.cleanup()
        except Exception as e:  # pylint: disable=broad-except
            self.log.error("retry_cleanup_failed", error=str(e), exc_info=True)
