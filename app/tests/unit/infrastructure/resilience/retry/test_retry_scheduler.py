"""Unit tests for RetryScheduler."""

import json
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from infrastructure.resilience.retry import (
    HandlerRegistrationError,
    InMemoryRetryStore,
    RetryConfig,
    RetryScheduler,
)
from infrastructure.resilience.retry.scheduler import EXHAUSTED_REASON

pytestmark = pytest.mark.unit

SHOP = "example.myshopify.com"
TOPIC = "products/update"


class TestScheduleRetry:
    def test_records_entry_due_after_first_delay(self, retry_scheduler, retry_store, clock):
        entry_id = retry_scheduler.schedule_retry(
            SHOP, TOPIC, {"id": 1}, RuntimeError("handler failed")
        )

        entry = retry_store.get(entry_id)
        assert entry.attempt == 0
        assert entry.max_attempts == 5
        assert entry.next_retry == clock.now() + timedelta(seconds=1)
        assert entry.last_error == "handler failed"
        assert json.loads(entry.payload) == {"id": 1}

    def test_store_failure_is_swallowed(self, clock):
        store = MagicMock()
        store.save.side_effect = RuntimeError("table unavailable")
        scheduler = RetryScheduler(store, clock=clock)

        assert scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "boom") is None

    def test_rejects_unknown_topic_registration(self, retry_scheduler):
        with pytest.raises(HandlerRegistrationError):
            retry_scheduler.register_handler("orders/create", lambda payload, shop: None)


class TestRunOnce:
    def test_nothing_due(self, retry_scheduler):
        assert retry_scheduler.run_once()["processed"] == 0

    def test_entry_not_due_is_left_alone(
        self, retry_scheduler, retry_store, recording_handler
    ):
        retry_scheduler.register_handler(TOPIC, recording_handler)
        entry_id = retry_scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "boom")

        retry_scheduler.run_once()

        assert recording_handler.calls == []
        assert retry_store.get(entry_id) is not None

    def test_success_deletes_entry(
        self, retry_scheduler, retry_store, recording_handler, clock
    ):
        retry_scheduler.register_handler(TOPIC, recording_handler)
        entry_id = retry_scheduler.schedule_retry(SHOP, TOPIC, {"id": 7}, "boom")
        clock.advance(seconds=1)

        stats = retry_scheduler.run_once()

        assert stats["succeeded"] == 1
        assert recording_handler.calls == [({"id": 7}, SHOP)]
        assert retry_store.get(entry_id) is None

    def test_fail_fail_succeed(self, retry_scheduler, retry_store, recording_handler, clock):
        recording_handler.failures_remaining = 2
        retry_scheduler.register_handler(TOPIC, recording_handler)
        entry_id = retry_scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "initial")

        clock.advance(seconds=1)
        first = retry_scheduler.run_once()
        entry = retry_store.get(entry_id)
        assert first["rescheduled"] == 1
        assert entry.attempt == 1
        assert entry.next_retry == clock.now() + timedelta(seconds=2)

        clock.advance(seconds=2)
        second = retry_scheduler.run_once()
        entry = retry_store.get(entry_id)
        assert second["rescheduled"] == 1
        assert entry.attempt == 2
        assert entry.next_retry == clock.now() + timedelta(seconds=4)

        clock.advance(seconds=4)
        third = retry_scheduler.run_once()
        assert third["succeeded"] == 1
        assert len(recording_handler.calls) == 3
        assert retry_store.get(entry_id) is None

    def test_exhausted_entry_is_dead_lettered(
        self, retry_store, recording_handler, clock
    ):
        scheduler = RetryScheduler(
            retry_store,
            config=RetryConfig(max_attempts=2, delays_seconds=(1, 2)),
            clock=clock,
        )
        recording_handler.failures_remaining = 10
        scheduler.register_handler(TOPIC, recording_handler)
        entry_id = scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "initial")

        clock.advance(seconds=1)
        assert scheduler.run_once()["rescheduled"] == 1
        clock.advance(seconds=2)
        assert scheduler.run_once()["exhausted"] == 1

        assert retry_store.get(entry_id) is None
        letters = retry_store.list_dead_letters()
        assert [letter.entry.id for letter in letters] == [entry_id]
        assert letters[0].reason == EXHAUSTED_REASON
        assert letters[0].entry.attempt == 2

        clock.advance(hours=1)
        scheduler.run_once()
        assert len(recording_handler.calls) == 2

    def test_dead_letter_disabled(self, retry_store, recording_handler, clock):
        scheduler = RetryScheduler(
            retry_store,
            config=RetryConfig(max_attempts=1, dead_letter_enabled=False),
            clock=clock,
        )
        recording_handler.failures_remaining = 1
        scheduler.register_handler(TOPIC, recording_handler)
        entry_id = scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "initial")
        clock.advance(seconds=1)

        scheduler.run_once()

        assert retry_store.get(entry_id) is None
        assert retry_store.list_dead_letters() == []

    def test_already_exhausted_entries_are_purged(
        self, retry_scheduler, retry_store, retry_entry_factory
    ):
        retry_store.save(retry_entry_factory(entry_id="spent", attempt=5, max_attempts=5))

        stats = retry_scheduler.run_once()

        assert stats["purged"] == 1
        assert retry_store.get("spent") is None

    def test_missing_handler_drops_entry(self, retry_scheduler, retry_store, clock):
        entry_id = retry_scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "boom")
        clock.advance(seconds=1)

        stats = retry_scheduler.run_once()

        assert stats["dropped"] == 1
        assert retry_store.get(entry_id) is None

    def test_undecodable_payload_is_dropped(
        self, retry_scheduler, retry_store, retry_entry_factory, recording_handler
    ):
        retry_scheduler.register_handler(TOPIC, recording_handler)
        entry = retry_entry_factory(entry_id="broken")
        entry.payload = "{not json"
        retry_store.save(entry)

        stats = retry_scheduler.run_once()

        assert stats["dropped"] == 1
        assert recording_handler.calls == []
        assert retry_store.list_dead_letters()[0].entry.id == "broken"

    def test_one_failing_entry_does_not_abort_pass(self, retry_entry_factory, clock):
        store = InMemoryRetryStore()
        scheduler = RetryScheduler(store, clock=clock)
        handled = []
        scheduler.register_handler(TOPIC, lambda payload, shop: handled.append(payload))
        now = clock.now()
        store.save(retry_entry_factory(entry_id="a", next_retry=now - timedelta(seconds=2)))
        store.save(retry_entry_factory(entry_id="b", next_retry=now - timedelta(seconds=1)))
        original_delete = store.delete

        def flaky_delete(entry_id):
            if entry_id == "a":
                raise RuntimeError("delete failed")
            return original_delete(entry_id)

        store.delete = flaky_delete

        stats = scheduler.run_once()

        assert stats["processed"] == 1
        assert stats["succeeded"] == 1
        assert len(handled) == 2

    def test_batch_size_limits_pass(self, retry_store, retry_entry_factory, recording_handler, clock):
        scheduler = RetryScheduler(
            retry_store, config=RetryConfig(batch_size=2), clock=clock
        )
        scheduler.register_handler(TOPIC, recording_handler)
        for index in range(3):
            retry_store.save(retry_entry_factory(entry_id=f"entry-{index}"))

        assert scheduler.run_once()["processed"] == 2
        assert retry_store.get_stats()["total"] == 1

    def test_dead_letter_write_failure_still_purges_and_delivers(
        self, retry_scheduler, retry_store, retry_entry_factory, recording_handler
    ):
        retry_scheduler.register_handler(TOPIC, recording_handler)
        retry_store.save(retry_entry_factory(entry_id="spent", attempt=5, max_attempts=5))
        retry_store.save(retry_entry_factory(entry_id="due"))
        retry_store.record_dead_letter = MagicMock(
            side_effect=RuntimeError("dead letter table unavailable")
        )

        stats = retry_scheduler.run_once()

        assert stats["purged"] == 1
        assert stats["succeeded"] == 1
        assert retry_store.get("spent") is None
        assert retry_store.get("due") is None
        assert len(recording_handler.calls) == 1

    def test_purge_failure_does_not_block_due_entries(
        self, retry_scheduler, retry_store, retry_entry_factory, recording_handler
    ):
        retry_scheduler.register_handler(TOPIC, recording_handler)
        retry_store.save(retry_entry_factory(entry_id="spent", attempt=5, max_attempts=5))
        retry_store.save(retry_entry_factory(entry_id="due"))
        original_delete = retry_store.delete

        def failing_delete(entry_id):
            if entry_id == "spent":
                raise RuntimeError("delete failed")
            return original_delete(entry_id)

        retry_store.delete = failing_delete

        stats = retry_scheduler.run_once()

        assert stats["purged"] == 0
        assert stats["succeeded"] == 1
        assert len(recording_handler.calls) == 1

    def test_exhausted_scan_failure_does_not_block_due_entries(
        self, retry_scheduler, retry_store, retry_entry_factory, recording_handler
    ):
        retry_scheduler.register_handler(TOPIC, recording_handler)
        retry_store.save(retry_entry_factory(entry_id="due"))
        retry_store.fetch_exhausted = MagicMock(side_effect=RuntimeError("scan failed"))

        stats = retry_scheduler.run_once()

        assert stats["succeeded"] == 1


class TestCleanupAndStats:
    def test_cleanup_removes_entries_past_retention(
        self, retry_scheduler, retry_store, retry_entry_factory, clock
    ):
        retry_store.save(
            retry_entry_factory(entry_id="old", created_at=clock.now() - timedelta(days=8))
        )
        retry_store.save(retry_entry_factory(entry_id="new"))

        assert retry_scheduler.cleanup() == 1
        assert retry_store.get("new") is not None

    def test_get_stats_delegates_to_store(self, retry_scheduler):
        retry_scheduler.schedule_retry(SHOP, TOPIC, {"id": 1}, "boom")

        stats = retry_scheduler.get_stats(SHOP)

        assert stats["total"] == 1
        assert stats["by_topic"] == {TOPIC: 1}


class TestStartStop:
    def test_start_and_stop(self, retry_scheduler):
        retry_scheduler.start()
        try:
            assert retry_scheduler.is_running
            retry_scheduler.start()
            assert retry_scheduler.is_running
        finally:
            retry_scheduler.stop(timeout=5)

        assert not retry_scheduler.is_running

    def test_stop_without_start(self, retry_scheduler):
        retry_scheduler.stop()
        assert not retry_scheduler.is_running
