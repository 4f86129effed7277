"""Unit tests for the in-memory retry ledger."""

import threading
from datetime import timedelta

import pytest

from infrastructure.resilience.retry import RetryLedgerEntry

pytestmark = pytest.mark.unit


class TestRetryLedgerEntry:
    def test_requires_topic(self, clock):
        with pytest.raises(ValueError, match="topic"):
            RetryLedgerEntry(shop="s", topic="", payload="{}", next_retry=clock.now())

    def test_requires_serialized_payload(self, clock):
        with pytest.raises(ValueError, match="serialized"):
            RetryLedgerEntry(
                shop="s", topic="products/update", payload={"id": 1}, next_retry=clock.now()
            )

    def test_is_exhausted(self, retry_entry_factory):
        assert not retry_entry_factory(attempt=4, max_attempts=5).is_exhausted
        assert retry_entry_factory(attempt=5, max_attempts=5).is_exhausted


class TestInMemoryRetryStore:
    def test_save_and_get(self, retry_store, retry_entry_factory):
        entry = retry_entry_factory(entry_id="entry-1")

        assert retry_store.save(entry) == "entry-1"
        assert retry_store.get("entry-1") == entry

    def test_fetch_due_orders_and_limits(self, retry_store, retry_entry_factory, clock):
        now = clock.now()
        retry_store.save(
            retry_entry_factory(entry_id="late", next_retry=now - timedelta(seconds=1))
        )
        retry_store.save(
            retry_entry_factory(entry_id="early", next_retry=now - timedelta(seconds=30))
        )
        retry_store.save(
            retry_entry_factory(entry_id="future", next_retry=now + timedelta(seconds=30))
        )

        due = retry_store.fetch_due(now, limit=10)
        limited = retry_store.fetch_due(now, limit=1)

        assert [entry.id for entry in due] == ["early", "late"]
        assert [entry.id for entry in limited] == ["early"]

    def test_fetch_due_excludes_exhausted(self, retry_store, retry_entry_factory, clock):
        retry_store.save(retry_entry_factory(entry_id="done", attempt=5, max_attempts=5))

        assert retry_store.fetch_due(clock.now(), limit=10) == []
        assert [entry.id for entry in retry_store.fetch_exhausted()] == ["done"]

    def test_update(self, retry_store, retry_entry_factory, clock):
        retry_store.save(retry_entry_factory(entry_id="entry-1"))
        later = clock.now() + timedelta(seconds=2)

        retry_store.update("entry-1", 1, later, "boom")

        entry = retry_store.get("entry-1")
        assert (entry.attempt, entry.next_retry, entry.last_error) == (1, later, "boom")

    def test_update_missing_is_noop(self, retry_store, clock):
        retry_store.update("missing", 1, clock.now(), "boom")
        assert retry_store.get("missing") is None

    def test_delete(self, retry_store, retry_entry_factory):
        retry_store.save(retry_entry_factory(entry_id="entry-1"))
        assert retry_store.delete("entry-1") is True
        assert retry_store.delete("entry-1") is False

    def test_delete_stale(self, retry_store, retry_entry_factory, clock):
        now = clock.now()
        retry_store.save(
            retry_entry_factory(entry_id="old", created_at=now - timedelta(days=8))
        )
        retry_store.save(retry_entry_factory(entry_id="spent", attempt=5))
        retry_store.save(retry_entry_factory(entry_id="fresh"))

        assert retry_store.delete_stale(now - timedelta(days=7)) == 2
        assert retry_store.get("fresh") is not None

    def test_dead_letters(self, retry_store, retry_entry_factory):
        retry_store.record_dead_letter(retry_entry_factory(entry_id="a"), "max_attempts_exceeded")
        retry_store.record_dead_letter(retry_entry_factory(entry_id="b"), "max_attempts_exceeded")

        letters = retry_store.list_dead_letters(limit=1)

        assert [letter.entry.id for letter in letters] == ["b"]
        assert letters[0].to_dict()["reason"] == "max_attempts_exceeded"

    def test_get_stats(self, retry_store, retry_entry_factory):
        retry_store.save(retry_entry_factory(entry_id="a", topic="products/update"))
        retry_store.save(retry_entry_factory(entry_id="b", topic="products/update", attempt=2))
        retry_store.save(
            retry_entry_factory(entry_id="c", topic="shop/redact", shop="other.myshopify.com")
        )

        assert retry_store.get_stats() == {
            "total": 3,
            "by_topic": {"products/update": 2, "shop/redact": 1},
            "by_attempt": {"0": 2, "2": 1},
        }
        assert retry_store.get_stats("other.myshopify.com")["total"] == 1

    def test_concurrent_saves(self, retry_store, retry_entry_factory):
        def save(index):
            retry_store.save(retry_entry_factory(entry_id=f"entry-{index}"))

        threads = [threading.Thread(target=save, args=(index,)) for index in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert retry_store.get_stats()["total"] == 20
