"""Unit tests for the JobHistory dramatiq middleware."""

import json
from unittest.mock import MagicMock

import dramatiq
import pytest

from jobs.middleware import JobHistory

HISTORY_KEY = "dramatiq:history:transactions"


class FakeSyncRedis:
    """Minimal sync Redis hash API, as used through ``broker.client``."""

    def __init__(self):
        self.hashes = {}

    def hget(self, key, field):
        value = self.hashes.get(key, {}).get(field)
        return value.encode() if value is not None else None

    def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value


@pytest.fixture
def broker():
    broker = MagicMock()
    broker.namespace = "dramatiq"
    broker.client = FakeSyncRedis()
    return broker


@pytest.fixture
def message():
    return dramatiq.Message(
        queue_name="transactions",
        actor_name="process_transaction",
        args=({"transactionId": "tx-1"},),
        kwargs={},
        options={},
    )


def _entry(broker, message):
    return json.loads(broker.client.hashes[HISTORY_KEY][message.message_id])


class TestJobHistory:
    """Tests for job state tracking."""

    def test_enqueue_records_payload(self, broker, message):
        JobHistory().after_enqueue(broker, message, None)

        entry = _entry(broker, message)
        assert entry["state"] == "enqueued"
        assert entry["attempts"] == 0
        assert entry["payload"] == [{"transactionId": "tx-1"}]
        assert entry["actor"] == "process_transaction"

    def test_successful_processing_is_completed(self, broker, message):
        history = JobHistory()
        history.after_enqueue(broker, message, None)
        history.before_process_message(broker, message)
        assert _entry(broker, message)["state"] == "active"
        assert _entry(broker, message)["attempts"] == 1

        history.after_process_message(broker, message, result="confirmed")

        assert _entry(broker, message)["state"] == "completed"

    def test_exhausted_message_is_failed_with_error(self, broker, message):
        history = JobHistory()
        history.after_enqueue(broker, message, None)
        history.before_process_message(broker, message)
        history.after_process_message(broker, message, exception=RuntimeError("rpc down"))
        history.after_nack(broker, message)

        entry = _entry(broker, message)
        assert entry["state"] == "failed"
        assert entry["error"] == "rpc down"

    def test_delayed_retry_is_tracked_under_base_queue(self, broker, message):
        history = JobHistory()
        history.after_enqueue(broker, message, None)
        retry = message.copy(queue_name="transactions.DQ", options={"retries": 1})

        history.after_enqueue(broker, retry, 2000)
        history.before_process_message(broker, retry.copy(queue_name="transactions"))

        entry = _entry(broker, message)
        assert entry["state"] == "active"
        assert entry["attempts"] == 2
        assert entry["queue"] == "transactions"

    def test_skipped_message_is_not_reported_as_failed(self, broker, message):
        history = JobHistory()
        history.after_enqueue(broker, message, None)
        history.after_skip_message(broker, message)
        history.after_nack(broker, message)

        assert _entry(broker, message)["state"] == "skipped"

    def test_store_errors_do_not_break_processing(self, broker, message):
        broker.client = MagicMock()
        broker.client.hget.side_effect = ConnectionError("redis down")

        JobHistory().before_process_message(broker, message)
