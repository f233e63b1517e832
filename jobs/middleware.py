"""
Job history middleware.

Records the state of every message in a Redis hash so completed and
failed jobs stay inspectable after the broker has acknowledged them.
"""

import json

import dramatiq
from dramatiq.common import q_name
from dramatiq.middleware import Middleware
from loguru import logger

from app.services.queue_service import job_history_key
from app.utils.datetime_utils import utc_now_iso


class JobHistory(Middleware):
    """
    Track message states: enqueued, active, retrying, completed, failed
    and skipped.

    A failed message is the one the worker rejects after its last
    attempt, so the terminal ``failed`` state is written on nack and does
    not depend on the order of the after-process hooks.
    """

    def after_enqueue(self, broker: dramatiq.Broker, message: dramatiq.Message, delay: int) -> None:
        retries = message.options.get("retries", 0)
        state = "retrying" if retries else "enqueued"
        self._record(broker, message, state, payload=list(message.args))

    def before_process_message(self, broker: dramatiq.Broker, message: dramatiq.Message) -> None:
        self._record(broker, message, "active", attempts=message.options.get("retries", 0) + 1)

    def after_process_message(
        self,
        broker: dramatiq.Broker,
        message: dramatiq.Message,
        *,
        result=None,
        exception=None,
    ) -> None:
        if exception is None:
            self._record(broker, message, "completed")
        else:
            self._record(broker, message, "retrying", error=str(exception))

    def after_skip_message(self, broker: dramatiq.Broker, message: dramatiq.Message) -> None:
        self._record(broker, message, "skipped")

    def after_nack(self, broker: dramatiq.Broker, message: dramatiq.Message) -> None:
        self._record(broker, message, "failed", keep_state="skipped")

    def _read(self, broker: dramatiq.Broker, message: dramatiq.Message) -> dict | None:
        raw = broker.client.hget(self._key(broker, message), message.message_id)
        return json.loads(raw) if raw else None

    def _record(
        self,
        broker: dramatiq.Broker,
        message: dramatiq.Message,
        state: str,
        keep_state: str | None = None,
        **fields,
    ) -> None:
        try:
            current = self._read(broker, message)
            if current is not None and keep_state and current.get("state") == keep_state:
                return

            entry = current or {
                "jobId": message.message_id,
                "actor": message.actor_name,
                "queue": q_name(message.queue_name),
                "attempts": 0,
                "enqueuedAt": utc_now_iso(),
            }
            entry.update({k: v for k, v in fields.items() if v is not None})
            entry["state"] = state
            entry["updatedAt"] = utc_now_iso()

            broker.client.hset(
                self._key(broker, message),
                message.message_id,
                json.dumps(entry),
            )
        except Exception as e:
            logger.warning(f"Failed to record job {message.message_id} state '{state}': {e}")

    @staticmethod
    def _key(broker: dramatiq.Broker, message: dramatiq.Message) -> str:
        # Delayed retries travel through the ".DQ" queue; history is per base queue.
        return job_history_key(q_name(message.queue_name), broker.namespace)
