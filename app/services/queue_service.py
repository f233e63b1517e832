"""
Queue service.

Dispatches confirmation jobs to the Dramatiq broker and exposes the job
history recorded by ``jobs.middleware.JobHistory``.
"""

import asyncio
import json
from functools import partial
from typing import Any

from loguru import logger

from app.config.constants import JOB_STATE_NOT_FOUND, JOB_STATES, QUEUE_NAMESPACE
from app.config.settings import Settings
from app.models.transaction_job import TransactionJob
from app.repositories.record_store import RecordStore
from app.utils.security import mask_tx_hash


def job_history_key(queue_name: str, namespace: str = QUEUE_NAMESPACE) -> str:
    return f"{namespace}:history:{queue_name}"


class QueueService:
    """
    Job dispatch queue facade.

    The actor is injected so the service does not import the worker
    modules (and the broker they configure).
    """

    def __init__(self, actor: Any, store: RecordStore, settings: Settings) -> None:
        """
        Initialize queue service.

        Args:
            actor: Dramatiq actor that processes confirmation jobs
            store: Record store used to read job history
            settings: Application settings
        """
        self.actor = actor
        self.store = store
        self.queue_name = settings.queue_name
        self.history_key = job_history_key(self.queue_name)

    async def add_transaction_job(self, job: TransactionJob) -> str:
        """
        Enqueue a confirmation job.

        ``send`` talks to Redis synchronously, so it runs in the default
        executor to keep the event loop free.

        Returns:
            Message id of the enqueued job
        """
        loop = asyncio.get_running_loop()
        message = await loop.run_in_executor(
            None, partial(self.actor.send, job.to_message())
        )
        logger.info(
            f"Job {message.message_id} added to queue '{self.queue_name}' "
            f"for transaction {job.transaction_id} ({mask_tx_hash(job.transaction_hash)})"
        )
        return message.message_id

    async def get_job_status(self, job_id: str) -> dict[str, Any]:
        raw = await self.store.hash_get(self.history_key, job_id)
        if raw is None:
            return {"jobId": job_id, "state": JOB_STATE_NOT_FOUND}
        return json.loads(raw)

    async def get_queue_stats(self) -> dict[str, Any]:
        """Job counts per state, completed and failed jobs included."""
        counts = dict.fromkeys(JOB_STATES, 0)
        history = await self.store.hash_get_all(self.history_key)
        for raw in history.values():
            state = json.loads(raw).get("state")
            counts[state] = counts.get(state, 0) + 1

        return {
            "queue": self.queue_name,
            "total": len(history),
            "counts": counts,
        }
