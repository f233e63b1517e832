"""
Transaction confirmation task.

Consumes confirmation jobs from the transactions queue and resolves the
matching transaction record.
"""

import dramatiq
from dramatiq.middleware import CurrentMessage
from loguru import logger

from app.config.constants import TRANSACTION_JOB_ACTOR
from app.config.settings import settings
from app.models.transaction_job import TransactionJob
from app.utils.exceptions import ConfirmationFailedError
from jobs.async_runner import create_local_services, run_async
from jobs.broker import broker


@dramatiq.actor(
    actor_name=TRANSACTION_JOB_ACTOR,
    broker=broker,
    queue_name=settings.queue_name,
    max_retries=settings.queue_max_retries,
    min_backoff=settings.queue_min_backoff_ms,
    max_backoff=settings.queue_max_backoff_ms,
    time_limit=settings.confirmation_time_limit_ms,
    throws=(ConfirmationFailedError,),
)
def process_transaction(payload: dict) -> str:
    """
    Wait for a submitted transfer to be mined and record the outcome.

    Dropped or replaced transactions raise ConfirmationFailedError, which
    is not retried; any other error is retried with exponential backoff
    and the record is marked failed on the final attempt.
    """
    job = TransactionJob.model_validate(payload)
    message = CurrentMessage.get_current_message()
    retries = message.options.get("retries", 0) if message else 0
    is_final_attempt = retries >= settings.queue_max_retries

    logger.info(
        f"Processing job for transaction {job.transaction_id} "
        f"(attempt {retries + 1}/{settings.queue_max_attempts})"
    )
    state = run_async(_process_transaction_async(job, is_final_attempt))
    logger.info(f"Job for transaction {job.transaction_id} finished: {state}")
    return str(state)


async def _process_transaction_async(job: TransactionJob, is_final_attempt: bool):
    """Async implementation of confirmation processing."""
    async with create_local_services() as services:
        return await services.confirmation_service.process(job, is_final_attempt)
