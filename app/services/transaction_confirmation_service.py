"""
Transaction confirmation service.

Resolves one locally-originated transfer per job: waits for the receipt
and moves the record to its terminal status.

States: received -> awaiting_confirmation -> confirmed | failed.
A job delivered for a record that is already terminal ends as skipped.
"""

from enum import StrEnum

from loguru import logger

from app.config.constants import DROPPED_TRANSACTION_ERROR
from app.models.transaction import TransactionStatus
from app.models.transaction_job import TransactionJob
from app.services.blockchain import BlockchainService
from app.services.transaction_service import TransactionService
from app.utils.exceptions import ConfirmationFailedError
from app.utils.security import mask_tx_hash


class ConfirmationState(StrEnum):
    RECEIVED = "received"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    CONFIRMED = "confirmed"
    FAILED = "failed"
    SKIPPED = "skipped"


class TransactionConfirmationService:
    """Confirmation worker logic, independent of the queue runtime."""

    def __init__(
        self,
        transaction_service: TransactionService,
        blockchain: BlockchainService,
    ) -> None:
        self.transaction_service = transaction_service
        self.blockchain = blockchain

    async def process(
        self,
        job: TransactionJob,
        is_final_attempt: bool = True,
    ) -> ConfirmationState:
        """
        Process one confirmation job.

        Redelivery against a confirmed or failed record is a no-op.

        Args:
            job: Job payload
            is_final_attempt: Whether the queue will redeliver on error

        Returns:
            Final state of this run

        Raises:
            ConfirmationFailedError: If the transaction was dropped or
                replaced (record marked failed, not worth retrying)
            Exception: Any other error, after it has been stored on the
                record, so the queue retry policy can redeliver
        """
        transaction_id = job.transaction_id
        state = ConfirmationState.RECEIVED
        logger.info(
            f"Processing transaction job for {transaction_id} "
            f"({mask_tx_hash(job.transaction_hash)})"
        )

        try:
            current = await self.transaction_service.get_transaction(transaction_id)
            if current.is_terminal:
                logger.info(
                    f"Transaction {transaction_id} already {current.status}, job skipped"
                )
                return ConfirmationState.SKIPPED

            state = ConfirmationState.AWAITING_CONFIRMATION
            receipt = await self.blockchain.await_confirmation(job.transaction_hash)

            if receipt is None:
                await self.transaction_service.mark_failed(
                    transaction_id, DROPPED_TRANSACTION_ERROR
                )
                logger.warning(f"Transaction {transaction_id}: {DROPPED_TRANSACTION_ERROR}")
                raise ConfirmationFailedError(DROPPED_TRANSACTION_ERROR)

            transaction = await self.transaction_service.confirm_transaction(
                transaction_id, job.transaction_hash
            )

            stored = await self.transaction_service.get_transaction(transaction_id)
            logger.info(
                f"Transaction {transaction_id} stored with status {stored.status} "
                f"at block {stored.block_number}"
            )

            if transaction.status == TransactionStatus.CONFIRMED:
                return ConfirmationState.CONFIRMED
            return ConfirmationState.FAILED

        except ConfirmationFailedError:
            raise
        except Exception as e:
            logger.error(
                f"Error processing transaction {transaction_id} in state {state}: {e}"
            )
            await self._store_error(transaction_id, str(e), is_final_attempt)
            raise

    async def _store_error(
        self,
        transaction_id: str,
        error: str,
        is_final_attempt: bool,
    ) -> None:
        try:
            if is_final_attempt:
                await self.transaction_service.mark_failed(transaction_id, error)
            else:
                await self.transaction_service.record_error(transaction_id, error)
        except Exception as e:
            logger.error(f"Failed to persist error for transaction {transaction_id}: {e}")
