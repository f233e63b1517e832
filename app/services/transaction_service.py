"""
Transaction service.

Validates and submits transfers, persists transaction records and drives
their status transitions (pending -> confirmed | failed).
"""

from typing import Any

from loguru import logger

from app.models.transaction import Transaction, TransactionStatus
from app.models.transaction_job import TransactionJob
from app.repositories.transaction_repository import TransactionRepository
from app.services.blockchain import BlockchainService, from_wei, to_hex_string, to_wei
from app.services.queue_service import QueueService
from app.services.wallet_service import WalletService
from app.utils.exceptions import (
    BroadcastFailedError,
    ChainUnavailableError,
    InsufficientFundsError,
    InvalidRequestError,
    NotFoundError,
)
from app.utils.security import mask_tx_hash
from app.utils.validation import normalize_address, same_address


class TransactionService:
    """Transaction lifecycle manager."""

    def __init__(
        self,
        transactions: TransactionRepository,
        wallet_service: WalletService,
        blockchain: BlockchainService,
        queue_service: QueueService,
    ) -> None:
        """
        Initialize transaction service.

        Args:
            transactions: Transaction repository
            wallet_service: Wallet registry
            blockchain: Chain gateway
            queue_service: Confirmation job dispatch
        """
        self.transactions = transactions
        self.wallet_service = wallet_service
        self.blockchain = blockchain
        self.queue_service = queue_service

    async def create_transaction(
        self,
        from_address: str,
        to_address: str,
        amount_in_eth: str,
    ) -> Transaction:
        """
        Validate, persist and broadcast a transfer.

        The pending record and both index entries are written before the
        broadcast, so an attempt is never lost if the process dies after
        submitting.

        Args:
            from_address: Registered sender wallet
            to_address: Recipient address
            amount_in_eth: Decimal ETH amount

        Returns:
            The pending record carrying the transaction hash

        Raises:
            NotFoundError: If the sender wallet is unknown
            InvalidRequestError: For self-transfers or malformed input
            InsufficientFundsError: If the live balance is too low
            ChainUnavailableError: If the endpoint is unreachable (record marked failed)
            BroadcastFailedError: If submission failed (record marked failed)
        """
        sender = await self.wallet_service.get_wallet(from_address)
        recipient = normalize_address(to_address)

        if same_address(sender.address, recipient):
            raise InvalidRequestError("Cannot send transaction to the same address")

        amount_wei = to_wei(amount_in_eth)
        balance = await self.wallet_service.get_balance(sender.address)
        if amount_wei > int(balance["balance"]):
            raise InsufficientFundsError(
                f"Insufficient balance. Required: {amount_in_eth} ETH, "
                f"Available: {balance['balanceInEth']} ETH"
            )

        transaction = Transaction(
            from_address=sender.address,
            to_address=recipient,
            amount=str(amount_wei),
        )
        await self.transactions.save(transaction)
        logger.info(f"Transaction {transaction.id} created with status: pending")

        await self.wallet_service.add_transaction(sender.address, transaction.id)
        await self.wallet_service.add_transaction(recipient, transaction.id)

        try:
            tx_hash = await self.blockchain.submit_transfer(
                sender.private_key, recipient, amount_in_eth
            )
        except ChainUnavailableError as e:
            logger.error(f"Transaction {transaction.id} broadcast failed, chain unavailable: {e}")
            await self.mark_failed(transaction.id, str(e))
            raise
        except Exception as e:
            logger.error(f"Transaction {transaction.id} broadcast failed: {e}")
            await self.mark_failed(transaction.id, str(e))
            raise BroadcastFailedError(f"Transaction failed: {e}") from e

        transaction = await self.mark_submitted(transaction.id, tx_hash)
        logger.info(f"Transaction {transaction.id} sent with hash: {mask_tx_hash(tx_hash)}")

        job = TransactionJob(
            transaction_id=transaction.id,
            transaction_hash=tx_hash,
            from_address=sender.address,
            to_address=recipient,
            amount=str(amount_wei),
        )
        try:
            await self.queue_service.add_transaction_job(job)
        except Exception as e:
            # Record stays pending; the blockchain monitor resolves it from
            # the receipt once the block is scanned.
            logger.error(f"Transaction {transaction.id} confirmation job not enqueued: {e}")
            transaction = await self._store_enqueue_error(transaction, str(e))
        return transaction

    async def get_transaction(self, transaction_id: str) -> Transaction:
        """
        Raises:
            NotFoundError: If the record is absent
        """
        transaction = await self.transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction

    async def update_transaction(self, transaction: Transaction) -> Transaction:
        """
        Write the caller's copy of a record through the guarded transition.

        ``id`` and ``version`` belong to the store. A record that is
        already confirmed or failed is returned unchanged.

        Raises:
            NotFoundError: If the record is absent
        """

        def _apply(current: Transaction) -> None:
            for name in Transaction.model_fields:
                if name not in ("id", "version"):
                    setattr(current, name, getattr(transaction, name))

        updated = await self._transition(transaction.id, _apply)
        logger.info(f"Transaction {updated.id} updated with status: {updated.status}")
        return updated

    async def mark_submitted(self, transaction_id: str, tx_hash: str) -> Transaction:
        """Attach the broadcast hash and index it for deduplication."""

        def _apply(transaction: Transaction) -> None:
            transaction.transaction_hash = tx_hash

        transaction = await self._transition(transaction_id, _apply)
        await self.transactions.index_hash(tx_hash, transaction_id)
        return transaction

    async def mark_failed(self, transaction_id: str, error: str) -> Transaction:
        """Move a pending record to failed; terminal records are left untouched."""

        def _apply(transaction: Transaction) -> None:
            transaction.status = TransactionStatus.FAILED
            transaction.error = error

        transaction = await self._transition(transaction_id, _apply)
        logger.info(f"Transaction {transaction_id} status: {transaction.status}")
        return transaction

    async def record_error(self, transaction_id: str, error: str) -> Transaction:
        """Store the last error on a record that stays pending."""

        def _apply(transaction: Transaction) -> None:
            transaction.error = error

        return await self._transition(transaction_id, _apply)

    async def _store_enqueue_error(self, transaction: Transaction, error: str) -> Transaction:
        try:
            return await self.record_error(
                transaction.id, f"Confirmation job not enqueued: {error}"
            )
        except Exception as e:
            logger.warning(f"Failed to store enqueue error on {transaction.id}: {e}")
            return transaction

    async def confirm_transaction(self, transaction_id: str, tx_hash: str) -> Transaction:
        """
        Resolve a transaction from its on-chain receipt.

        Idempotent: a record that is already confirmed or failed is
        returned unchanged.

        Raises:
            NotFoundError: If the record is absent or the chain has no
                receipt for the hash yet
        """
        logger.info(f"Confirming transaction {transaction_id}")

        current = await self.get_transaction(transaction_id)
        if current.is_terminal:
            logger.info(
                f"Transaction {transaction_id} already {current.status}, nothing to confirm"
            )
            return current

        receipt = await self.blockchain.get_receipt(tx_hash)
        if receipt is None:
            logger.error(f"Transaction receipt not found for {mask_tx_hash(tx_hash)}")
            raise NotFoundError("Transaction receipt not found on blockchain")

        def _apply(transaction: Transaction) -> None:
            apply_receipt(transaction, receipt)

        transaction = await self._transition(transaction_id, _apply)
        logger.info(f"Transaction {transaction_id} status set to: {transaction.status}")
        return transaction

    def to_response(self, transaction: Transaction) -> dict[str, Any]:
        """Record as API payload augmented with ``amountInEth``."""
        payload = transaction.to_dict()
        payload["amountInEth"] = from_wei(transaction.amount)
        return payload

    async def _transition(self, transaction_id: str, mutate) -> Transaction:
        transaction = await self.transactions.transition(transaction_id, mutate)
        if transaction is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return transaction


def apply_receipt(transaction: Transaction, receipt: Any) -> None:
    """Copy status, block and gas details of a receipt onto a record."""
    transaction.status = (
        TransactionStatus.CONFIRMED if receipt.get("status") == 1 else TransactionStatus.FAILED
    )
    transaction.block_number = int(receipt["blockNumber"])
    transaction.transaction_hash = to_hex_string(receipt["transactionHash"])
    transaction.gas_used = str(receipt["gasUsed"])
    transaction.effective_gas_price = str(receipt.get("effectiveGasPrice") or 0)
    if transaction.status == TransactionStatus.CONFIRMED:
        transaction.error = None
