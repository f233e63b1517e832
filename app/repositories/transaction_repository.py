"""
Transaction repository.

Persists transaction records, the transaction-hash index used for
deduplication, and guarded status transitions.
"""

from collections.abc import Callable

from loguru import logger

from app.config.constants import (
    TRANSACTION_HASH_KEY_PREFIX,
    TRANSACTION_KEY_PREFIX,
    TRANSITION_MAX_ATTEMPTS,
)
from app.models.transaction import Transaction
from app.repositories.record_store import RecordStore


class TransitionConflictError(Exception):
    """Raised when a transition keeps losing compare-and-set races."""


class TransactionRepository:
    """
    Transaction records keyed by id.

    Status changes go through :meth:`transition`, which never mutates a
    terminal record and only commits when the record is unchanged since it
    was read.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @staticmethod
    def transaction_key(transaction_id: str) -> str:
        return f"{TRANSACTION_KEY_PREFIX}{transaction_id}"

    @staticmethod
    def hash_key(transaction_hash: str) -> str:
        return f"{TRANSACTION_HASH_KEY_PREFIX}{transaction_hash.lower()}"

    async def get(self, transaction_id: str) -> Transaction | None:
        data = await self.store.get(self.transaction_key(transaction_id))
        if data is None:
            return None
        return Transaction.from_json(data)

    async def save(self, transaction: Transaction) -> None:
        """Unconditional overwrite by id (last writer wins)."""
        await self.store.set(self.transaction_key(transaction.id), transaction.to_json())

    async def index_hash(self, transaction_hash: str, transaction_id: str) -> None:
        await self.store.set(self.hash_key(transaction_hash), transaction_id)

    async def claim_hash(self, transaction_hash: str, transaction_id: str) -> bool:
        """
        Atomically reserve a hash for a new record.

        Returns:
            False if another record already owns the hash
        """
        return await self.store.set_if_absent(self.hash_key(transaction_hash), transaction_id)

    async def release_hash(self, transaction_hash: str) -> None:
        await self.store.delete(self.hash_key(transaction_hash))

    async def find_id_by_hash(self, transaction_hash: str) -> str | None:
        return await self.store.get(self.hash_key(transaction_hash))

    async def transition(
        self,
        transaction_id: str,
        mutate: Callable[[Transaction], None],
    ) -> Transaction | None:
        """
        Apply a status transition with compare-and-set.

        Args:
            transaction_id: Record id
            mutate: Callback editing the record in place

        Returns:
            The stored record after the transition, the unchanged record if
            it was already terminal, or None if it does not exist

        Raises:
            TransitionConflictError: If every attempt lost a race
        """
        key = self.transaction_key(transaction_id)

        for attempt in range(1, TRANSITION_MAX_ATTEMPTS + 1):
            raw = await self.store.get(key)
            if raw is None:
                return None

            transaction = Transaction.from_json(raw)
            if transaction.is_terminal:
                logger.debug(
                    f"Transaction {transaction_id} already {transaction.status}, "
                    f"transition skipped"
                )
                return transaction

            mutate(transaction)
            transaction.version += 1

            if await self.store.compare_and_set(key, raw, transaction.to_json()):
                return transaction

            logger.warning(
                f"Transaction {transaction_id} changed concurrently "
                f"(attempt {attempt}/{TRANSITION_MAX_ATTEMPTS}), retrying"
            )

        raise TransitionConflictError(
            f"Transaction {transaction_id} transition failed after "
            f"{TRANSITION_MAX_ATTEMPTS} attempts"
        )
