"""Unit tests for the confirmation worker state machine."""

from unittest.mock import AsyncMock

import pytest

from app.config.constants import DROPPED_TRANSACTION_ERROR
from app.models.transaction import TransactionStatus
from app.models.transaction_job import TransactionJob
from app.services.transaction_confirmation_service import ConfirmationState
from app.utils.exceptions import ChainUnavailableError, ConfirmationFailedError
from tests.fakes import ONE_ETH, WALLET_A_ADDRESS, WALLET_A_KEY, WALLET_B_ADDRESS


async def _submit(services, blockchain, amount="0.5"):
    blockchain.balances[WALLET_A_ADDRESS.lower()] = ONE_ETH
    await services.wallet_service.import_wallet(WALLET_A_KEY)
    transaction = await services.transaction_service.create_transaction(
        WALLET_A_ADDRESS, WALLET_B_ADDRESS, amount
    )
    job = TransactionJob(
        transaction_id=transaction.id,
        transaction_hash=transaction.transaction_hash,
        from_address=WALLET_A_ADDRESS,
        to_address=WALLET_B_ADDRESS,
        amount=transaction.amount,
    )
    return transaction, job


class TestConfirmationWorker:
    """Tests for TransactionConfirmationService.process."""

    @pytest.mark.asyncio
    async def test_mined_transaction_is_confirmed(self, services, blockchain):
        """After the worker runs, the record is confirmed with a block number."""
        transaction, job = await _submit(services, blockchain)
        blockchain.mine(transaction.transaction_hash, block_number=7)

        state = await services.confirmation_service.process(job)

        stored = await services.transaction_service.get_transaction(transaction.id)
        assert state == ConfirmationState.CONFIRMED
        assert stored.status == TransactionStatus.CONFIRMED
        assert stored.block_number == 7

    @pytest.mark.asyncio
    async def test_reverted_transaction_ends_failed(self, services, blockchain):
        transaction, job = await _submit(services, blockchain)
        blockchain.mine(transaction.transaction_hash, block_number=7, status=0)

        state = await services.confirmation_service.process(job)

        assert state == ConfirmationState.FAILED
        stored = await services.transaction_service.get_transaction(transaction.id)
        assert stored.status == TransactionStatus.FAILED

    @pytest.mark.asyncio
    async def test_dropped_transaction_marked_failed_and_raises(self, services, blockchain):
        """No receipt before the deadline is a terminal, non-retryable failure."""
        transaction, job = await _submit(services, blockchain)

        with pytest.raises(ConfirmationFailedError):
            await services.confirmation_service.process(job)

        stored = await services.transaction_service.get_transaction(transaction.id)
        assert stored.status == TransactionStatus.FAILED
        assert stored.error == DROPPED_TRANSACTION_ERROR

    @pytest.mark.asyncio
    async def test_redelivery_after_terminal_state_is_noop(self, services, blockchain):
        transaction, job = await _submit(services, blockchain)
        blockchain.mine(transaction.transaction_hash, block_number=7)
        await services.confirmation_service.process(job)
        before = await services.transaction_service.get_transaction(transaction.id)
        blockchain.await_confirmation = AsyncMock()

        state = await services.confirmation_service.process(job)

        assert state == ConfirmationState.SKIPPED
        blockchain.await_confirmation.assert_not_called()
        after = await services.transaction_service.get_transaction(transaction.id)
        assert after.model_dump() == before.model_dump()

    @pytest.mark.asyncio
    async def test_error_before_final_attempt_keeps_pending(self, services, blockchain):
        """The error is stored but the record stays resolvable by a retry."""
        transaction, job = await _submit(services, blockchain)
        blockchain.await_confirmation = AsyncMock(side_effect=ChainUnavailableError("rpc down"))

        with pytest.raises(ChainUnavailableError):
            await services.confirmation_service.process(job, is_final_attempt=False)

        stored = await services.transaction_service.get_transaction(transaction.id)
        assert stored.status == TransactionStatus.PENDING
        assert stored.error == "rpc down"

    @pytest.mark.asyncio
    async def test_error_on_final_attempt_marks_failed(self, services, blockchain):
        transaction, job = await _submit(services, blockchain)
        blockchain.await_confirmation = AsyncMock(side_effect=ChainUnavailableError("rpc down"))

        with pytest.raises(ChainUnavailableError):
            await services.confirmation_service.process(job, is_final_attempt=True)

        stored = await services.transaction_service.get_transaction(transaction.id)
        assert stored.status == TransactionStatus.FAILED
        assert stored.error == "rpc down"

    @pytest.mark.asyncio
    async def test_retry_after_error_still_confirms(self, services, blockchain):
        transaction, job = await _submit(services, blockchain)
        original = blockchain.await_confirmation
        blockchain.await_confirmation = AsyncMock(side_effect=ChainUnavailableError("rpc down"))
        with pytest.raises(ChainUnavailableError):
            await services.confirmation_service.process(job, is_final_attempt=False)

        blockchain.await_confirmation = original
        blockchain.mine(transaction.transaction_hash, block_number=8)
        state = await services.confirmation_service.process(job, is_final_attempt=True)

        assert state == ConfirmationState.CONFIRMED
