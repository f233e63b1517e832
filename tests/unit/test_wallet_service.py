"""Unit tests for WalletService."""

import pytest

from app.utils.exceptions import InvalidRequestError, NotFoundError
from tests.fakes import ONE_ETH, WALLET_A_ADDRESS, WALLET_A_KEY, WALLET_B_ADDRESS


class TestWalletCreation:
    """Tests for creating and importing wallets."""

    @pytest.mark.asyncio
    async def test_create_wallet_persists_zero_balance(self, services, store):
        """New wallets are stored with a zero balance and returned with the key."""
        wallet = await services.wallet_service.create_wallet()

        assert wallet.balance == "0"
        assert wallet.private_key.startswith("0x")
        assert len(wallet.private_key) == 66
        assert f"wallet:{wallet.address}" in store.values

    @pytest.mark.asyncio
    async def test_import_wallet_snapshots_live_balance(self, services, blockchain):
        """Import derives the address and stores the live balance."""
        blockchain.balances[WALLET_A_ADDRESS.lower()] = ONE_ETH

        wallet = await services.wallet_service.import_wallet(WALLET_A_KEY)

        assert wallet.address == WALLET_A_ADDRESS
        assert wallet.balance == str(ONE_ETH)

    @pytest.mark.asyncio
    async def test_import_malformed_key_rejected(self, services):
        with pytest.raises(InvalidRequestError):
            await services.wallet_service.import_wallet("0x1234")


class TestWalletLookup:
    """Tests for wallet lookups and balances."""

    @pytest.mark.asyncio
    async def test_get_unknown_wallet_raises_not_found(self, services):
        with pytest.raises(NotFoundError):
            await services.wallet_service.get_wallet(WALLET_B_ADDRESS)

    @pytest.mark.asyncio
    async def test_get_wallet_is_case_insensitive(self, services):
        await services.wallet_service.import_wallet(WALLET_A_KEY)

        wallet = await services.wallet_service.get_wallet(WALLET_A_ADDRESS.lower())

        assert wallet.address == WALLET_A_ADDRESS

    @pytest.mark.asyncio
    async def test_balance_is_read_live_not_cached(self, services, blockchain):
        """Balance reflects the chain even after the stored snapshot is stale."""
        await services.wallet_service.import_wallet(WALLET_A_KEY)
        blockchain.balances[WALLET_A_ADDRESS.lower()] = 3 * ONE_ETH

        balance = await services.wallet_service.get_balance(WALLET_A_ADDRESS)

        assert balance == {
            "address": WALLET_A_ADDRESS,
            "balance": str(3 * ONE_ETH),
            "balanceInEth": "3.0",
        }


class TestTransactionIndex:
    """Tests for the per-wallet transaction index."""

    @pytest.mark.asyncio
    async def test_transactions_are_newest_first(self, services):
        await services.wallet_service.add_transaction(WALLET_A_ADDRESS, "tx-1")
        await services.wallet_service.add_transaction(WALLET_A_ADDRESS.lower(), "tx-2")

        assert await services.wallet_service.get_transactions(WALLET_A_ADDRESS) == [
            "tx-2",
            "tx-1",
        ]

    @pytest.mark.asyncio
    async def test_monitored_addresses_ignore_index_keys(self, services):
        """Only wallet records count, not ``:txs`` lists."""
        await services.wallet_service.import_wallet(WALLET_A_KEY)
        await services.wallet_service.add_transaction(WALLET_B_ADDRESS, "tx-1")

        assert await services.wallet_service.list_monitored_addresses() == {
            WALLET_A_ADDRESS.lower()
        }
        assert await services.wallet_service.count() == 1
