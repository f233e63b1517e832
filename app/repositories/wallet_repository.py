"""
Wallet repository.

Persists wallet records and the per-wallet transaction index.
"""

from app.config.constants import WALLET_KEY_PATTERN, WALLET_KEY_PREFIX, WALLET_TXS_SUFFIX
from app.models.wallet import Wallet
from app.repositories.record_store import RecordStore


class WalletRepository:
    """Wallet records keyed by checksum address."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    @staticmethod
    def wallet_key(address: str) -> str:
        return f"{WALLET_KEY_PREFIX}{address}"

    @staticmethod
    def transactions_key(address: str) -> str:
        return f"{WALLET_KEY_PREFIX}{address}{WALLET_TXS_SUFFIX}"

    async def get(self, address: str) -> Wallet | None:
        data = await self.store.get(self.wallet_key(address))
        if data is None:
            return None
        return Wallet.from_json(data)

    async def save(self, wallet: Wallet) -> None:
        await self.store.set(self.wallet_key(wallet.address), wallet.to_json())

    async def add_transaction(self, address: str, transaction_id: str) -> None:
        """Prepend transaction id to the wallet's index (newest first)."""
        await self.store.lpush(self.transactions_key(address), transaction_id)

    async def list_transactions(self, address: str) -> list[str]:
        return await self.store.lrange(self.transactions_key(address), 0, -1)

    async def list_wallet_keys(self) -> list[str]:
        keys = await self.store.keys(WALLET_KEY_PATTERN)
        return [key for key in keys if not key.endswith(WALLET_TXS_SUFFIX)]

    async def list_addresses(self) -> list[str]:
        """
        Addresses of every stored wallet.

        Read from the records rather than the key names so the stored
        address is authoritative.
        """
        addresses = []
        for key in await self.list_wallet_keys():
            data = await self.store.get(key)
            if data:
                addresses.append(Wallet.from_json(data).address)
        return addresses

    async def count(self) -> int:
        return len(await self.list_wallet_keys())
