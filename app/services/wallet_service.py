"""
Wallet service.

Creates and imports custodial wallets, serves live balances and keeps
the per-wallet transaction index.
"""

from loguru import logger

from app.models.wallet import Wallet
from app.repositories.wallet_repository import WalletRepository
from app.services.blockchain import BlockchainService, from_wei
from app.utils.exceptions import NotFoundError
from app.utils.security import mask_address
from app.utils.validation import normalize_address


class WalletService:
    """Wallet registry backed by the record store."""

    def __init__(
        self,
        wallets: WalletRepository,
        blockchain: BlockchainService,
    ) -> None:
        """
        Initialize wallet service.

        Args:
            wallets: Wallet repository
            blockchain: Chain gateway
        """
        self.wallets = wallets
        self.blockchain = blockchain

    async def create_wallet(self) -> Wallet:
        """
        Generate and persist a new wallet with zero balance.

        The returned record carries the private key; this is the only
        response that exposes it.
        """
        keys = self.blockchain.create_wallet()
        wallet = Wallet(address=keys.address, private_key=keys.private_key, balance="0")
        await self.wallets.save(wallet)

        logger.info(f"Wallet created: {mask_address(wallet.address)}")
        return wallet

    async def import_wallet(self, private_key: str) -> Wallet:
        """
        Import an existing wallet and snapshot its live balance.

        Raises:
            InvalidRequestError: If the key is malformed
            ChainUnavailableError: If the balance cannot be read
        """
        keys = self.blockchain.wallet_from_private_key(private_key)
        balance = await self.blockchain.get_balance(keys.address)

        wallet = Wallet(
            address=keys.address,
            private_key=keys.private_key,
            balance=str(balance),
        )
        await self.wallets.save(wallet)

        logger.info(f"Wallet imported: {mask_address(wallet.address)}")
        return wallet

    async def get_wallet(self, address: str) -> Wallet:
        """
        Raises:
            NotFoundError: If the wallet is unknown
        """
        wallet = await self.wallets.get(normalize_address(address))
        if wallet is None:
            raise NotFoundError(f"Wallet {address} not found")
        return wallet

    async def get_balance(self, address: str) -> dict[str, str]:
        """Live balance read from the chain, never the cached snapshot."""
        checksum = normalize_address(address)
        balance = await self.blockchain.get_balance(checksum)
        return {
            "address": checksum,
            "balance": str(balance),
            "balanceInEth": from_wei(balance),
        }

    async def add_transaction(self, address: str, transaction_id: str) -> None:
        """Append transaction id to one wallet's index."""
        await self.wallets.add_transaction(normalize_address(address), transaction_id)

    async def get_transactions(self, address: str) -> list[str]:
        """Transaction ids of a wallet, newest first."""
        return await self.wallets.list_transactions(normalize_address(address))

    async def list_monitored_addresses(self) -> set[str]:
        """Lower-cased addresses of every registered wallet."""
        return {address.lower() for address in await self.wallets.list_addresses()}

    async def count(self) -> int:
        return await self.wallets.count()
