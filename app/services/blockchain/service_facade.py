"""
Blockchain service - Main coordinator.

This module provides the main BlockchainService class that coordinates
all blockchain operations by delegating to specialized managers:
- WalletManager: Keypair generation and import
- BalanceManager: Native balance checking
- BlockOperations: Block height and block contents
- TransactionManager: Transfer submission and receipt lookups

Every RPC round trip runs in a thread pool under a timeout; transport
failures surface as ChainUnavailableError.
"""

import asyncio
from typing import Any

from loguru import logger
from web3 import Web3
from web3.exceptions import Web3Exception

from app.config.constants import BLOCKCHAIN_EXECUTOR_WORKERS
from app.config.settings import Settings
from app.models.wallet import WalletKeys
from app.services.blockchain.async_executor import AsyncBlockchainExecutor
from app.services.blockchain.balance_operations import BalanceManager
from app.services.blockchain.block_operations import BlockOperations
from app.services.blockchain.transaction_operations import TransactionManager
from app.services.blockchain.units import from_wei, to_wei
from app.services.blockchain.wallet_operations import WalletManager
from app.utils.exceptions import BroadcastFailedError
from app.utils.security import mask_tx_hash


def to_hex_string(value: Any) -> str:
    """Normalize HexBytes/bytes/str hashes to a 0x-prefixed hex string."""
    if isinstance(value, str):
        return value if value.startswith("0x") else f"0x{value}"
    return Web3.to_hex(value)


class BlockchainService:
    """
    Chain gateway for the Sepolia testnet.

    This class acts as a coordinator, delegating operations to
    specialized managers.
    """

    def __init__(self, settings: Settings, w3: Web3 | None = None) -> None:
        """
        Initialize blockchain service.

        Args:
            settings: Application settings
            w3: Preconfigured Web3 instance (built from settings when None)
        """
        self.settings = settings
        self.w3 = w3 or Web3(
            Web3.HTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.blockchain_rpc_timeout},
            )
        )

        self.async_executor = AsyncBlockchainExecutor(
            self.w3,
            timeout=settings.blockchain_rpc_timeout,
            max_workers=BLOCKCHAIN_EXECUTOR_WORKERS,
        )
        self.wallet_manager = WalletManager()
        self.balance_manager = BalanceManager()
        self.block_operations = BlockOperations()
        self.transaction_manager = TransactionManager(settings.chain_id)

        logger.info(f"Blockchain service connected to {settings.rpc_url}")

    # ------------------------------------------------------------------
    # Wallets and balances
    # ------------------------------------------------------------------

    def create_wallet(self) -> WalletKeys:
        return self.wallet_manager.create_wallet()

    def wallet_from_private_key(self, private_key: str) -> WalletKeys:
        return self.wallet_manager.wallet_from_private_key(private_key)

    async def get_balance(self, address: str) -> int:
        """Live balance in wei."""
        return await self.async_executor.run(
            lambda w3: self.balance_manager.get_balance(w3, address),
            operation="get_balance",
        )

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    async def get_block_number(self) -> int:
        return await self.async_executor.run(
            self.block_operations.get_block_number,
            operation="get_block_number",
        )

    async def get_block(self, height: int) -> Any | None:
        """Block with full transaction objects, or None if unknown."""
        return await self.async_executor.run(
            lambda w3: self.block_operations.get_block(w3, height),
            operation="get_block",
        )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def submit_transfer(self, private_key: str, to_address: str, amount_in_eth: str) -> str:
        """
        Sign and broadcast a native transfer.

        Args:
            private_key: Sender signing key
            to_address: Recipient address
            amount_in_eth: Decimal ETH amount

        Returns:
            Transaction hash

        Raises:
            ChainUnavailableError: If the endpoint is unreachable
            BroadcastFailedError: If the node rejects the transaction
        """
        amount_wei = to_wei(amount_in_eth)
        try:
            return await self.async_executor.run(
                lambda w3: self.transaction_manager.send_transfer(
                    w3, private_key, to_address, amount_wei
                ),
                operation="submit_transfer",
            )
        except (Web3Exception, ValueError) as e:
            logger.error(f"Transaction submission rejected: {e}")
            raise BroadcastFailedError(str(e)) from e

    async def get_receipt(self, tx_hash: str) -> Any | None:
        return await self.async_executor.run(
            lambda w3: self.transaction_manager.get_receipt(w3, tx_hash),
            operation="get_receipt",
        )

    async def await_confirmation(
        self,
        tx_hash: str,
        timeout: float | None = None,
        poll_interval: float | None = None,
    ) -> Any | None:
        """
        Wait until the transaction is mined.

        Cancellable polling loop bounded by the confirmation timeout.

        Args:
            tx_hash: Transaction hash
            timeout: Upper bound in seconds (settings default when None)
            poll_interval: Seconds between receipt lookups

        Returns:
            Receipt, or None if no receipt appeared before the deadline
            (the transaction was dropped or replaced)
        """
        timeout = timeout if timeout is not None else self.settings.confirmation_timeout
        poll_interval = poll_interval or self.settings.confirmation_poll_interval

        logger.info(f"Waiting for transaction confirmation: {mask_tx_hash(tx_hash)}")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            receipt = await self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt

            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning(
                    f"No receipt for {mask_tx_hash(tx_hash)} after {timeout}s"
                )
                return None
            await asyncio.sleep(min(poll_interval, remaining))

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    @staticmethod
    def format_ether(wei: int | str) -> str:
        return from_wei(wei)

    @staticmethod
    def parse_ether(amount_in_eth: str) -> int:
        return to_wei(amount_in_eth)

    def close(self) -> None:
        self.async_executor.shutdown()
