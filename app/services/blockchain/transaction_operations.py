"""
Transaction operations for blockchain service.

This module handles:
- Native currency transfer signing and broadcasting
- Transaction receipt and details retrieval
"""

from typing import Any

from eth_utils import to_checksum_address
from loguru import logger
from web3 import Web3
from web3.exceptions import TransactionNotFound

from app.config.constants import MAX_PRIORITY_FEE_GWEI
from app.utils.security import mask_address, mask_tx_hash


class TransactionManager:
    """
    Manages native transfer submission and lookups.

    SYNC methods - run in executor.
    """

    def __init__(self, chain_id: int | None = None) -> None:
        """
        Initialize transaction manager.

        Args:
            chain_id: Chain id for signing (read from the node when None)
        """
        self.chain_id = chain_id

    def _apply_fees(self, w3: Web3, tx: dict[str, Any]) -> None:
        """Use EIP-1559 fee parameters with a legacy gas price fallback."""
        latest = w3.eth.get_block("latest")
        base_fee = latest.get("baseFeePerGas")
        if base_fee is not None:
            max_priority = Web3.to_wei(MAX_PRIORITY_FEE_GWEI, "gwei")
            tx["maxFeePerGas"] = base_fee * 2 + max_priority
            tx["maxPriorityFeePerGas"] = max_priority
        else:
            tx["gasPrice"] = w3.eth.gas_price

    def send_transfer(
        self,
        w3: Web3,
        private_key: str,
        to_address: str,
        amount_wei: int,
    ) -> str:
        """
        Build, sign, and send a native transfer.

        Args:
            w3: Web3 instance
            private_key: Sender signing key
            to_address: Recipient address
            amount_wei: Value in wei

        Returns:
            Transaction hash as 0x-prefixed hex string
        """
        account = w3.eth.account.from_key(private_key)
        tx: dict[str, Any] = {
            "from": account.address,
            "to": to_checksum_address(to_address),
            "value": amount_wei,
            "nonce": w3.eth.get_transaction_count(account.address, "pending"),
            "chainId": self.chain_id if self.chain_id is not None else w3.eth.chain_id,
        }
        self._apply_fees(w3, tx)
        tx["gas"] = w3.eth.estimate_gas(tx)

        signed = account.sign_transaction(tx)
        tx_hash = Web3.to_hex(w3.eth.send_raw_transaction(signed.raw_transaction))

        logger.info(
            f"Transaction sent: {mask_tx_hash(tx_hash)} "
            f"({mask_address(account.address)} -> {mask_address(to_address)})"
        )
        return tx_hash

    def get_receipt(self, w3: Web3, tx_hash: str) -> Any | None:
        """
        Get transaction receipt.

        Returns:
            Receipt or None if the transaction is not mined yet
        """
        try:
            return w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
