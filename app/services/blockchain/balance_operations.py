"""
Balance operations for the native currency.
"""

from eth_utils import to_checksum_address
from web3 import Web3


class BalanceManager:
    """Native balance lookups. SYNC methods - run in executor."""

    def get_balance(self, w3: Web3, address: str) -> int:
        """
        Get native balance for address.

        Args:
            w3: Web3 instance
            address: Wallet address to check

        Returns:
            Balance in wei
        """
        return int(w3.eth.get_balance(to_checksum_address(address)))
