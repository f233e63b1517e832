"""
Block operations module.

Provides utilities for working with blockchain blocks.
"""

from typing import Any

from web3 import Web3
from web3.exceptions import BlockNotFound


class BlockOperations:
    """Block-related operations. SYNC methods - run in executor."""

    def get_block_number(self, w3: Web3) -> int:
        """
        Get current block number.

        Returns:
            Current block number
        """
        return int(w3.eth.block_number)

    def get_block(self, w3: Web3, height: int) -> Any | None:
        """
        Get block with full transaction objects.

        Args:
            w3: Web3 instance
            height: Block number

        Returns:
            Block data or None if the node does not know the block
        """
        try:
            return w3.eth.get_block(height, full_transactions=True)
        except BlockNotFound:
            return None
