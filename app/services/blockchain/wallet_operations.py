"""
Wallet operations for blockchain service.

This module handles:
- Keypair generation
- Address derivation from private keys
"""

from eth_account import Account
from web3 import Web3

from app.models.wallet import WalletKeys
from app.utils.exceptions import InvalidRequestError


class WalletManager:
    """
    Generates and imports externally owned accounts with eth-account.

    Signing keys never leave this process except through the wallet
    record itself.
    """

    def create_wallet(self) -> WalletKeys:
        """
        Generate a fresh keypair.

        Returns:
            Checksum address and 0x-prefixed private key
        """
        account = Account.create()
        return WalletKeys(address=account.address, private_key=Web3.to_hex(account.key))

    def wallet_from_private_key(self, private_key: str) -> WalletKeys:
        """
        Derive the account of an existing private key.

        Raises:
            InvalidRequestError: If the key is malformed
        """
        try:
            account = Account.from_key(private_key)
        except (ValueError, TypeError) as e:
            raise InvalidRequestError("Invalid private key format") from e
        return WalletKeys(address=account.address, private_key=Web3.to_hex(account.key))
