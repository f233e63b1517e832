"""Validation utilities for request payloads."""

import re

from eth_utils import is_address, to_checksum_address

from app.utils.exceptions import InvalidRequestError


ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
PRIVATE_KEY_PATTERN = r"^0x[a-fA-F0-9]{64}$"
AMOUNT_PATTERN = r"^\d+(\.\d+)?$"

_ADDRESS_RE = re.compile(ADDRESS_PATTERN)
_PRIVATE_KEY_RE = re.compile(PRIVATE_KEY_PATTERN)
_AMOUNT_RE = re.compile(AMOUNT_PATTERN)


def validate_eth_address(address: str) -> bool:
    """
    Validate Ethereum address format (0x followed by 40 hex digits).

    Mixed-case addresses are accepted without checksum verification.

    Args:
        address: Wallet address

    Returns:
        True if valid
    """
    if not address or not isinstance(address, str):
        return False
    return bool(_ADDRESS_RE.match(address))


def validate_private_key(key: str) -> bool:
    """Check 0x-prefixed 64 hex digit private key format."""
    if not key or not isinstance(key, str):
        return False
    return bool(_PRIVATE_KEY_RE.match(key))


def validate_amount(amount: str) -> bool:
    """Check non-negative decimal amount string (e.g. "0.01")."""
    if not amount or not isinstance(amount, str):
        return False
    return bool(_AMOUNT_RE.match(amount))


def normalize_address(address: str) -> str:
    """
    Convert address to EIP-55 checksum form.

    Raises:
        InvalidRequestError: If address is malformed
    """
    if not validate_eth_address(address) or not is_address(address.lower()):
        raise InvalidRequestError(f"Invalid Ethereum address format: {address}")
    return to_checksum_address(address)


def same_address(first: str, second: str) -> bool:
    """Case-insensitive address comparison."""
    return first.lower() == second.lower()
