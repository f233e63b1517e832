"""
Exception handling utilities.

Defines the error taxonomy of the wallet service and categorized
exception types for proper error handling.
"""


class WalletServiceError(Exception):
    """Base class for errors reported to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(WalletServiceError):
    """Raised when a wallet or transaction is absent."""

    status_code = 404


class InvalidRequestError(WalletServiceError):
    """Raised for malformed addresses, amounts, keys and self-transfers."""

    status_code = 400


class InsufficientFundsError(WalletServiceError):
    """Raised when the live balance does not cover the transfer."""

    status_code = 400


class ChainUnavailableError(WalletServiceError):
    """Raised when the RPC endpoint is unreachable or times out."""

    status_code = 503


class BroadcastFailedError(WalletServiceError):
    """Raised when the node rejects a transaction submission."""

    status_code = 400


class ConfirmationFailedError(WalletServiceError):
    """Raised when a receipt indicates failure or cannot be obtained."""

    status_code = 422
