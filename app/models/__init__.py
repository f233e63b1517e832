"""
Record models.

Exports the pydantic models persisted in the record store.
"""

from app.models.transaction import Transaction, TransactionSource, TransactionStatus
from app.models.transaction_job import TransactionJob
from app.models.wallet import Wallet, WalletKeys


__all__ = [
    "Transaction",
    "TransactionJob",
    "TransactionSource",
    "TransactionStatus",
    "Wallet",
    "WalletKeys",
]
