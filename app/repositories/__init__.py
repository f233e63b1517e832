"""Record store repositories."""

from app.repositories.record_store import RecordStore
from app.repositories.transaction_repository import (
    TransactionRepository,
    TransitionConflictError,
)
from app.repositories.wallet_repository import WalletRepository


__all__ = [
    "RecordStore",
    "TransactionRepository",
    "TransitionConflictError",
    "WalletRepository",
]
