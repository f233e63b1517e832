"""
Service container.

Wires repositories and services over one Redis client and one chain
gateway. The API process and each worker event loop build their own.
"""

from dataclasses import dataclass
from typing import Any

from app.config.settings import Settings
from app.repositories.record_store import RecordStore
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.wallet_repository import WalletRepository
from app.services.blockchain import BlockchainService
from app.services.blockchain_monitor import BlockchainMonitorService, ScanCursor
from app.services.queue_service import QueueService
from app.services.transaction_confirmation_service import TransactionConfirmationService
from app.services.transaction_service import TransactionService
from app.services.wallet_service import WalletService


@dataclass
class ServiceContainer:
    settings: Settings
    store: RecordStore
    blockchain: BlockchainService
    wallet_service: WalletService
    transaction_service: TransactionService
    queue_service: QueueService
    confirmation_service: TransactionConfirmationService
    monitor: BlockchainMonitorService

    async def close(self) -> None:
        await self.store.close()


def build_services(
    settings: Settings,
    store: RecordStore,
    blockchain: BlockchainService,
    actor: Any = None,
) -> ServiceContainer:
    """
    Build the service graph.

    Args:
        settings: Application settings
        store: Record store over the shared Redis instance
        blockchain: Chain gateway
        actor: Confirmation actor used for enqueueing (None in workers,
            which never enqueue)
    """
    wallets = WalletRepository(store)
    transactions = TransactionRepository(store)

    wallet_service = WalletService(wallets, blockchain)
    queue_service = QueueService(actor, store, settings)
    transaction_service = TransactionService(
        transactions, wallet_service, blockchain, queue_service
    )
    confirmation_service = TransactionConfirmationService(transaction_service, blockchain)
    monitor = BlockchainMonitorService(
        blockchain,
        wallet_service,
        transactions,
        ScanCursor(store, blockchain),
        settings,
    )

    return ServiceContainer(
        settings=settings,
        store=store,
        blockchain=blockchain,
        wallet_service=wallet_service,
        transaction_service=transaction_service,
        queue_service=queue_service,
        confirmation_service=confirmation_service,
        monitor=monitor,
    )
