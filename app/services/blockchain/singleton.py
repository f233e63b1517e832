"""
Singleton pattern for BlockchainService.

Provides global access to a single BlockchainService instance.
"""

from typing import TYPE_CHECKING

from app.config.settings import Settings


if TYPE_CHECKING:
    from app.services.blockchain.service_facade import BlockchainService


_blockchain_service: "BlockchainService | None" = None


def init_blockchain_service(settings: Settings) -> "BlockchainService":
    """
    Initialize the singleton blockchain service instance.

    Repeated calls return the existing instance.

    Args:
        settings: Application settings
    """
    global _blockchain_service
    if _blockchain_service is None:
        # Import here to avoid circular dependency
        from app.services.blockchain.service_facade import BlockchainService
        _blockchain_service = BlockchainService(settings)
    return _blockchain_service
