"""
Blockchain services module.

Provides unified access to chain operations through a modular architecture.
"""

from .service_facade import BlockchainService, to_hex_string
from .singleton import init_blockchain_service
from .units import from_wei, to_wei


__all__ = [
    "BlockchainService",
    "from_wei",
    "init_blockchain_service",
    "to_hex_string",
    "to_wei",
]
