"""
Blockchain Monitor Cursor.

Last fully scanned block height, persisted under
``monitor:lastScannedBlock`` so restarts resume where the scan stopped.
"""

from loguru import logger

from app.config.constants import MONITOR_CURSOR_KEY, TRANSITION_MAX_ATTEMPTS
from app.repositories.record_store import RecordStore
from app.services.blockchain import BlockchainService


class ScanCursor:
    """Monotonic scan cursor."""

    def __init__(
        self,
        store: RecordStore,
        blockchain: BlockchainService,
        key: str = MONITOR_CURSOR_KEY,
    ) -> None:
        self.store = store
        self.blockchain = blockchain
        self.key = key

    async def get(self) -> int | None:
        raw = await self.store.get(self.key)
        return int(raw) if raw is not None else None

    async def load_or_initialize(self) -> int:
        """
        Read the persisted height, seeding it with the chain head if absent.

        Monitoring of a fresh store starts at the current block instead of
        genesis.
        """
        height = await self.get()
        if height is not None:
            return height

        height = await self.blockchain.get_block_number()
        if not await self.store.set_if_absent(self.key, str(height)):
            height = await self.get()
        logger.info(f"[Monitor] Starting blockchain monitoring from block {height}")
        return height

    async def advance(self, height: int) -> int:
        """
        Persist ``height`` unless the stored cursor is already at or past it.

        Returns:
            The persisted cursor after the call
        """
        for _ in range(TRANSITION_MAX_ATTEMPTS):
            raw = await self.store.get(self.key)
            if raw is not None and int(raw) >= height:
                return int(raw)
            if await self.store.compare_and_set(self.key, raw, str(height)):
                return height

        logger.warning(f"[Monitor] Cursor advance to {height} kept conflicting")
        current = await self.get()
        return current if current is not None else height
