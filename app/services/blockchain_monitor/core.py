"""
Blockchain Monitor Core Service.

Periodic scan of new blocks for transfers that touch registered wallets.
"""

import asyncio
from typing import Any

from loguru import logger

from app.config.settings import Settings
from app.models.transaction import Transaction, TransactionSource, TransactionStatus
from app.repositories.transaction_repository import TransactionRepository
from app.services.blockchain import BlockchainService, from_wei, to_hex_string
from app.services.transaction_service import apply_receipt
from app.services.wallet_service import WalletService
from app.utils.security import mask_address, mask_tx_hash

from .cursor import ScanCursor
from .scan_results import ScanItemResult, ScanOutcome, ScanReport


class BlockchainMonitorService:
    """
    External-activity monitor.

    Cycle: read the chain head, collect monitored addresses, scan the
    unscanned range in batches, then advance the cursor past the whole
    range. Per-item failures are recorded in the report and skipped.
    """

    def __init__(
        self,
        blockchain: BlockchainService,
        wallet_service: WalletService,
        transactions: TransactionRepository,
        cursor: ScanCursor,
        settings: Settings,
    ) -> None:
        """
        Initialize monitor.

        Args:
            blockchain: Chain gateway
            wallet_service: Wallet registry (monitored addresses, indexes)
            transactions: Transaction repository and hash index
            cursor: Persisted scan cursor
            settings: Application settings
        """
        self.blockchain = blockchain
        self.wallet_service = wallet_service
        self.transactions = transactions
        self.cursor = cursor

        self.batch_size = settings.monitor_batch_size
        self.rescan_window = settings.monitor_rescan_window
        self.interval_seconds = settings.monitor_interval_seconds

        self._scan_lock = asyncio.Lock()

    @property
    def is_scanning(self) -> bool:
        return self._scan_lock.locked()

    async def initialize(self) -> int:
        return await self.cursor.load_or_initialize()

    async def scan_new_blocks(self) -> ScanReport | None:
        """
        Run one scan cycle.

        Skipped entirely (not queued) while another cycle is running.

        Returns:
            Report of the cycle, or None if nothing was scanned
        """
        if self._scan_lock.locked():
            logger.debug("[Monitor] Previous scan still in progress, skipping this cycle")
            return None

        async with self._scan_lock:
            try:
                return await self._scan()
            except Exception as e:
                logger.error(f"[Monitor] Error during block scan: {e}")
                return None

    async def trigger_scan(self) -> ScanReport | None:
        logger.info("[Monitor] Manual scan triggered")
        return await self.scan_new_blocks()

    async def get_monitoring_status(self) -> dict[str, Any]:
        current_block = await self.blockchain.get_block_number()
        last_scanned = await self.cursor.get() or 0
        monitored_wallets = await self.wallet_service.count()

        return {
            "isActive": not self.is_scanning,
            "lastScannedBlock": last_scanned,
            "currentBlock": current_block,
            "blocksBehind": current_block - last_scanned,
            "monitoredWallets": monitored_wallets,
            "nextScanIn": f"{self.interval_seconds} seconds",
        }

    async def _scan(self) -> ScanReport | None:
        last_scanned = await self.cursor.load_or_initialize()
        current_block = await self.blockchain.get_block_number()
        if current_block <= last_scanned:
            return None

        monitored = await self.wallet_service.list_monitored_addresses()
        if not monitored:
            logger.info("[Monitor] No monitored wallets found, skipping block scan")
            report = ScanReport(from_block=last_scanned + 1, to_block=current_block)
            report.cursor = await self.cursor.advance(current_block)
            return report

        from_block = max(last_scanned + 1 - self.rescan_window, 0)
        report = ScanReport(
            from_block=from_block,
            to_block=current_block,
            monitored_wallets=len(monitored),
        )
        logger.info(
            f"[Monitor] Scanning blocks {from_block}-{current_block} "
            f"for {len(monitored)} wallet addresses"
        )

        for batch_start in range(from_block, current_block + 1, self.batch_size):
            batch_end = min(batch_start + self.batch_size - 1, current_block)
            await self._scan_block_range(batch_start, batch_end, monitored, report)

        report.cursor = await self.cursor.advance(current_block)

        summary = report.summary()
        logger.info(f"[Monitor] Scan complete up to block {current_block}: {summary}")
        for item in report.errors:
            logger.warning(
                f"[Monitor] Skipped block {item.block_number} "
                f"{mask_tx_hash(item.transaction_hash or '')}: {item.error}"
            )
        return report

    async def _scan_block_range(
        self,
        start_block: int,
        end_block: int,
        monitored: set[str],
        report: ScanReport,
    ) -> None:
        for block_number in range(start_block, end_block + 1):
            try:
                block = await self.blockchain.get_block(block_number)
            except Exception as e:
                logger.error(f"[Monitor] Error scanning block {block_number}: {e}")
                report.add(
                    ScanItemResult(block_number, ScanOutcome.ERROR, error=str(e))
                )
                continue

            if not block:
                continue

            for tx in block.get("transactions") or []:
                report.add(await self._scan_transaction(tx, block_number, monitored))

    async def _scan_transaction(
        self,
        tx: Any,
        block_number: int,
        monitored: set[str],
    ) -> ScanItemResult:
        tx_hash = None
        try:
            tx_hash = to_hex_string(tx["hash"])
            from_address = (tx.get("from") or "").lower()
            to_address = (tx.get("to") or "").lower()

            if from_address not in monitored and to_address not in monitored:
                return ScanItemResult(block_number, ScanOutcome.IRRELEVANT, tx_hash)

            return await self._process_external_transaction(tx, tx_hash, block_number, monitored)
        except Exception as e:
            logger.error(
                f"[Monitor] Error processing transaction {mask_tx_hash(tx_hash or '')} "
                f"in block {block_number}: {e}"
            )
            return ScanItemResult(block_number, ScanOutcome.ERROR, tx_hash, error=str(e))

    async def _process_external_transaction(
        self,
        tx: Any,
        tx_hash: str,
        block_number: int,
        monitored: set[str],
    ) -> ScanItemResult:
        existing_id = await self.transactions.find_id_by_hash(tx_hash)
        if existing_id is not None:
            return await self._resolve_tracked_transaction(existing_id, tx_hash, block_number)

        receipt = await self.blockchain.get_receipt(tx_hash)
        if receipt is None:
            return ScanItemResult(block_number, ScanOutcome.NOT_FINAL, tx_hash)

        sender = tx["from"]
        recipient = tx.get("to") or ""
        effective_gas_price = receipt.get("effectiveGasPrice")

        external = Transaction(
            from_address=sender,
            to_address=recipient,
            amount=str(tx["value"]),
            status=TransactionStatus.CONFIRMED,
            transaction_hash=to_hex_string(receipt["transactionHash"]),
            block_number=int(receipt["blockNumber"]),
            gas_used=str(receipt["gasUsed"]),
            effective_gas_price=str(effective_gas_price) if effective_gas_price is not None else None,
            source=TransactionSource.EXTERNAL,
        )

        # Claim the hash before writing so concurrent or repeated scans
        # cannot materialize the same transfer twice.
        if not await self.transactions.claim_hash(tx_hash, external.id):
            return ScanItemResult(block_number, ScanOutcome.DUPLICATE, tx_hash)

        try:
            await self.transactions.save(external)
        except Exception:
            await self.transactions.release_hash(tx_hash)
            raise

        amount_in_eth = from_wei(external.amount)
        if sender.lower() in monitored:
            await self.wallet_service.add_transaction(sender, external.id)
            logger.info(
                f"[Monitor] External SEND detected: {mask_address(sender)} "
                f"sent {amount_in_eth} ETH"
            )
        if recipient and recipient.lower() in monitored and recipient.lower() != sender.lower():
            await self.wallet_service.add_transaction(recipient, external.id)
            logger.info(
                f"[Monitor] External RECEIVE detected: {mask_address(recipient)} "
                f"received {amount_in_eth} ETH"
            )

        logger.info(f"[Monitor] Tracked external transaction: {mask_tx_hash(tx_hash)}")
        return ScanItemResult(
            block_number, ScanOutcome.RECORDED, tx_hash, transaction_id=external.id
        )

    async def _resolve_tracked_transaction(
        self,
        transaction_id: str,
        tx_hash: str,
        block_number: int,
    ) -> ScanItemResult:
        """
        Settle a known record that is still pending.

        Local transfers whose confirmation job never ran stay pending
        until their hash shows up in a scanned block.
        """
        existing = await self.transactions.get(transaction_id)
        if existing is None or existing.is_terminal:
            logger.debug(f"[Monitor] Transaction {mask_tx_hash(tx_hash)} already tracked")
            return ScanItemResult(block_number, ScanOutcome.DUPLICATE, tx_hash, transaction_id)

        receipt = await self.blockchain.get_receipt(tx_hash)
        if receipt is None:
            return ScanItemResult(block_number, ScanOutcome.NOT_FINAL, tx_hash, transaction_id)

        resolved = await self.transactions.transition(
            transaction_id, lambda transaction: apply_receipt(transaction, receipt)
        )
        if resolved is None:
            return ScanItemResult(block_number, ScanOutcome.DUPLICATE, tx_hash, transaction_id)

        logger.info(
            f"[Monitor] Pending transaction {transaction_id} resolved from block "
            f"{block_number}: {resolved.status}"
        )
        return ScanItemResult(block_number, ScanOutcome.RESOLVED, tx_hash, transaction_id)
