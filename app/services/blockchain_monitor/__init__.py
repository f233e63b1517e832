"""
Blockchain Monitor Service.

Scans new blocks for transfers touching registered wallets and records
them as external transactions.

Key features:
- Persisted scan cursor that never moves backwards
- Hash-indexed deduplication of already tracked transfers
- Per-item scan results collected before the cursor advances
- Single scan at a time; overlapping triggers are skipped
"""

from .core import BlockchainMonitorService
from .cursor import ScanCursor
from .scan_results import ScanItemResult, ScanOutcome, ScanReport

__all__ = [
    "BlockchainMonitorService",
    "ScanCursor",
    "ScanItemResult",
    "ScanOutcome",
    "ScanReport",
]
