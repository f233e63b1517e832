"""
Blockchain Monitor Scan Results.

Per-item results of one scan cycle. Errors are recorded here and the
cycle goes on, so the cursor still advances past the whole range.
"""

from dataclasses import dataclass, field
from enum import StrEnum


class ScanOutcome(StrEnum):
    RECORDED = "recorded"
    RESOLVED = "resolved"
    DUPLICATE = "duplicate"
    NOT_FINAL = "not_final"
    IRRELEVANT = "irrelevant"
    ERROR = "error"


@dataclass(frozen=True)
class ScanItemResult:
    """Result for one relevant transaction, or for a block that failed."""

    block_number: int
    outcome: ScanOutcome
    transaction_hash: str | None = None
    transaction_id: str | None = None
    error: str | None = None


@dataclass
class ScanReport:
    """
    Results of one scan cycle over ``[from_block, to_block]``.

    Irrelevant transactions are only counted.
    """

    from_block: int
    to_block: int
    monitored_wallets: int = 0
    items: list[ScanItemResult] = field(default_factory=list)
    irrelevant: int = 0
    cursor: int | None = None

    def add(self, item: ScanItemResult) -> None:
        if item.outcome is ScanOutcome.IRRELEVANT:
            self.irrelevant += 1
        else:
            self.items.append(item)

    def count(self, outcome: ScanOutcome) -> int:
        if outcome is ScanOutcome.IRRELEVANT:
            return self.irrelevant
        return sum(1 for item in self.items if item.outcome is outcome)

    @property
    def errors(self) -> list[ScanItemResult]:
        return [item for item in self.items if item.outcome is ScanOutcome.ERROR]

    def summary(self) -> dict[str, int]:
        return {outcome.value: self.count(outcome) for outcome in ScanOutcome}
