"""
Transaction records.

Locally-originated transfers and externally observed transfers share one
record shape, stored as JSON under ``transaction:<id>``.
"""

import uuid
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.utils.datetime_utils import utc_now_iso


class TransactionStatus(StrEnum):
    """Lifecycle status. Confirmed and failed are terminal."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TransactionStatus.PENDING


class TransactionSource(StrEnum):
    """Discriminator for records created by the blockchain monitor."""

    EXTERNAL = "external"


class Transaction(BaseModel):
    """
    Transfer record.

    ``version`` is incremented on every guarded status transition and is
    used as the compare-and-set precondition.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=False,
    )

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    amount: str = Field(..., description="Amount in wei")
    status: TransactionStatus = TransactionStatus.PENDING
    timestamp: str = Field(default_factory=utc_now_iso)
    transaction_hash: str | None = None
    block_number: int | None = None
    gas_used: str | None = None
    effective_gas_price: str | None = None
    error: str | None = None
    source: TransactionSource | None = None
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_json(cls, data: str) -> "Transaction":
        return cls.model_validate_json(data)
