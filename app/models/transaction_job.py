"""Payload of a confirmation job on the transactions queue."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TransactionJob(BaseModel):
    """Everything the confirmation worker needs to resolve one transfer."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    transaction_id: str
    transaction_hash: str
    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    amount: str

    def to_message(self) -> dict:
        """Serialize to JSON-safe kwargs for the dramatiq actor."""
        return self.model_dump(by_alias=True)
