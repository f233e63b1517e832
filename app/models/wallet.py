"""
Wallet record.

Stored as JSON under ``wallet:<address>``.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.utils.datetime_utils import utc_now_iso


class Wallet(BaseModel):
    """Custodial wallet with its cached (non-authoritative) balance snapshot."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    address: str = Field(..., description="EIP-55 checksum address")
    private_key: str = Field(..., description="0x-prefixed signing key")
    balance: str = Field(default="0", description="Balance snapshot in wei")
    created_at: str = Field(default_factory=utc_now_iso)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, data: str) -> "Wallet":
        return cls.model_validate_json(data)


class WalletKeys(BaseModel):
    """Keypair produced by the chain gateway."""

    address: str
    private_key: str
