"""Request payloads of the HTTP API."""

from pydantic import BaseModel, ConfigDict, Field

from app.utils.validation import ADDRESS_PATTERN, AMOUNT_PATTERN, PRIVATE_KEY_PATTERN


class ImportWalletRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    private_key: str = Field(
        ...,
        alias="privateKey",
        pattern=PRIVATE_KEY_PATTERN,
        description="Ethereum private key (64 hex characters with 0x prefix)",
    )


class CreateTransactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_address: str = Field(
        ...,
        alias="from",
        pattern=ADDRESS_PATTERN,
        description="Sender wallet address (must exist in system)",
    )
    to_address: str = Field(
        ...,
        alias="to",
        pattern=ADDRESS_PATTERN,
        description="Recipient wallet address",
    )
    amount_in_eth: str = Field(
        ...,
        alias="amountInEth",
        pattern=AMOUNT_PATTERN,
        description='Amount to send in ETH (e.g. "0.01")',
    )
