"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Blockchain RPC
    rpc_url: str = Field(
        default="https://rpc.sepolia.org",
        validation_alias=AliasChoices("sepolia_rpc_url", "rpc_url"),
        description="JSON-RPC endpoint of the Sepolia testnet node",
    )
    chain_id: int | None = Field(
        default=None,
        description="Chain id used for signing (read from the node when unset)",
    )
    blockchain_rpc_timeout: float = Field(
        default=30.0, gt=0, description="Upper bound for a single RPC round trip (seconds)"
    )

    # Confirmation wait
    confirmation_timeout: int = Field(
        default=600, gt=0, description="Upper bound of the confirmation wait (seconds)"
    )
    confirmation_poll_interval: float = Field(
        default=4.0, gt=0, description="Receipt polling interval (seconds)"
    )

    # Redis (record store and Dramatiq)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Job dispatch queue
    queue_name: str = "transactions"
    queue_max_attempts: int = Field(
        default=3, ge=1, description="Total delivery attempts per confirmation job"
    )
    queue_min_backoff_ms: int = Field(default=2000, gt=0)
    queue_max_backoff_ms: int = Field(default=60000, gt=0)

    # External-activity monitor
    monitor_enabled: bool = True
    monitor_interval_seconds: int = Field(
        default=5, ge=1, description="Blockchain scan interval in seconds"
    )
    monitor_batch_size: int = Field(
        default=10, ge=1, description="Blocks per scan batch"
    )
    monitor_rescan_window: int = Field(
        default=0, ge=0, description="Blocks behind the cursor re-scanned every cycle"
    )

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = Field(default=8000, ge=1, le=65535)

    # Application
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = "logs/wallet.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize log level to a loguru level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level '{v}'. Expected one of {LOG_LEVELS}")
        return level

    @model_validator(mode="after")
    def validate_backoff(self) -> "Settings":
        """Backoff bounds must be ordered."""
        if self.queue_max_backoff_ms < self.queue_min_backoff_ms:
            raise ValueError(
                "QUEUE_MAX_BACKOFF_MS must be greater than or equal to QUEUE_MIN_BACKOFF_MS"
            )
        return self

    @property
    def queue_max_retries(self) -> int:
        """Retries granted after the first delivery attempt."""
        return self.queue_max_attempts - 1

    @property
    def confirmation_time_limit_ms(self) -> int:
        """Dramatiq time limit for a confirmation job, above the confirmation wait."""
        return (self.confirmation_timeout + 60) * 1000


settings = Settings()
