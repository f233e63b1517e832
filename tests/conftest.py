"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for tests; must be set before settings are imported
os.environ.setdefault("SEPOLIA_RPC_URL", "http://127.0.0.1:8545")
os.environ.setdefault("CHAIN_ID", "11155111")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("MONITOR_ENABLED", "false")
os.environ.setdefault("CONFIRMATION_TIMEOUT", "5")
os.environ.setdefault("CONFIRMATION_POLL_INTERVAL", "0.01")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402

from app.config.settings import Settings  # noqa: E402
from app.repositories.transaction_repository import TransactionRepository  # noqa: E402
from app.repositories.wallet_repository import WalletRepository  # noqa: E402
from app.services.container import build_services  # noqa: E402
from tests.fakes import FakeBlockchain, InMemoryRecordStore  # noqa: E402


@pytest.fixture
def test_settings():
    """Settings with small, test friendly values."""
    return Settings(
        monitor_batch_size=10,
        monitor_interval_seconds=5,
        monitor_rescan_window=0,
        queue_max_attempts=3,
    )


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def blockchain():
    return FakeBlockchain()


@pytest.fixture
def mock_actor():
    """Dramatiq actor double; ``send`` returns a message with an id."""
    actor = MagicMock()
    actor.send = MagicMock(return_value=MagicMock(message_id="job-1"))
    return actor


@pytest.fixture
def wallet_repository(store):
    return WalletRepository(store)


@pytest.fixture
def transaction_repository(store):
    return TransactionRepository(store)


@pytest.fixture
def services(test_settings, store, blockchain, mock_actor):
    """Service graph over the in-memory store and fake chain."""
    return build_services(test_settings, store, blockchain, actor=mock_actor)


@pytest.fixture
def sample_transaction_hash():
    """Sample transaction hash for testing."""
    return "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"
