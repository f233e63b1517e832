"""
Async executor for blockchain operations.

Provides async execution of synchronous Web3 operations in a thread pool,
bounded by a timeout, with transport failures surfaced as
ChainUnavailableError.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

import requests
from loguru import logger
from web3 import Web3
from web3.exceptions import ProviderConnectionError

from app.utils.exceptions import ChainUnavailableError


T = TypeVar("T")

# Transport-level failures: the endpoint is unreachable or too slow
TRANSPORT_ERRORS = (
    TimeoutError,
    ConnectionError,
    ProviderConnectionError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


class AsyncBlockchainExecutor:
    """
    Async executor for blockchain operations.

    Handles:
    - Thread pool execution of sync Web3 calls
    - Timeout handling
    - Mapping transport errors to ChainUnavailableError
    """

    def __init__(
        self,
        w3: Web3,
        timeout: float,
        max_workers: int = 4,
    ) -> None:
        """
        Initialize async executor.

        Args:
            w3: Web3 instance
            timeout: Upper bound for a single call in seconds
            max_workers: Maximum thread pool workers
        """
        self.w3 = w3
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="web3"
        )

    async def run(self, sync_func: Callable[[Web3], T], operation: str = "rpc") -> T:
        """
        Run a synchronous Web3 function in the thread pool.

        Args:
            sync_func: Synchronous function that takes Web3 instance as argument
            operation: Operation name for log lines

        Returns:
            Result from the function

        Raises:
            ChainUnavailableError: If the endpoint is unreachable or times out
        """
        loop = asyncio.get_running_loop()
        try:
            return await asyncio.wait_for(
                loop.run_in_executor(self._executor, lambda: sync_func(self.w3)),
                timeout=self.timeout,
            )
        except TRANSPORT_ERRORS as e:
            logger.error(f"Blockchain operation '{operation}' failed: {e}")
            raise ChainUnavailableError(
                f"Blockchain RPC unavailable during {operation}: {str(e) or 'timeout'}"
            ) from e

    def shutdown(self) -> None:
        """Release the thread pool."""
        self._executor.shutdown(wait=False)
