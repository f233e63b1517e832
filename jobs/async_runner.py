"""
Async runner for dramatiq tasks.

Provides a thread-safe way to run async code in dramatiq actors.
Solves the event loop issues with Redis connections.
"""

import asyncio
import threading
from collections.abc import Coroutine
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from loguru import logger

from app.config.settings import settings
from app.repositories.record_store import RecordStore
from app.services.blockchain import init_blockchain_service
from app.services.container import ServiceContainer, build_services
from app.utils.redis_utils import get_redis_client

T = TypeVar("T")

# Thread-local storage for event loops
_thread_local = threading.local()


def get_event_loop() -> asyncio.AbstractEventLoop:
    """
    Get or create event loop for current thread.

    Creates a new event loop for each thread and reuses it.
    This prevents "Future attached to a different loop" errors.
    """
    loop = getattr(_thread_local, "loop", None)
    if loop is None or loop.is_closed():
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        _thread_local.loop = loop
        logger.debug(f"Created new event loop for thread {threading.current_thread().name}")
    return loop


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """
    Run async coroutine in the thread's event loop.

    This is the recommended way to run async code in dramatiq actors.
    It reuses the same event loop per thread, preventing connection issues.

    Args:
        coro: Async coroutine to run

    Returns:
        Result of the coroutine
    """
    loop = get_event_loop()
    try:
        return loop.run_until_complete(coro)
    except Exception as e:
        logger.exception(f"Error running async coroutine: {e}")
        raise


@asynccontextmanager
async def create_local_services():
    """
    Create services bound to the current event loop.

    The Redis client is created per call and closed on exit; the chain
    gateway is the process-wide singleton (its thread pool is not tied
    to an event loop).

    Usage:
        async with create_local_services() as services:
            await services.confirmation_service.process(job)

    Yields:
        ServiceContainer for the current event loop
    """
    blockchain = init_blockchain_service(settings)
    store = RecordStore(get_redis_client(settings))
    services: ServiceContainer = build_services(settings, store, blockchain)
    try:
        yield services
    finally:
        await services.close()
