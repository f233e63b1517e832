"""
Wallet service API entry point.

Run with ``python -m app.main``. Confirmation workers run separately:
``dramatiq jobs.tasks``.
"""

import asyncio
import sys

from aiohttp import web
from loguru import logger

from app.api import create_app
from app.config.logging_setup import setup_logging
from app.config.settings import settings
from app.repositories.record_store import RecordStore
from app.services.blockchain import init_blockchain_service
from app.services.container import build_services
from app.utils.redis_utils import get_redis_client, get_redis_url_masked
from jobs.scheduler import create_scheduler
from jobs.tasks import process_transaction


async def main() -> None:
    """Initialize services and serve the API until cancelled."""
    setup_logging(settings)
    logger.info(f"Starting wallet service ({settings.environment})...")

    blockchain = init_blockchain_service(settings)
    redis_client = get_redis_client(settings)
    await redis_client.ping()
    logger.info(f"Record store connected: {get_redis_url_masked(settings)}")

    services = build_services(
        settings, RecordStore(redis_client), blockchain, actor=process_transaction
    )

    scheduler = None
    if settings.monitor_enabled:
        await services.monitor.initialize()
        scheduler = create_scheduler(services.monitor, settings)
        scheduler.start()
        logger.info("Blockchain monitor started")
    else:
        logger.warning("Blockchain monitor disabled (MONITOR_ENABLED=false)")

    app = create_app(services, scheduler)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, settings.api_host, settings.api_port)
    await site.start()
    logger.info(f"API listening on http://{settings.api_host}:{settings.api_port}")

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down...")
        if scheduler is not None and scheduler.running:
            scheduler.shutdown(wait=False)
        await runner.cleanup()
        await services.close()
        blockchain.close()
        logger.info("Wallet service stopped")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Wallet service stopped by user (KeyboardInterrupt)")
    except Exception as e:
        logger.exception(f"Wallet service crashed: {e}")
        sys.exit(1)
