"""
Task scheduler.

Runs the blockchain monitor scan on a fixed interval inside the API
process event loop.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from app.config.settings import Settings
from app.services.blockchain_monitor import BlockchainMonitorService

MONITOR_JOB_ID = "blockchain_monitor_scan"


def create_scheduler(monitor: BlockchainMonitorService, settings: Settings) -> AsyncIOScheduler:
    """
    Create scheduler with the monitor scan job registered.

    ``max_instances=1`` and ``coalesce=True`` keep overlapping ticks from
    piling up; the monitor itself also skips a tick while a scan runs.

    Args:
        monitor: Blockchain monitor service
        settings: Application settings

    Returns:
        Configured (not started) AsyncIOScheduler
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        monitor.scan_new_blocks,
        trigger=IntervalTrigger(seconds=settings.monitor_interval_seconds),
        id=MONITOR_JOB_ID,
        name="Blockchain monitor scan",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )

    logger.info(
        f"Scheduler configured: monitor scan every {settings.monitor_interval_seconds}s"
    )
    return scheduler
