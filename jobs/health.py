"""
Health check endpoints.

Provides HTTP endpoints for health checks and monitoring of the record
store and the monitor scheduler.
"""

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from app.repositories.record_store import RecordStore

STORE_KEY = web.AppKey("health_store", RecordStore)
SCHEDULER_KEY = web.AppKey("health_scheduler", AsyncIOScheduler)


def _scheduler_info(scheduler: AsyncIOScheduler | None) -> dict:
    if scheduler is None:
        return {"scheduler_running": False, "jobs": []}

    return {
        "scheduler_running": scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            }
            for job in scheduler.get_jobs()
        ],
    }


async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with record store and scheduler status
    """
    store = request.app[STORE_KEY]
    scheduler = request.app.get(SCHEDULER_KEY)

    try:
        await store.client.ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return web.json_response(
            {
                "status": "unhealthy",
                "error": str(e),
            },
            status=503,
        )

    return web.json_response(
        {
            "status": "healthy",
            "store": "ok",
            **_scheduler_info(scheduler),
        }
    )


async def readiness_handler(request: web.Request) -> web.Response:
    """
    Readiness check endpoint.

    Ready once the record store answers; the scheduler is optional
    (monitoring can be disabled).
    """
    try:
        await request.app[STORE_KEY].client.ping()
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        return web.json_response(
            {
                "status": "not_ready",
                "ready": False,
            },
            status=503,
        )

    return web.json_response(
        {
            "status": "ready",
            "ready": True,
        }
    )


async def liveness_handler(request: web.Request) -> web.Response:
    """
    Liveness check endpoint.

    Returns:
        JSON response indicating if the process is alive
    """
    return web.json_response(
        {
            "status": "alive",
            "alive": True,
        }
    )


def setup_health_routes(
    app: web.Application,
    store: RecordStore,
    scheduler: AsyncIOScheduler | None = None,
) -> None:
    """
    Register health routes on an application.

    Args:
        app: aiohttp application
        store: Record store to probe
        scheduler: Monitor scheduler, if monitoring is enabled
    """
    app[STORE_KEY] = store
    if scheduler is not None:
        app[SCHEDULER_KEY] = scheduler

    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
