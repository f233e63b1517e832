"""
HTTP API.

aiohttp application exposing wallets, transactions, the blockchain
monitor, queue inspection and health checks.
"""

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.api.middlewares import error_middleware
from app.api.routes import SERVICES_KEY, routes
from app.services.container import ServiceContainer
from jobs.health import setup_health_routes


def create_app(
    services: ServiceContainer,
    scheduler: AsyncIOScheduler | None = None,
) -> web.Application:
    """
    Create the API application.

    Args:
        services: Service container shared by all handlers
        scheduler: Monitor scheduler reported by the health endpoint

    Returns:
        Configured aiohttp application
    """
    app = web.Application(middlewares=[error_middleware])
    app[SERVICES_KEY] = services
    app.router.add_routes(routes)
    setup_health_routes(app, services.store, scheduler)
    return app


__all__ = ["create_app", "SERVICES_KEY"]
