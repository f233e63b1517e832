"""
Dramatiq broker configuration.

Redis-based message broker for the transactions queue.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import (
    AgeLimit,
    Callbacks,
    CurrentMessage,
    Pipelines,
    Retries,
    ShutdownNotifications,
    TimeLimit,
)
from loguru import logger

from app.config.constants import QUEUE_NAMESPACE
from app.config.logging_setup import setup_logging
from app.config.settings import settings
from app.utils.redis_utils import get_redis_url_masked
from jobs.middleware import JobHistory

setup_logging(settings)

# Middleware order matters for after-hooks, which run last-to-first:
# Retries decides on redelivery before JobHistory records the outcome.
# ShutdownNotifications: Allows workers to gracefully shutdown
# CurrentMessage: Provides access to current message in actors
# JobHistory: Keeps completed and failed jobs inspectable
# Retries: Exponential backoff for failed tasks
redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password if settings.redis_password else None,
    db=settings.redis_db,
    namespace=QUEUE_NAMESPACE,
    middleware=[
        AgeLimit(),
        TimeLimit(),
        ShutdownNotifications(),
        Callbacks(),
        Pipelines(),
        CurrentMessage(),
        JobHistory(),
        Retries(
            max_retries=settings.queue_max_retries,
            min_backoff=settings.queue_min_backoff_ms,
            max_backoff=settings.queue_max_backoff_ms,
        ),
    ],
)

# Set as default broker
dramatiq.set_broker(redis_broker)

# Export broker
broker = redis_broker

logger.info(
    f"Dramatiq broker initialized with graceful shutdown support: "
    f"{get_redis_url_masked(settings)}"
)
logger.info(
    "Middleware enabled: ShutdownNotifications, CurrentMessage, JobHistory, "
    "Retries (exponential backoff)"
)
