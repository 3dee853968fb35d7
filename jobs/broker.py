"""
Dramatiq broker configuration.

Redis-backed queue for transfer sync runs. Workers start with:

    dramatiq jobs.broker jobs.tasks.transfer_sync
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

from transfer_sync.config.settings import settings
from transfer_sync.utils.exceptions import is_recoverable

MAX_RETRIES = 3


def should_retry(retries_so_far: int, exception: Exception) -> bool:
    """Retry transient provider and store failures only."""
    return retries_so_far < MAX_RETRIES and is_recoverable(exception)


# TimeLimit enforces the per-message limit the scheduler sets from
# each job's max duration
redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password if settings.redis_password else None,
    db=settings.redis_db,
    middleware=[
        AgeLimit(),
        TimeLimit(),
        ShutdownNotifications(),
        Callbacks(),
        Pipelines(),
        CurrentMessage(),
        Retries(
            min_backoff=15_000,  # 15 seconds
            max_backoff=300_000,  # 5 minutes
            retry_when=should_retry,
        ),
    ],
)

dramatiq.set_broker(redis_broker)

broker = redis_broker

logger.info(
    f"Dramatiq broker initialized: "
    f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
)
