"""Application startup and shutdown.

Resources are resolved once here and handed to the :class:`PollService`;
nothing reads configuration afterwards.
"""

import logging
from dataclasses import dataclass

import redis.asyncio as redis
from redis.asyncio import BlockingConnectionPool as RedisConnectionPool

from whentomeet import db, state
from whentomeet.bus import EventBus
from whentomeet.config import get_settings
from whentomeet.db.store import InMemoryPollStore, PollStore
from whentomeet.service import PollService

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    redis_client: redis.Redis | None = None
    event_bus: EventBus | None = None
    store: PollStore | None = None
    poll_service: PollService | None = None
    db_enabled: bool = False


async def init_redis() -> redis.Redis:
    """Initialize Redis connection with connection pool."""
    settings = get_settings()

    redis_pool = RedisConnectionPool(
        host=settings.redis.host,
        port=settings.redis.port,
        password=settings.redis.password if settings.redis.password else None,
        max_connections=settings.redis.max_connections,
        timeout=settings.redis.pool_timeout_sec,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
    )

    candidate_client = redis.Redis(connection_pool=redis_pool, decode_responses=True)
    if hasattr(candidate_client, "__await__"):
        return await candidate_client
    return candidate_client


async def init_store() -> tuple[PollStore | None, bool]:
    """Build the configured poll store.

    Returns:
        The store (None when storage is disabled or unreachable) and whether
        the database pool was opened.
    """
    kind = get_settings().polls.store
    if kind == "memory":
        logger.info("Using in-memory poll store")
        return InMemoryPollStore(), False
    if kind == "postgres":
        try:
            await db.init_pool()
        except Exception as e:
            logger.warning("Failed to initialize database, poll storage disabled: %s", e)
            return None, False
        return db.PostgresPollStore(), True
    logger.warning("Poll storage not configured; running read-only with no events")
    return None, False


async def setup_resources() -> LifespanResources:
    """Set up all shared resources and publish them to ``state``."""
    settings = get_settings()
    resources = LifespanResources()

    if settings.polls.event_bus:
        resources.redis_client = await init_redis()
        resources.event_bus = EventBus(resources.redis_client)

    resources.store, resources.db_enabled = await init_store()
    resources.poll_service = PollService(
        resources.store,
        bus=resources.event_bus,
        read_retries=settings.polls.read_retries,
        max_slots_per_event=settings.polls.max_slots_per_event,
    )

    state.redis_client = resources.redis_client
    state.event_bus = resources.event_bus
    state.poll_service = resources.poll_service
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    """Clean up all resources on shutdown."""
    if resources.store is not None:
        await resources.store.close()

    if resources.db_enabled:
        try:
            await db.close_pool()
        except Exception as e:
            logger.warning("Error closing database pool: %s", e)

    if resources.redis_client:
        aclose = getattr(resources.redis_client, "aclose", None)
        if callable(aclose):
            await aclose()
        else:
            close = getattr(resources.redis_client, "close", None)
            if callable(close):
                close()

    state.redis_client = None
    state.event_bus = None
    state.poll_service = None
