"""Dependency injection for FastAPI endpoints.

Usage in controllers:
    from whentomeet.dependencies import Polls

    @router.get("/events")
    async def list_events(service: Polls):
        return await service.list_events()
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from whentomeet import state
from whentomeet.errors import ServiceUnavailableError
from whentomeet.service import PollService


def get_poll_service() -> PollService:
    """Get the PollService built at startup.

    Raises:
        ServiceUnavailableError: If the application has not started.
    """
    if state.poll_service is None:
        raise ServiceUnavailableError(detail="Poll service not initialized")
    return state.poll_service


def get_optional_redis() -> redis.Redis | None:
    """Get the Redis client if available, or None."""
    return state.redis_client


Polls = Annotated[PollService, Depends(get_poll_service)]
OptionalRedis = Annotated[redis.Redis | None, Depends(get_optional_redis)]
