from typing import Dict

from fastapi import APIRouter

from whentomeet.db import get_pool_stats
from whentomeet.dependencies import OptionalRedis, Polls

router = APIRouter()


@router.get("/health")
async def health(service: Polls, redis_client: OptionalRedis) -> Dict[str, object]:
    redis_status = "disconnected"
    if redis_client is not None:
        try:
            await redis_client.ping()
            redis_status = "healthy"
        except Exception:
            redis_status = "unhealthy"

    return {
        "status": "ok",
        "redis": redis_status,
        "store": type(service.store).__name__ if service.configured else "not_configured",
        "db_pool": get_pool_stats(),
    }
