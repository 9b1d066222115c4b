"""
Event bus for poll updates, backed by Redis pub/sub.
"""
import json
import logging
from typing import Final

import redis.asyncio as redis
from redis.exceptions import RedisError

from whentomeet.events import EventCreatedEvent, PollEvent

CHANNEL_EVENTS: Final[str] = "w2m:events"
CHANNEL_EVENT_PREFIX: Final[str] = "w2m:"

logger = logging.getLogger("whentomeet.bus")


class EventBus:
    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    @staticmethod
    def event_channel(event_id: str) -> str:
        return f"{CHANNEL_EVENT_PREFIX}{event_id}"

    async def publish_created(self, event: EventCreatedEvent) -> None:
        await self._publish(CHANNEL_EVENTS, event)

    async def publish_update(self, event: PollEvent) -> None:
        await self._publish(self.event_channel(event["event_id"]), event)

    async def _publish(self, channel: str, event: PollEvent) -> None:
        # best effort
        try:
            await self.redis_client.publish(channel, json.dumps(event))
        except RedisError as e:
            logger.warning("publish to %s failed: %s", channel, e)
