from typing import Optional

import redis.asyncio as redis

from whentomeet.bus import EventBus
from whentomeet.service import PollService

# Global runtime state initialized in lifespan.setup_resources
redis_client: Optional[redis.Redis] = None
event_bus: Optional[EventBus] = None
poll_service: Optional[PollService] = None
