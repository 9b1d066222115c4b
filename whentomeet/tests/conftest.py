import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest
from fastapi.testclient import TestClient
import fakeredis.aioredis as fakeredis

from whentomeet import lifespan as lifespan_module
from whentomeet import main as main_module
from whentomeet.config import clear_settings_cache
from whentomeet.db.store import InMemoryPollStore
from whentomeet.models.polls import TimeSlot
from whentomeet.service import PollService
from whentomeet.slots import generate_slot_times


class _AwaitableRedis:
    def __init__(self, client):
        self._client = client

    def __await__(self):
        async def _coro():
            return self._client

        return _coro().__await__()


def make_slots(start_date="2024-01-01", end_date="2024-01-02", start_time="09:00", end_time="11:00", event_id="evt"):
    """TimeSlot models with ids 1..n in generation order."""
    times = generate_slot_times(start_date, end_date, start_time, end_time)
    return [TimeSlot(id=i, event_id=event_id, slot_time=t) for i, t in enumerate(times, start=1)]


@pytest.fixture
def slots():
    # 2 days x 09:00-11:00 -> 4 rows x 2 columns, ids 1-4 on day one, 5-8 on day two
    return make_slots()


@pytest.fixture
def store():
    return InMemoryPollStore()


@pytest.fixture
def service(store):
    return PollService(store)


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setenv("W2M_STORE", "memory")
    clear_settings_cache()

    def fake_redis_constructor(*_args, **_kwargs):
        fake = fakeredis.FakeRedis(decode_responses=True)
        return _AwaitableRedis(fake)

    monkeypatch.setattr(lifespan_module.redis, "Redis", fake_redis_constructor)

    with TestClient(main_module.app) as c:
        yield c
    clear_settings_cache()
