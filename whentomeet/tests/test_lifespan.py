"""Tests for startup and shutdown wiring."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from whentomeet import state
from whentomeet.db.store import InMemoryPollStore


def _settings(store="memory", event_bus=False):
    settings = MagicMock()
    settings.polls.store = store
    settings.polls.event_bus = event_bus
    settings.polls.read_retries = 2
    settings.polls.max_slots_per_event = 100
    return settings


class TestInitStore:
    @pytest.mark.asyncio
    async def test_memory(self):
        from whentomeet.lifespan import init_store

        with patch("whentomeet.lifespan.get_settings", return_value=_settings("memory")):
            store, db_enabled = await init_store()
        assert isinstance(store, InMemoryPollStore)
        assert db_enabled is False

    @pytest.mark.asyncio
    async def test_postgres(self):
        from whentomeet.db import PostgresPollStore
        from whentomeet.lifespan import init_store

        with patch("whentomeet.lifespan.get_settings", return_value=_settings("postgres")), \
                patch("whentomeet.lifespan.db.init_pool", AsyncMock()) as init_pool:
            store, db_enabled = await init_store()
        init_pool.assert_awaited_once()
        assert isinstance(store, PostgresPollStore)
        assert db_enabled is True

    @pytest.mark.asyncio
    async def test_postgres_unreachable_degrades(self):
        from whentomeet.lifespan import init_store

        with patch("whentomeet.lifespan.get_settings", return_value=_settings("postgres")), \
                patch("whentomeet.lifespan.db.init_pool", AsyncMock(side_effect=OSError("refused"))):
            store, db_enabled = await init_store()
        assert store is None
        assert db_enabled is False

    @pytest.mark.asyncio
    async def test_none(self):
        from whentomeet.lifespan import init_store

        with patch("whentomeet.lifespan.get_settings", return_value=_settings("none")):
            assert await init_store() == (None, False)


class TestSetupAndCleanup:
    @pytest.mark.asyncio
    async def test_service_built_from_settings(self):
        from whentomeet.lifespan import cleanup_resources, setup_resources

        with patch("whentomeet.lifespan.get_settings", return_value=_settings()):
            resources = await setup_resources()

        assert resources.redis_client is None
        assert state.poll_service is resources.poll_service
        assert resources.poll_service.read_retries == 2
        assert resources.poll_service.max_slots_per_event == 100
        assert resources.poll_service.configured is True

        await cleanup_resources(resources)
        assert state.poll_service is None

    @pytest.mark.asyncio
    async def test_cleanup_closes_pool_and_redis(self):
        from whentomeet.lifespan import LifespanResources, cleanup_resources

        redis_client = MagicMock()
        redis_client.aclose = AsyncMock()
        resources = LifespanResources(redis_client=redis_client, db_enabled=True)
        with patch("whentomeet.lifespan.db.close_pool", AsyncMock()) as close_pool:
            await cleanup_resources(resources)
        close_pool.assert_awaited_once()
        redis_client.aclose.assert_awaited_once()


class TestDependencies:
    def test_get_poll_service_raises_when_not_started(self):
        from whentomeet.dependencies import get_poll_service
        from whentomeet.errors import ServiceUnavailableError

        with patch.object(state, "poll_service", None):
            with pytest.raises(ServiceUnavailableError):
                get_poll_service()

    def test_get_poll_service_returns_instance(self):
        from whentomeet.dependencies import get_poll_service

        service = MagicMock()
        with patch.object(state, "poll_service", service):
            assert get_poll_service() is service
