"""Poll persistence: connection pool, migrations and store implementations."""

from whentomeet.db.core import close_pool, get_pool_stats, init_pool
from whentomeet.db.polls import PostgresPollStore
from whentomeet.db.store import InMemoryPollStore, PollStore

__all__ = [
    "InMemoryPollStore",
    "PollStore",
    "PostgresPollStore",
    "close_pool",
    "get_pool_stats",
    "init_pool",
]
