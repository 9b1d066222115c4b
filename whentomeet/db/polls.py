import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from psycopg import errors as pg_errors

from whentomeet.db.core import _get_connection
from whentomeet.db.store import EVENT_ID_ATTEMPTS, PollStore, _generate_event_id
from whentomeet.models.polls import Event, Response, SlotAvailability, TimeSlot

logger = logging.getLogger(__name__)


def _event_from_row(row: tuple[Any, ...]) -> Event:
    return Event(
        id=row[0],
        title=row[1],
        description=row[2],
        created_at=row[3].astimezone(UTC),
    )


class PostgresPollStore(PollStore):
    """Poll storage in the ``w2m_*`` tables."""

    async def list_events(self) -> list[Event]:
        async with _get_connection() as conn:
            rows = await conn.execute(
                "SELECT id, title, description, created_at FROM w2m_events ORDER BY created_at DESC"
            )
            return [_event_from_row(row) async for row in rows]

    async def get_event(self, event_id: str) -> Event | None:
        async with _get_connection() as conn:
            rows = await conn.execute(
                "SELECT id, title, description, created_at FROM w2m_events WHERE id = %s",
                (event_id,),
            )
            row = await rows.fetchone()
            if not row:
                return None
            return _event_from_row(row)

    async def list_slots(self, event_id: str) -> list[TimeSlot]:
        async with _get_connection() as conn:
            rows = await conn.execute(
                "SELECT id, event_id, slot_time FROM w2m_time_slots WHERE event_id = %s ORDER BY slot_time ASC",
                (event_id,),
            )
            return [TimeSlot(id=row[0], event_id=row[1], slot_time=row[2]) async for row in rows]

    async def list_responses(self, event_id: str) -> list[Response]:
        async with _get_connection() as conn:
            rows = await conn.execute(
                "SELECT event_id, time_slot_id, participant_name, is_available FROM w2m_responses WHERE event_id = %s",
                (event_id,),
            )
            return [
                Response(event_id=row[0], time_slot_id=row[1], participant_name=row[2], is_available=row[3])
                async for row in rows
            ]

    async def create_event(self, title: str, description: str | None) -> Event:
        now = datetime.now(UTC)
        async with _get_connection() as conn:
            for _ in range(EVENT_ID_ATTEMPTS):
                event_id = _generate_event_id()
                try:
                    await conn.execute(
                        "INSERT INTO w2m_events (id, title, description, created_at) VALUES (%s, %s, %s, %s)",
                        (event_id, title, description, now),
                    )
                    return Event(id=event_id, title=title, description=description, created_at=now)
                except pg_errors.UniqueViolation:
                    logger.debug("Event id collision on %s, retrying", event_id)
                    continue
            raise RuntimeError("Failed to generate unique event ID")

    async def delete_event(self, event_id: str) -> None:
        async with _get_connection() as conn:
            await conn.execute("DELETE FROM w2m_events WHERE id = %s", (event_id,))

    async def bulk_insert_slots(self, event_id: str, timestamps: Sequence[datetime]) -> int:
        if not timestamps:
            return 0
        async with _get_connection() as conn:
            cur = await conn.execute(
                """INSERT INTO w2m_time_slots (event_id, slot_time)
                   SELECT %s, t FROM unnest(%s::timestamp[]) AS t
                   ON CONFLICT (event_id, slot_time) DO NOTHING""",
                (event_id, list(timestamps)),
            )
            return cur.rowcount

    async def replace_responses(
        self,
        event_id: str,
        participant_name: str,
        availability: Sequence[SlotAvailability],
    ) -> int:
        slot_ids = [a.time_slot_id for a in availability]
        flags = [a.is_available for a in availability]
        async with _get_connection(autocommit=False) as conn:
            async with conn.transaction():
                await conn.execute(
                    "DELETE FROM w2m_responses WHERE event_id = %s AND participant_name = %s",
                    (event_id, participant_name),
                )
                if not slot_ids:
                    return 0
                cur = await conn.execute(
                    """INSERT INTO w2m_responses (event_id, time_slot_id, participant_name, is_available)
                       SELECT %s, r.slot_id, %s, r.available
                       FROM unnest(%s::bigint[], %s::boolean[]) AS r(slot_id, available)""",
                    (event_id, participant_name, slot_ids, flags),
                )
                return cur.rowcount
