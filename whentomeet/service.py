"""Poll operations shared by the HTTP API and the view controller.

A :class:`PollService` is built once at startup with the store resolved from
settings. ``store=None`` means no persistence backend is configured: listing
returns nothing and every other operation raises
:class:`PersistenceNotConfiguredError`.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any, TypeVar

import psycopg

from whentomeet.aggregate import Aggregator
from whentomeet.bus import EventBus
from whentomeet.db.store import PollStore
from whentomeet.errors import (
    DatabaseError,
    NotFoundError,
    PersistenceNotConfiguredError,
    ValidationError,
)
from whentomeet.models.polls import Event, Response, TimeSlot
from whentomeet.selection import availability_to_selection, selection_to_availability
from whentomeet.slots import count_slot_times, generate_slot_times, parse_clock, parse_date

logger = logging.getLogger("whentomeet.service")

T = TypeVar("T")

MAX_TITLE_LENGTH = 200
MAX_NAME_LENGTH = 100

# connection-level failures worth a retry on reads
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (psycopg.OperationalError, OSError)


@dataclass
class EventDetail:
    event: Event
    slots: list[TimeSlot]
    responses: list[Response]
    selected: set[int] = field(default_factory=set)

    @property
    def aggregator(self) -> Aggregator:
        return Aggregator(self.responses)


def normalize_participant_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError(detail="Please enter your name")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(detail=f"Name must be at most {MAX_NAME_LENGTH} characters")
    return name


class PollService:
    def __init__(
        self,
        store: PollStore | None,
        bus: EventBus | None = None,
        read_retries: int = 1,
        max_slots_per_event: int = 2000,
    ):
        self.store = store
        self.bus = bus
        self.read_retries = read_retries
        self.max_slots_per_event = max_slots_per_event

    @property
    def configured(self) -> bool:
        return self.store is not None

    def _require_store(self) -> PollStore:
        if self.store is None:
            raise PersistenceNotConfiguredError()
        return self.store

    async def _read(self, what: str, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        attempts = 1 + max(0, self.read_retries)
        for attempt in range(1, attempts + 1):
            try:
                return await fn(*args)
            except TRANSPORT_ERRORS as e:
                if attempt == attempts:
                    logger.error("read %s failed after %d attempts: %s", what, attempt, e)
                    raise DatabaseError(detail=f"Failed to load {what}") from e
                logger.warning("read %s failed (attempt %d/%d): %s", what, attempt, attempts, e)
        raise AssertionError("unreachable")

    async def _write(self, what: str, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        try:
            return await fn(*args)
        except (psycopg.Error, OSError) as e:
            logger.exception("write %s failed", what)
            raise DatabaseError(detail=f"Failed to save {what}") from e

    async def list_events(self) -> list[Event]:
        """Newest first; empty when storage is missing or unreachable."""
        if self.store is None:
            return []
        try:
            return await self._read("events", self.store.list_events)
        except DatabaseError:
            return []

    async def get_event(self, event_id: str) -> Event:
        store = self._require_store()
        event = await self._read("event", store.get_event, event_id)
        if event is None:
            logger.warning("Event not found: %s", event_id)
            raise NotFoundError(detail="Event not found", event_id=event_id)
        return event

    async def create_event(
        self,
        title: str | None,
        description: str | None,
        start_date: date | str | None,
        end_date: date | str | None,
        start_time: time | str | None = "09:00",
        end_time: time | str | None = "17:00",
    ) -> tuple[Event, int]:
        """Create an event and its slot grid.

        Returns the event and the number of slots inserted.
        """
        store = self._require_store()
        title = (title or "").strip()
        if not title or not start_date or not end_date:
            raise ValidationError(detail="Please fill in the title and date range")
        if len(title) > MAX_TITLE_LENGTH:
            raise ValidationError(detail=f"Title must be at most {MAX_TITLE_LENGTH} characters")
        if parse_date(start_date) is None or parse_date(end_date) is None:
            raise ValidationError(detail="Dates must use YYYY-MM-DD")
        if parse_clock(start_time) is None or parse_clock(end_time) is None:
            raise ValidationError(detail="Times must use HH:MM")

        slot_count = count_slot_times(start_date, end_date, start_time, end_time)
        if not slot_count:
            raise ValidationError(detail="The date range and daily window contain no slots")
        if slot_count > self.max_slots_per_event:
            raise ValidationError(
                detail=f"Too many slots ({slot_count}); the limit is {self.max_slots_per_event}"
            )
        slot_times = generate_slot_times(start_date, end_date, start_time, end_time)

        description = (description or "").strip() or None
        event = await self._write("event", store.create_event, title, description)
        try:
            inserted = await self._write("slots", store.bulk_insert_slots, event.id, slot_times)
        except DatabaseError:
            # no slotless event left behind
            await self._write("event", store.delete_event, event.id)
            raise
        logger.info("Created event id=%s slots=%d", event.id, inserted)

        if self.bus is not None:
            await self.bus.publish_created({
                "type": "event_created",
                "event_id": event.id,
                "title": event.title,
                "slot_count": inserted,
                "timestamp": datetime.now(UTC).isoformat(),
            })
        return event, inserted

    async def load_event(self, event_id: str, participant_name: str | None = None) -> EventDetail:
        """Load an event with its slots and responses.

        When ``participant_name`` is given, ``selected`` holds the slots that
        participant previously marked unavailable.
        """
        store = self._require_store()
        event = await self.get_event(event_id)
        slots = await self._read("slots", store.list_slots, event_id)
        responses = await self._read("responses", store.list_responses, event_id)
        selected: set[int] = set()
        name = (participant_name or "").strip()
        if name:
            selected = availability_to_selection(responses, name)
        return EventDetail(event=event, slots=slots, responses=responses, selected=selected)

    async def submit_availability(
        self,
        event_id: str,
        participant_name: str | None,
        unavailable_slot_ids: Iterable[int],
    ) -> EventDetail:
        """Replace a participant's responses with one row per slot of the event."""
        store = self._require_store()
        name = normalize_participant_name(participant_name)
        await self.get_event(event_id)
        slots = await self._read("slots", store.list_slots, event_id)

        known = {s.id for s in slots}
        unavailable = set(unavailable_slot_ids)
        unknown = unavailable - known
        if unknown:
            logger.warning("Ignoring %d unknown slot ids for event %s", len(unknown), event_id)

        availability = selection_to_availability([s.id for s in slots], unavailable & known)
        await self._write("responses", store.replace_responses, event_id, name, availability)
        available_count = sum(1 for a in availability if a.is_available)
        logger.info(
            "Replaced responses event=%s participant=%s available=%d unavailable=%d",
            event_id,
            name,
            available_count,
            len(availability) - available_count,
        )

        if self.bus is not None:
            await self.bus.publish_update({
                "type": "responses_replaced",
                "event_id": event_id,
                "participant_name": name,
                "available_count": available_count,
                "unavailable_count": len(availability) - available_count,
                "timestamp": datetime.now(UTC).isoformat(),
            })
        return await self.load_event(event_id, name)
