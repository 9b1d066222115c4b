"""Persistence interface for polls, plus an in-process implementation."""

import abc
import secrets
import string
from collections.abc import Sequence
from datetime import UTC, datetime

from whentomeet.models.polls import Event, Response, SlotAvailability, TimeSlot

EVENT_ID_LENGTH = 10
EVENT_ID_ATTEMPTS = 10


def _generate_event_id(length: int = EVENT_ID_LENGTH) -> str:
    chars = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(chars) for _ in range(length))


class PollStore(abc.ABC):
    """Storage collaborator for events, their slots and responses.

    ``get_event`` returns ``None`` for an unknown id; transport failures
    propagate as exceptions so callers can tell the two apart.
    """

    @abc.abstractmethod
    async def list_events(self) -> list[Event]:
        """All events, newest first."""

    @abc.abstractmethod
    async def get_event(self, event_id: str) -> Event | None: ...

    @abc.abstractmethod
    async def list_slots(self, event_id: str) -> list[TimeSlot]:
        """The event's slots ascending by ``slot_time``."""

    @abc.abstractmethod
    async def list_responses(self, event_id: str) -> list[Response]: ...

    @abc.abstractmethod
    async def create_event(self, title: str, description: str | None) -> Event: ...

    @abc.abstractmethod
    async def delete_event(self, event_id: str) -> None:
        """Remove an event together with its slots and responses."""

    @abc.abstractmethod
    async def bulk_insert_slots(self, event_id: str, timestamps: Sequence[datetime]) -> int:
        """Insert slots; timestamps already present for the event are skipped.

        Returns the number of rows inserted.
        """

    @abc.abstractmethod
    async def replace_responses(
        self,
        event_id: str,
        participant_name: str,
        availability: Sequence[SlotAvailability],
    ) -> int:
        """Delete every row for ``(event_id, participant_name)`` then insert ``availability``."""

    async def close(self) -> None:
        return None


class InMemoryPollStore(PollStore):
    """Process-local store used for development and tests."""

    def __init__(self) -> None:
        self._events: dict[str, Event] = {}
        self._slots: dict[str, list[TimeSlot]] = {}
        self._responses: dict[str, list[Response]] = {}
        self._next_slot_id = 1

    async def list_events(self) -> list[Event]:
        # later insertions first among equal timestamps
        return sorted(reversed(list(self._events.values())), key=lambda e: e.created_at, reverse=True)

    async def get_event(self, event_id: str) -> Event | None:
        return self._events.get(event_id)

    async def list_slots(self, event_id: str) -> list[TimeSlot]:
        return sorted(self._slots.get(event_id, []), key=lambda s: s.slot_time)

    async def list_responses(self, event_id: str) -> list[Response]:
        return list(self._responses.get(event_id, []))

    async def create_event(self, title: str, description: str | None) -> Event:
        for _ in range(EVENT_ID_ATTEMPTS):
            event_id = _generate_event_id()
            if event_id not in self._events:
                break
        else:
            raise RuntimeError("Failed to generate unique event ID")
        event = Event(id=event_id, title=title, description=description, created_at=datetime.now(UTC))
        self._events[event_id] = event
        self._slots[event_id] = []
        self._responses[event_id] = []
        return event

    async def delete_event(self, event_id: str) -> None:
        self._events.pop(event_id, None)
        self._slots.pop(event_id, None)
        self._responses.pop(event_id, None)

    async def bulk_insert_slots(self, event_id: str, timestamps: Sequence[datetime]) -> int:
        slots = self._slots.setdefault(event_id, [])
        seen = {s.slot_time for s in slots}
        inserted = 0
        for ts in timestamps:
            if ts in seen:
                continue
            slots.append(TimeSlot(id=self._next_slot_id, event_id=event_id, slot_time=ts))
            self._next_slot_id += 1
            seen.add(ts)
            inserted += 1
        return inserted

    async def replace_responses(
        self,
        event_id: str,
        participant_name: str,
        availability: Sequence[SlotAvailability],
    ) -> int:
        kept = [r for r in self._responses.get(event_id, []) if r.participant_name != participant_name]
        kept.extend(
            Response(
                event_id=event_id,
                time_slot_id=a.time_slot_id,
                participant_name=participant_name,
                is_available=a.is_available,
            )
            for a in availability
        )
        self._responses[event_id] = kept
        return len(availability)
