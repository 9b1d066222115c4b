from typing import Literal, TypedDict, Union


class EventCreatedEvent(TypedDict):
    type: Literal["event_created"]
    event_id: str
    title: str
    slot_count: int
    timestamp: str


class ResponsesReplacedEvent(TypedDict):
    type: Literal["responses_replaced"]
    event_id: str
    participant_name: str
    available_count: int
    unavailable_count: int
    timestamp: str


# Discriminated union of poll updates published on the bus
PollEvent = Union[EventCreatedEvent, ResponsesReplacedEvent]
