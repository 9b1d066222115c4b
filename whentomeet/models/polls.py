from datetime import datetime

from pydantic import BaseModel, Field


class Event(BaseModel):
    id: str
    title: str
    description: str | None = None
    created_at: datetime


class TimeSlot(BaseModel):
    id: int
    event_id: str
    slot_time: datetime


class Response(BaseModel):
    event_id: str
    time_slot_id: int
    participant_name: str
    is_available: bool


class SlotAvailability(BaseModel):
    """One slot's availability as it is stored for a participant."""

    time_slot_id: int
    is_available: bool


class HeatmapCell(BaseModel):
    row: int
    col: int
    slot_id: int | None = None
    count: int = 0
    ratio: float = 0.0
    bucket: str = "none"
    color: str
    title: str = ""


class Heatmap(BaseModel):
    rows: list[str]
    columns: list[str]
    participant_count: int
    cells: list[HeatmapCell]


class RankedSlot(BaseModel):
    slot: TimeSlot
    count: int
    ratio: float
    bucket: str


class EventSummary(BaseModel):
    event: Event
    slot_count: int


class EventListResponse(BaseModel):
    events: list[Event]


class EventDetailResponse(BaseModel):
    event: Event
    slots: list[TimeSlot]
    responses: list[Response]
    participants: list[str]
    heatmap: Heatmap
    selected: list[int] = Field(default_factory=list)


class SelectionResponse(BaseModel):
    selected: list[int]
    changed: list[int]


class BestSlotsResponse(BaseModel):
    event_id: str
    participant_count: int
    slots: list[RankedSlot]
