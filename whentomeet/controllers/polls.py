import logging
from typing import List, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel, Field, field_validator

from whentomeet.dependencies import Polls
from whentomeet.models.polls import (
    BestSlotsResponse,
    EventDetailResponse,
    EventListResponse,
    EventSummary,
    SelectionResponse,
)
from whentomeet.selection import apply_drag
from whentomeet.service import EventDetail
from whentomeet.slots import DATE_RE, TIME_RE

logger = logging.getLogger("whentomeet.polls")
router = APIRouter(tags=["polls"])


class CreateEventRequest(BaseModel):
    title: str
    description: Optional[str] = None
    start_date: str
    end_date: str
    start_time: str = "09:00"
    end_time: str = "17:00"

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_date(cls, v: str) -> str:
        v = v.strip()
        if not DATE_RE.match(v):
            raise ValueError(f"invalid date format: {v}")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        v = v.strip()
        if not TIME_RE.match(v):
            raise ValueError(f"invalid time format: {v}")
        return v


class AvailabilityRequest(BaseModel):
    participant_name: str
    unavailable_slot_ids: List[int] = Field(default_factory=list)


class DragRequest(BaseModel):
    selected: List[int] = Field(default_factory=list)
    anchor: tuple[int, int]
    current: tuple[int, int]


def _detail_response(detail: EventDetail) -> EventDetailResponse:
    aggregator = detail.aggregator
    return EventDetailResponse(
        event=detail.event,
        slots=detail.slots,
        responses=detail.responses,
        participants=aggregator.participants(),
        heatmap=aggregator.heatmap(detail.slots),
        selected=sorted(detail.selected),
    )


@router.get("/events", response_model=EventListResponse)
async def list_events(service: Polls) -> EventListResponse:
    events = await service.list_events()
    logger.info("GET /events -> %d events", len(events))
    return EventListResponse(events=events)


@router.post("/events", status_code=201, response_model=EventSummary)
async def create_event(req: CreateEventRequest, service: Polls) -> EventSummary:
    logger.info("POST /events title=%s range=%s..%s window=%s-%s",
                req.title, req.start_date, req.end_date, req.start_time, req.end_time)
    event, slot_count = await service.create_event(
        title=req.title,
        description=req.description,
        start_date=req.start_date,
        end_date=req.end_date,
        start_time=req.start_time,
        end_time=req.end_time,
    )
    return EventSummary(event=event, slot_count=slot_count)


@router.get("/events/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: str,
    service: Polls,
    participant: Optional[str] = Query(None, description="Seed 'selected' with this participant's unavailable slots"),
) -> EventDetailResponse:
    detail = await service.load_event(event_id, participant)
    return _detail_response(detail)


@router.post("/events/{event_id}/availability", response_model=EventDetailResponse)
async def submit_availability(event_id: str, req: AvailabilityRequest, service: Polls) -> EventDetailResponse:
    logger.info("POST /events/%s/availability participant=%s unavailable=%d",
                event_id, req.participant_name, len(req.unavailable_slot_ids))
    detail = await service.submit_availability(event_id, req.participant_name, req.unavailable_slot_ids)
    return _detail_response(detail)


@router.post("/events/{event_id}/selection", response_model=SelectionResponse)
async def apply_selection_drag(event_id: str, req: DragRequest, service: Polls) -> SelectionResponse:
    detail = await service.load_event(event_id)
    selected, covered = apply_drag(detail.slots, req.selected, req.anchor, req.current)
    return SelectionResponse(selected=sorted(selected), changed=sorted(covered))


@router.get("/events/{event_id}/best", response_model=BestSlotsResponse)
async def best_slots(
    event_id: str,
    service: Polls,
    limit: int = Query(5, ge=1, le=50),
) -> BestSlotsResponse:
    detail = await service.load_event(event_id)
    aggregator = detail.aggregator
    return BestSlotsResponse(
        event_id=event_id,
        participant_count=aggregator.participant_count,
        slots=aggregator.best_slots(detail.slots, limit),
    )
