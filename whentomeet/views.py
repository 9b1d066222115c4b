"""Three-screen navigation for an interactive poll client.

The controller keeps the screen state (event list, create form, one event)
and turns every failure into a user-facing notice, so an action never
raises out of it.
"""

import logging
from dataclasses import dataclass, field
from typing import Literal

from whentomeet.errors import APIError
from whentomeet.models.polls import Event
from whentomeet.selection import SelectionModel
from whentomeet.service import EventDetail, PollService

logger = logging.getLogger("whentomeet.views")

Screen = Literal["home", "create", "meeting"]


@dataclass
class CreateForm:
    title: str = ""
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    start_time: str = "09:00"
    end_time: str = "17:00"


@dataclass
class ViewController:
    service: PollService
    screen: Screen = "home"
    events: list[Event] = field(default_factory=list)
    form: CreateForm = field(default_factory=CreateForm)
    detail: EventDetail | None = None
    participant_name: str = ""
    notices: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.selection = SelectionModel(self._current_slots)

    def _current_slots(self):
        return self.detail.slots if self.detail is not None else []

    def _notify(self, message: str) -> None:
        logger.info("notice: %s", message)
        self.notices.append(message)

    def _notify_error(self, exc: APIError) -> None:
        self._notify(exc.detail)

    async def open_home(self) -> None:
        self.events = await self.service.list_events()
        self.screen = "home"

    def open_create(self) -> None:
        self.form = CreateForm()
        self.screen = "create"

    async def create_event(self) -> Event | None:
        form = self.form
        try:
            event, _ = await self.service.create_event(
                form.title,
                form.description,
                form.start_date,
                form.end_date,
                form.start_time,
                form.end_time,
            )
        except APIError as e:
            self._notify_error(e)
            return None
        self.form = CreateForm()
        self.events = await self.service.list_events()
        await self.open_event(event.id)
        return event

    def set_participant_name(self, name: str) -> None:
        self.participant_name = name

    async def open_event(self, event_id: str) -> bool:
        try:
            detail = await self.service.load_event(event_id, self.participant_name)
        except APIError as e:
            self._notify_error(e)
            return False
        previous = self.detail.event.id if self.detail is not None else None
        self.detail = detail
        if self.participant_name.strip():
            self.selection.seed(detail.selected)
        elif previous != event_id:
            self.selection.clear()
        self.screen = "meeting"
        return True

    def pointer_down(self, row: int, col: int) -> bool:
        return self.selection.pointer_down(row, col)

    def pointer_enter(self, row: int, col: int) -> None:
        self.selection.pointer_enter(row, col)

    def pointer_leave(self, row: int, col: int) -> None:
        self.selection.pointer_leave(row, col)

    def pointer_up(self) -> None:
        self.selection.pointer_up()

    async def submit(self) -> bool:
        if self.detail is None:
            return False
        try:
            detail = await self.service.submit_availability(
                self.detail.event.id,
                self.participant_name,
                self.selection.selected,
            )
        except APIError as e:
            self._notify_error(e)
            return False
        self._notify("Availability saved!")
        self.detail = detail
        self.selection.seed(detail.selected)
        return True
