"""Half-hour slot generation for a poll's date range and daily window.

For every calendar day from ``start_date`` to ``end_date`` (inclusive) the
generator walks whole hours from the start hour up to, but excluding, the end
hour and emits the ``:00`` and ``:30`` points of each hour. A partial final
hour (``end_time="10:45"``) is dropped rather than rounded.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Final

SLOT_MINUTES: Final[tuple[int, ...]] = (0, 30)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^(?:[01]?\d|2[0-3]):[0-5]\d$")


def parse_date(value: date | str | None) -> date | None:
    """Parse ``YYYY-MM-DD``; ``None`` when missing or unparsable."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not DATE_RE.match(value.strip()):
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        return None


def parse_clock(value: time | str | None) -> time | None:
    """Parse ``HH:MM`` (24-hour); ``None`` when missing or unparsable."""
    if isinstance(value, time):
        return value
    if not value or not TIME_RE.match(value.strip()):
        return None
    hour, minute = value.strip().split(":")
    return time(int(hour), int(minute))


def _daily_points(opens: time, closes: time) -> list[time]:
    return [
        time(hour, minute)
        for hour in range(opens.hour, closes.hour)
        for minute in SLOT_MINUTES
        if time(hour, minute) >= opens
    ]


def count_slot_times(
    start_date: date | str | None,
    end_date: date | str | None,
    start_time: time | str | None,
    end_time: time | str | None,
) -> int:
    """Number of timestamps ``generate_slot_times`` would return, without building them."""
    first_day = parse_date(start_date)
    last_day = parse_date(end_date)
    opens = parse_clock(start_time)
    closes = parse_clock(end_time)
    if first_day is None or last_day is None or opens is None or closes is None:
        return 0
    if first_day > last_day:
        return 0
    return ((last_day - first_day).days + 1) * len(_daily_points(opens, closes))


def generate_slot_times(
    start_date: date | str | None,
    end_date: date | str | None,
    start_time: time | str | None,
    end_time: time | str | None,
) -> list[datetime]:
    """Expand a date range and daily window into ordered slot timestamps.

    Returns an empty list when an input is missing or unparsable, or when
    ``start_date`` falls after ``end_date``.
    """
    first_day = parse_date(start_date)
    last_day = parse_date(end_date)
    opens = parse_clock(start_time)
    closes = parse_clock(end_time)
    if first_day is None or last_day is None or opens is None or closes is None:
        return []
    if first_day > last_day:
        return []

    points = _daily_points(opens, closes)
    slots: list[datetime] = []
    day = first_day
    while day <= last_day:
        slots.extend(datetime.combine(day, point) for point in points)
        day += timedelta(days=1)
    return slots