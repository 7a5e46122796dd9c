"""
Day availability view for booking and edit-booking forms.

Fetches a room's blocking bookings for a date from the store and runs the
engine over them to produce the start/end pickers.
"""

import logging
from typing import Any, Optional, TypedDict

from dayroom.config import settings
from dayroom.engine.availability import (
    BookingInterval,
    bookings_to_intervals,
    build_end_options,
    build_start_options,
    first_enabled,
)
from dayroom.engine.slots import SlotOption
from dayroom.engine.timepoints import parse_time_to_minutes
from dayroom.tools.booking import list_bookings

logger = logging.getLogger(__name__)


class DayAvailability(TypedDict):
    """Picker state for one room and date."""

    room_id: str
    date: Optional[str]
    booked: list[BookingInterval]
    start_options: list[SlotOption]
    selected_start: Optional[SlotOption]
    end_options: list[SlotOption]
    selected_end: Optional[SlotOption]


def _pick(options: list[SlotOption], value: Optional[str]) -> Optional[SlotOption]:
    """Keep the requested option when selectable, otherwise snap to the first one that is."""
    if value:
        wanted = parse_time_to_minutes(value)
        for option in options:
            if option.minutes == wanted and not option.disabled:
                return option
    return first_enabled(options)


def get_day_availability(
    room_id: Any,
    date: Optional[str],
    start: Optional[str] = None,
    end: Optional[str] = None,
    exclude_id: Any = None,
    min_duration: Optional[int] = None,
) -> DayAvailability:
    """
    Build the start and end pickers for ``room_id`` on ``date``.

    ``exclude_id`` is the booking being edited, so its own slot stays
    selectable. ``start``/``end`` are the current selections; disabled ones
    are replaced by the first selectable option.
    """
    policy = settings.policy
    window = policy.window
    step = policy.time_step_minutes
    min_duration = min_duration or policy.min_booking_minutes
    date_selected = bool(date)

    rows = list_bookings(room_id, date) if date_selected else []
    intervals = bookings_to_intervals(rows, exclude_id=exclude_id)

    start_options = build_start_options(
        window, step, intervals, min_duration=min_duration, date_selected=date_selected
    )
    selected_start = _pick(start_options, start)

    end_options: list[SlotOption] = []
    selected_end = None
    if selected_start is not None:
        end_options = build_end_options(
            window,
            step,
            selected_start.minutes,
            intervals,
            min_duration=min_duration,
            date_selected=date_selected,
        )
        selected_end = _pick(end_options, end)

    logger.debug(
        "Availability for room %s on %s: %d booked, %d/%d starts open",
        room_id, date, len(intervals),
        sum(1 for o in start_options if not o.disabled), len(start_options),
    )
    return {
        "room_id": str(room_id),
        "date": date,
        "booked": intervals,
        "start_options": start_options,
        "selected_start": selected_start,
        "end_options": end_options,
        "selected_end": selected_end,
    }
