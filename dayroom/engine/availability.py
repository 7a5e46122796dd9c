"""
Overlap detection and disabled-slot computation for a room's day.

All ranges are half-open ``[start, end)``: a booking ending at 10:00 and
another starting at 10:00 do not overlap, so back-to-back bookings are
allowed.

The supplied bookings are assumed to be scoped to one room and date and
already filtered by status. Nothing here filters by status.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from dayroom.engine.slots import (
    DEFAULT_STEP_MINUTES,
    OperatingWindow,
    SlotOption,
    build_time_options,
    end_candidates,
    normalize_step,
    start_candidates,
)
from dayroom.engine.timepoints import parse_time_to_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingInterval:
    """A confirmed reservation's span on one room and date."""

    start: int
    end: int
    id: Any = None


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def _same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def ranges_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """True when two half-open ranges share at least one minute."""
    return a_start < b_end and b_start < a_end


def booking_row_to_interval(row: Any) -> Optional[BookingInterval]:
    """Map a booking row (dict, model or object) to an interval; None if unusable."""
    if row is None:
        return None
    start = parse_time_to_minutes(_field(row, "start_time"))
    end = parse_time_to_minutes(_field(row, "end_time"))
    if end <= start:
        return None
    return BookingInterval(start=start, end=end, id=_field(row, "id"))


def bookings_to_intervals(rows: Any, exclude_id: Any = None) -> list[BookingInterval]:
    """
    Convert fetched booking rows to intervals.

    Drops malformed rows (end <= start) and the row whose id matches
    ``exclude_id`` so an edited booking never conflicts with itself.
    """
    if rows is None or isinstance(rows, (str, bytes, dict)):
        return []
    try:
        items = list(rows)
    except TypeError:
        return []

    intervals = []
    for row in items:
        interval = booking_row_to_interval(row)
        if interval is None:
            continue
        if _same_id(interval.id, exclude_id):
            continue
        intervals.append(interval)
    return intervals


def range_overlaps_any(start: int, end: int, intervals: Optional[Iterable[BookingInterval]]) -> bool:
    """Accept/reject check for a candidate range against a room's bookings."""
    return any(ranges_overlap(start, end, it.start, it.end) for it in intervals or ())


def get_disabled_time_slots(
    intervals: Iterable[BookingInterval],
    exclude_id: Any = None,
    step_minutes: Any = DEFAULT_STEP_MINUTES,
) -> set[int]:
    """
    Step-aligned time points covered by existing bookings.

    Points are aligned to a grid anchored at midnight; every point in
    ``[interval.start, interval.end)`` on that grid is disabled.
    """
    step = normalize_step(step_minutes)
    disabled: set[int] = set()
    for it in intervals or ():
        if _same_id(it.id, exclude_id):
            continue
        first = -(-it.start // step) * step
        disabled.update(range(first, it.end, step))
    return disabled


def compute_end_options_disabled(
    start: int,
    candidate_ends: Iterable[SlotOption],
    disabled_slots: set[int],
    step_minutes: Any = DEFAULT_STEP_MINUTES,
) -> list[SlotOption]:
    """Disable each end whose range from ``start`` passes through a booked slot."""
    step = normalize_step(step_minutes)
    result = []
    for option in candidate_ends:
        blocked = any(m in disabled_slots for m in range(start, option.minutes, step))
        result.append(option.with_disabled(blocked))
    return result


def start_has_any_valid_end(
    start: int,
    min_end: int,
    max_end: int,
    step_minutes: Any,
    intervals: Iterable[BookingInterval],
) -> bool:
    """True as soon as one end in ``[max(min_end, start + step), max_end]`` is free."""
    step = normalize_step(step_minutes)
    intervals = list(intervals or ())
    first_end = max(min_end, start + step)
    for end in range(first_end, max_end + 1, step):
        if not range_overlaps_any(start, end, intervals):
            return True
    return False


def build_start_options(
    window: OperatingWindow,
    step_minutes: Any,
    intervals: Iterable[BookingInterval],
    min_duration: Optional[int] = None,
    date_selected: bool = True,
) -> list[SlotOption]:
    """
    Start picker for one room and date.

    A start is disabled when no end after it is bookable. With no date
    selected every option is disabled.
    """
    step = normalize_step(step_minutes)
    min_duration = min_duration or step
    intervals = list(intervals or ())
    options = build_time_options(window.policy_start, window.policy_end, step)
    candidates = start_candidates(options, window, step)
    if not date_selected:
        return [o.with_disabled(True) for o in candidates]

    return [
        o.with_disabled(
            not start_has_any_valid_end(
                o.minutes, o.minutes + min_duration, window.policy_end, step, intervals
            )
        )
        for o in candidates
    ]


def build_end_options(
    window: OperatingWindow,
    step_minutes: Any,
    start: int,
    intervals: Iterable[BookingInterval],
    min_duration: Optional[int] = None,
    date_selected: bool = True,
) -> list[SlotOption]:
    """End picker for a chosen start; ends that would overlap a booking are disabled."""
    step = normalize_step(step_minutes)
    min_duration = min_duration or step
    intervals = list(intervals or ())
    options = build_time_options(window.policy_start, window.policy_end, step)
    candidates = end_candidates(options, start, window, min_duration)
    if not date_selected:
        return [o.with_disabled(True) for o in candidates]

    return [o.with_disabled(range_overlaps_any(start, o.minutes, intervals)) for o in candidates]


def first_enabled(options: Iterable[SlotOption]) -> Optional[SlotOption]:
    """First selectable option, used to snap a disabled selection."""
    return next((o for o in options if not o.disabled), None)


def filter_rooms_by_bookings(
    rooms: Any,
    bookings: Any,
    start_time: Any,
    end_time: Any,
) -> list:
    """Keep the rooms that have no booking overlapping ``[start_time, end_time)``."""
    if not rooms:
        return []
    rooms = list(rooms)
    if not bookings:
        return rooms

    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)

    by_room: dict[str, list[Any]] = {}
    for booking in bookings:
        room_id = _field(booking, "room_id")
        if not room_id:
            continue
        by_room.setdefault(str(room_id), []).append(booking)

    available = []
    for room in rooms:
        room_bookings = by_room.get(str(_field(room, "id")), [])
        busy = any(
            ranges_overlap(
                start,
                end,
                parse_time_to_minutes(_field(b, "start_time")),
                parse_time_to_minutes(_field(b, "end_time")),
            )
            for b in room_bookings
        )
        if not busy:
            available.append(room)

    logger.debug("%d of %d rooms free for %s-%s", len(available), len(rooms), start_time, end_time)
    return available
