"""
Submission-boundary checks for booking creates and updates.

Returns tagged results instead of raising, so forms can show the message
and write paths can tell a write-time conflict apart from ordinary
validation failures:

    result = validate_booking_request(date, "09:00", "10:00", intervals, window)
    if not result.ok:
        show(result.message)

    # inside the write transaction, against freshly read rows
    result = recheck_before_write(start, end, fresh_rows, exclude_id=booking_id)
    if result.is_conflict:
        ...  # ask the user to pick another slot
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from dayroom.engine.availability import (
    BookingInterval,
    bookings_to_intervals,
    range_overlaps_any,
)
from dayroom.engine.slots import OperatingWindow
from dayroom.engine.timepoints import minutes_to_label, parse_time_to_minutes

logger = logging.getLogger(__name__)


class ValidationReason(str, Enum):
    """Why a candidate booking was rejected."""

    MISSING_DATE = "missing_date"
    START_OUT_OF_HOURS = "start_out_of_hours"
    END_OUT_OF_HOURS = "end_out_of_hours"
    END_NOT_AFTER_START = "end_not_after_start"
    BELOW_MIN_DURATION = "below_min_duration"
    OVERLAP = "overlap"
    CONFLICT = "conflict"


class BookingValidationError(Exception):
    """A booking request failed validation."""

    def __init__(self, result: "ValidationResult") -> None:
        super().__init__(result.message)
        self.result = result


class BookingConflictError(BookingValidationError):
    """The slot was taken between rendering the form and writing the booking."""


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    value: Optional[tuple[int, int]] = None
    reason: Optional[ValidationReason] = None
    message: str = ""

    @classmethod
    def accept(cls, start: int, end: int) -> "ValidationResult":
        return cls(ok=True, value=(start, end))

    @classmethod
    def reject(cls, reason: ValidationReason, message: str) -> "ValidationResult":
        return cls(ok=False, reason=reason, message=message)

    @property
    def is_conflict(self) -> bool:
        return self.reason == ValidationReason.CONFLICT

    def raise_for_reason(self) -> None:
        """Raise BookingConflictError / BookingValidationError when rejected."""
        if self.ok:
            return
        if self.is_conflict:
            raise BookingConflictError(self)
        raise BookingValidationError(self)


def _duration_text(minutes: int) -> str:
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    return f"{minutes} minutes"


def validate_booking_request(
    booking_date: Optional[str],
    start_time: Any,
    end_time: Any,
    intervals: Iterable[BookingInterval],
    window: OperatingWindow,
    min_duration: Optional[int] = None,
) -> ValidationResult:
    """Form-level validation for a candidate booking on one room and date."""
    if not booking_date or not str(booking_date).strip():
        return ValidationResult.reject(ValidationReason.MISSING_DATE, "Please select a date.")

    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)
    hours = f"{minutes_to_label(window.policy_start)} and {minutes_to_label(window.policy_end)}"

    if not window.contains_start(start):
        return ValidationResult.reject(
            ValidationReason.START_OUT_OF_HOURS, f"Start time must be between {hours}."
        )
    if not window.contains_end(end):
        return ValidationResult.reject(
            ValidationReason.END_OUT_OF_HOURS, f"End time must be between {hours}."
        )
    if end <= start:
        return ValidationResult.reject(
            ValidationReason.END_NOT_AFTER_START, "End time must be after start time."
        )
    if min_duration and end - start < min_duration:
        return ValidationResult.reject(
            ValidationReason.BELOW_MIN_DURATION,
            f"Bookings must be at least {_duration_text(min_duration)}.",
        )
    if range_overlaps_any(start, end, intervals):
        return ValidationResult.reject(
            ValidationReason.OVERLAP,
            "That time range is already booked. Please select a different time window.",
        )
    return ValidationResult.accept(start, end)


def recheck_before_write(
    start: int,
    end: int,
    fresh_rows: Any,
    exclude_id: Any = None,
) -> ValidationResult:
    """
    Authoritative overlap check against rows re-read inside the write transaction.

    Must run in the same transaction (or under the same lock) as the insert
    or update it guards.
    """
    intervals = bookings_to_intervals(fresh_rows, exclude_id=exclude_id)
    if range_overlaps_any(start, end, intervals):
        logger.warning(
            "Write-time conflict for %d-%d against %d existing bookings", start, end, len(intervals)
        )
        return ValidationResult.reject(
            ValidationReason.CONFLICT,
            "That time range was just booked. Please pick another time window.",
        )
    return ValidationResult.accept(start, end)
