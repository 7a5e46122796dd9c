"""
In-memory bookings store.

Stands in for the hosted database behind the booking forms. Every create
and update re-reads the room's rows and re-runs the overlap check under a
single lock, in the same critical section as the write, so two concurrent
submissions for the same slot cannot both succeed. A database-backed store
would do the same inside one serializable transaction.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Optional, TypedDict, Union

from dayroom.config import settings
from dayroom.engine.availability import bookings_to_intervals
from dayroom.engine.timepoints import parse_time_to_minutes
from dayroom.engine.validation import (
    ValidationResult,
    recheck_before_write,
    validate_booking_request,
)
from dayroom.logging_context import get_request_logger, request_context
from dayroom.schemas.booking_schema import BookingRequest, BookingRow, BookingStatus
from dayroom.tools.lifecycle import (
    BookingLifecycle,
    InvalidTransitionError,
    StatusTrigger,
    filter_blocking_rows,
    is_blocking,
)
from dayroom.utils import billable_hours, calculate_total_price

logger = get_request_logger(__name__)


class BookingResult(TypedDict, total=False):
    """Result from create_booking, update_booking, cancel_booking or advance_status."""

    success: bool
    message: str
    reason: str
    booking_id: str
    request_id: str
    details: dict[str, Any]

_bookings: dict[str, BookingRow] = {}
# Re-entrant: the write sections re-read rows through list_bookings.
_lock = threading.RLock()


def _failure(result: ValidationResult, request_id: str) -> BookingResult:
    return {
        "success": False,
        "message": result.message,
        "reason": result.reason.value,
        "request_id": request_id,
    }


def _not_found(booking_id: str, request_id: Optional[str] = None) -> BookingResult:
    result: BookingResult = {
        "success": False,
        "message": f"Booking {booking_id} not found.",
        "reason": "not_found",
    }
    if request_id:
        result["request_id"] = request_id
    return result


def _not_editable(row: BookingRow, request_id: str) -> BookingResult:
    return {
        "success": False,
        "message": f"Booking {row.id} is {row.status.value} and can no longer be changed.",
        "reason": "invalid_transition",
        "request_id": request_id,
    }


def _rows_for(room_id: Any, booking_date: str) -> list[BookingRow]:
    with _lock:
        snapshot = list(_bookings.values())
    return [
        row
        for row in snapshot
        if str(row.room_id) == str(room_id) and row.booking_date == booking_date
    ]


def _apply_pricing(row_fields: dict[str, Any], start: int, end: int, price_per_hour: Optional[float]) -> None:
    hours = billable_hours(start, end)
    row_fields["billable_hours"] = hours or None
    if price_per_hour and price_per_hour > 0:
        row_fields["price_per_hour"] = price_per_hour
        row_fields["total_price"] = calculate_total_price(hours, price_per_hour) or None


def list_bookings(room_id: Any, booking_date: str, blocking_only: bool = True) -> list[BookingRow]:
    """Rows for one room and date in start order, without rejected/cancelled ones by default."""
    rows = _rows_for(room_id, booking_date)
    if blocking_only:
        rows = filter_blocking_rows(rows)
    return sorted(rows, key=lambda r: parse_time_to_minutes(r.start_time))


def create_booking(
    request: Union[BookingRequest, dict[str, Any]],
    price_per_hour: Optional[float] = None,
    request_id: Optional[str] = None,
) -> BookingResult:
    """Validate, re-check under the store lock and insert a new booking.

    Log lines for the submission carry ``request_id`` (generated when not
    given), which is also returned in the result.
    """
    if isinstance(request, dict):
        request = BookingRequest(**request)

    with request_context(request_id) as rid:
        policy = settings.policy
        booking_date = request.booking_date or ""
        intervals = bookings_to_intervals(list_bookings(request.room_id, booking_date))
        checked = validate_booking_request(
            booking_date,
            request.start_time,
            request.end_time,
            intervals,
            policy.window,
            min_duration=policy.min_booking_minutes,
        )
        if not checked.ok:
            logger.info("[%s] Booking rejected for room %s: %s", rid, request.room_id, checked.reason.value)
            return _failure(checked, rid)

        start, end = checked.value
        with _lock:
            fresh = recheck_before_write(start, end, list_bookings(request.room_id, booking_date))
            if not fresh.ok:
                logger.warning(
                    "[%s] Booking conflict for room %s on %s %s-%s",
                    rid, request.room_id, booking_date, request.start_time, request.end_time,
                )
                return _failure(fresh, rid)

            booking_id = f"{settings.store.booking_ref_prefix}-{uuid.uuid4().hex[:6].upper()}"
            fields = request.model_dump()
            fields.update(
                id=booking_id,
                booking_date=booking_date,
                status=BookingStatus.PAYMENT_PENDING,
                created_at=datetime.now(timezone.utc),
            )
            _apply_pricing(fields, start, end, price_per_hour)
            row = BookingRow(**fields)
            _bookings[booking_id] = row

        logger.info(
            "[%s] Booking created: %s for room %s on %s %s-%s",
            rid, booking_id, row.room_id, row.booking_date, row.start_time, row.end_time,
        )
        return {
            "success": True,
            "booking_id": booking_id,
            "request_id": rid,
            "message": f"Booking {booking_id} created for {row.booking_date} {row.start_time}-{row.end_time}.",
            "details": row.model_dump(),
        }


def update_booking(
    booking_id: str,
    booking_date: Optional[str],
    start_time: str,
    end_time: str,
    price_per_hour: Optional[float] = None,
    request_id: Optional[str] = None,
) -> BookingResult:
    """Move an existing booking, ignoring its own current slot when checking overlap.

    Rejected and cancelled bookings cannot be moved.
    """
    with request_context(request_id) as rid:
        current = _bookings.get(booking_id)
        if current is None:
            return _not_found(booking_id, rid)
        if not is_blocking(current.status):
            logger.info("[%s] Update refused for %s: status %s", rid, booking_id, current.status.value)
            return _not_editable(current, rid)

        policy = settings.policy
        booking_date = booking_date or ""
        intervals = bookings_to_intervals(
            list_bookings(current.room_id, booking_date), exclude_id=booking_id
        )
        checked = validate_booking_request(
            booking_date,
            start_time,
            end_time,
            intervals,
            policy.window,
            min_duration=policy.edit_min_booking_minutes,
        )
        if not checked.ok:
            logger.info("[%s] Update rejected for %s: %s", rid, booking_id, checked.reason.value)
            return _failure(checked, rid)

        start, end = checked.value
        with _lock:
            # The row may have been cancelled or removed since the first read.
            current = _bookings.get(booking_id)
            if current is None:
                return _not_found(booking_id, rid)
            if not is_blocking(current.status):
                logger.info("[%s] Update refused for %s: status %s", rid, booking_id, current.status.value)
                return _not_editable(current, rid)

            fresh = recheck_before_write(
                start, end, list_bookings(current.room_id, booking_date), exclude_id=booking_id
            )
            if not fresh.ok:
                logger.warning(
                    "[%s] Update conflict for %s on %s %s-%s",
                    rid, booking_id, booking_date, start_time, end_time,
                )
                return _failure(fresh, rid)

            fields: dict[str, Any] = {
                "booking_date": booking_date,
                "start_time": start_time,
                "end_time": end_time,
            }
            _apply_pricing(fields, start, end, price_per_hour or current.price_per_hour)
            row = current.model_copy(update=fields)
            _bookings[booking_id] = row

        logger.info("[%s] Booking updated: %s to %s %s-%s", rid, booking_id, booking_date, start_time, end_time)
        return {
            "success": True,
            "booking_id": booking_id,
            "request_id": rid,
            "message": f"Booking {booking_id} moved to {booking_date} {start_time}-{end_time}.",
            "details": row.model_dump(),
        }


def advance_status(booking_id: str, trigger: StatusTrigger) -> BookingResult:
    """Apply a lifecycle trigger (payment confirmed, approve, reject, cancel)."""
    with _lock:
        current = _bookings.get(booking_id)
        if current is None:
            return _not_found(booking_id)
        lifecycle = BookingLifecycle(current.status)
        try:
            status = lifecycle.transition(trigger)
        except InvalidTransitionError as exc:
            return {"success": False, "message": str(exc), "reason": "invalid_transition"}
        row = current.model_copy(update={"status": status})
        _bookings[booking_id] = row

    logger.info("Booking %s is now %s", booking_id, status.value)
    return {
        "success": True,
        "booking_id": booking_id,
        "message": f"Booking {booking_id} is now {status.value}.",
        "details": row.model_dump(),
    }


def cancel_booking(booking_id: str) -> BookingResult:
    """Cancel a booking, freeing its slot."""
    return advance_status(booking_id, StatusTrigger.CANCEL)


def get_booking(booking_id: str) -> Optional[BookingRow]:
    """Retrieve a booking by id."""
    return _bookings.get(booking_id)


def reset() -> None:
    """Clear all bookings. Used by test fixtures for isolation."""
    with _lock:
        _bookings.clear()
