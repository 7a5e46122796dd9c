"""
Booking status lifecycle and the status filter applied when fetching rows.

    payment_pending --payment_confirmed--> pending
    pending --approve--> approved
    pending --reject--> rejected
    payment_pending | pending | approved --cancel--> cancelled

Rejected and cancelled bookings free their slot: they are dropped at the
fetch boundary before intervals are built, never inside the engine.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Optional

from dayroom.config import settings
from dayroom.schemas.booking_schema import BookingStatus

logger = logging.getLogger(__name__)


class StatusTrigger(str, Enum):
    """Events that move a booking between statuses."""
    PAYMENT_CONFIRMED = "payment_confirmed"
    APPROVE = "approve"
    REJECT = "reject"
    CANCEL = "cancel"


@dataclass
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: StatusTrigger


@dataclass
class StatusEntry:
    """Recorded history entry for a status change."""
    status: BookingStatus
    entered_at: datetime
    trigger: Optional[StatusTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current status."""


class BookingLifecycle:
    """Finite state machine over a single booking's status."""

    TRANSITIONS: list[Transition] = [
        Transition(BookingStatus.PAYMENT_PENDING, BookingStatus.PENDING,
                   StatusTrigger.PAYMENT_CONFIRMED),
        Transition(BookingStatus.PENDING, BookingStatus.APPROVED, StatusTrigger.APPROVE),
        Transition(BookingStatus.PENDING, BookingStatus.REJECTED, StatusTrigger.REJECT),

        # --- Cancellation ---
        Transition(BookingStatus.PAYMENT_PENDING, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
        Transition(BookingStatus.PENDING, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
        Transition(BookingStatus.APPROVED, BookingStatus.CANCELLED, StatusTrigger.CANCEL),
    ]

    TERMINAL = frozenset({BookingStatus.REJECTED, BookingStatus.CANCELLED})

    def __init__(self, status: BookingStatus = BookingStatus.PAYMENT_PENDING) -> None:
        self._status = BookingStatus(status)
        self._history: list[StatusEntry] = [
            StatusEntry(status=self._status, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def status(self) -> BookingStatus:
        return self._status

    def transition(self, trigger: StatusTrigger) -> BookingStatus:
        """
        Apply a trigger to the current status.

        Raises:
            InvalidTransitionError: If no transition matches.
        """
        for t in self.TRANSITIONS:
            if t.from_status == self._status and t.trigger == trigger:
                old_status = self._status
                self._status = t.to_status
                self._history.append(StatusEntry(
                    status=self._status,
                    entered_at=datetime.now(timezone.utc),
                    trigger=t.trigger,
                ))
                logger.debug(
                    "Booking status: %s -> %s (trigger: %s)",
                    old_status.value, self._status.value, t.trigger.value,
                )
                return self._status

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"Cannot '{getattr(trigger, 'value', trigger)}' a booking that is "
            f"'{self._status.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[StatusTrigger]:
        return [t.trigger for t in self.TRANSITIONS if t.from_status == self._status]

    def get_history(self) -> list[StatusEntry]:
        return list(self._history)

    def is_terminal(self) -> bool:
        return self._status in self.TERMINAL


def _status_of(row: Any) -> Any:
    if isinstance(row, dict):
        return row.get("status")
    return getattr(row, "status", None)


def is_blocking(status: Any, non_blocking: Optional[Iterable[str]] = None) -> bool:
    """True when a booking in ``status`` still occupies its slot."""
    if non_blocking is None:
        non_blocking = settings.store.non_blocking_statuses
    if status is None:
        return True
    value = status.value if isinstance(status, Enum) else str(status)
    return value.lower() not in {s.lower() for s in non_blocking}


def filter_blocking_rows(rows: Iterable[Any], non_blocking: Optional[Iterable[str]] = None) -> list:
    """Drop rows whose status frees the slot (rejected, cancelled by default)."""
    if non_blocking is not None:
        non_blocking = list(non_blocking)
    return [row for row in rows or () if is_blocking(_status_of(row), non_blocking)]
