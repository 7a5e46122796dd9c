"""Shared test fixtures and helpers."""

from typing import Optional

import pytest

from dayroom.engine.availability import BookingInterval
from dayroom.engine.slots import OperatingWindow
from dayroom.tools import booking as store

DAY = "2025-06-02"
ROOM = "room-1"


@pytest.fixture
def window():
    return OperatingWindow.from_strings("08:00", "17:00")


@pytest.fixture
def morning_booking():
    """10:00-12:00 on the test room."""
    return [BookingInterval(start=600, end=720, id="B1")]


@pytest.fixture(autouse=True)
def clean_store():
    store.reset()
    yield
    store.reset()


def make_row(
    id: str,
    start_time: str,
    end_time: str,
    room_id: str = ROOM,
    booking_date: str = DAY,
    status: Optional[str] = None,
) -> dict:
    """Helper to create a raw booking row as a store would return it."""
    row = {
        "id": id,
        "room_id": room_id,
        "booking_date": booking_date,
        "start_time": start_time,
        "end_time": end_time,
    }
    if status is not None:
        row["status"] = status
    return row


def book(start_time: str, end_time: str, room_id: str = ROOM, booking_date: str = DAY) -> dict:
    """Create a booking through the store and return its result."""
    return store.create_booking(
        {
            "room_id": room_id,
            "booking_date": booking_date,
            "start_time": start_time,
            "end_time": end_time,
        }
    )
