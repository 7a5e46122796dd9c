"""Booking row and request data models."""

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class BookingStatus(str, Enum):
    """Lifecycle status of a stored booking."""

    PAYMENT_PENDING = "payment_pending"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class BookingRow(BaseModel):
    """A reservation record as returned by the bookings store."""

    model_config = ConfigDict(extra="ignore")

    id: Union[int, str]
    room_id: Union[int, str]
    booking_date: str
    start_time: str
    end_time: str
    status: BookingStatus = BookingStatus.PENDING
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    user_full_name: Optional[str] = None
    user_phone: Optional[str] = None
    price_per_hour: Optional[float] = None
    billable_hours: Optional[float] = None
    total_price: Optional[float] = None
    created_at: Optional[datetime] = None


class BookingRequest(BaseModel):
    """A guest's requested booking, before validation."""
    room_id: Union[int, str]
    booking_date: Optional[str] = None
    start_time: str
    end_time: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    user_full_name: Optional[str] = None
    user_phone: Optional[str] = None
