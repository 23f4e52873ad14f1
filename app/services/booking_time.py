"""Booking time shapes.

Bookings come in two shapes: the current one stores slot_time plus a
duration, the legacy one stores start_time and end_time. Both reduce to the
start time of the booking, which is all availability counting needs.
"""
from dataclasses import dataclass
from typing import Optional, Union

from app.core.errors import ValidationError
from app.models.booking import Booking
from app.services.slot_generator import normalize_time_of_day, parse_time_of_day


@dataclass(frozen=True)
class SlotTimeShape:
    """Current shape: slot_time + duration_minutes."""

    slot_time: str
    duration_minutes: Optional[int] = None

    def normalize(self) -> str:
        return normalize_time_of_day(self.slot_time)


@dataclass(frozen=True)
class StartEndShape:
    """Legacy shape: start_time + end_time."""

    start_time: str
    end_time: Optional[str] = None

    def normalize(self) -> str:
        return normalize_time_of_day(self.start_time)


BookingTime = Union[SlotTimeShape, StartEndShape]


def booking_time_of(booking: Booking) -> BookingTime:
    """Pick the time shape a booking row carries. slot_time wins when both are set."""
    if booking.slot_time:
        return SlotTimeShape(booking.slot_time, booking.duration_minutes)
    if booking.start_time:
        return StartEndShape(booking.start_time, booking.end_time)
    raise ValidationError(f"Booking {booking.id} has no start time")


def start_minute(booking: Booking) -> int:
    """Minutes since midnight at which the booking starts."""
    return parse_time_of_day(booking_time_of(booking).normalize())
