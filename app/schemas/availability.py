"""Availability schemas."""
from enum import Enum
from pydantic import BaseModel
from typing import Optional, List
from datetime import date


class SlotState(str, Enum):
    """Display state of a slot, derived on every read."""

    AVAILABLE = "available"
    PARTIAL = "partial"
    FULL = "full"
    BLOCKED = "blocked"


class SlotAvailability(BaseModel):
    """Schema for a single slot in the availability grid."""

    time: str
    booked_courts: int
    is_blocked: bool
    block_reason: Optional[str] = None


class AvailabilityResponse(BaseModel):
    """Schema for a venue's availability on one date."""

    venue_id: str
    date: date
    capacity: int
    slots: List[SlotAvailability]


class MonthSummary(BaseModel):
    """Day-level calendar markers for one month."""

    venue_id: str
    year: int
    month: int
    blocked_dates: List[str]
    booked_dates: List[str]
