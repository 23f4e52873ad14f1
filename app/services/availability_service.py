"""Availability service: per-slot booking counts and block flags for one date."""
import logging
from collections import Counter
from datetime import date
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import NotFound, ValidationError
from app.models.booking import Booking
from app.models.venue import Venue
from app.schemas.availability import AvailabilityResponse, SlotAvailability, SlotState
from app.services.booking_time import start_minute
from app.services.slot_generator import generate_slots, slot_containing
from app.services.slot_store import SlotStore, slot_store, storage_errors

logger = logging.getLogger(__name__)


def venue_hours(venue: Venue) -> Tuple[str, str, int]:
    """Opening time, closing time and granularity for a venue, with defaults applied."""
    return (
        venue.opening_time or settings.DEFAULT_OPENING_TIME,
        venue.closing_time or settings.DEFAULT_CLOSING_TIME,
        venue.slot_duration_minutes or settings.SLOT_GRANULARITY_MINUTES,
    )


def venue_slots(venue: Venue) -> Tuple[str, ...]:
    """
    Generated slot start times for a venue.

    Hours are stored venue config, so unreadable values give an empty day
    instead of an error.
    """
    try:
        return generate_slots(*venue_hours(venue))
    except ValidationError as e:
        logger.warning(f"Venue {venue.id} has unusable opening hours: {e}")
        return ()


def count_booked_courts(
    bookings: Iterable[Booking], opening_time: str, granularity_minutes: int
) -> Dict[str, int]:
    """
    Fold bookings into a slot time -> booked courts mapping.

    Each booking counts once, in the slot holding its start time, even when
    its duration covers later slots. Bookings without a readable start time
    are skipped so that one bad row cannot break the grid.
    """
    counts: Counter = Counter()
    for booking in bookings:
        try:
            minute = start_minute(booking)
        except ValidationError as e:
            logger.warning(f"Skipping booking {booking.id}: {e}")
            continue
        key = slot_containing(minute, opening_time, granularity_minutes)
        counts[key] += booking.court_count or 1
    return dict(counts)


def derive_slot_state(slot: SlotAvailability, capacity: int) -> SlotState:
    """Display state of a slot. A block wins over any booking count."""
    if slot.is_blocked:
        return SlotState.BLOCKED
    if slot.booked_courts >= capacity:
        return SlotState.FULL
    if slot.booked_courts > 0:
        return SlotState.PARTIAL
    return SlotState.AVAILABLE


class AvailabilityService:
    """Service computing slot availability for the admin grid."""

    def __init__(self, store: SlotStore = slot_store):
        self.store = store

    async def get_active_venue(self, db: AsyncSession, venue_id: str) -> Venue:
        """
        Fetch a venue that is open for business.

        Raises:
            NotFound: Venue missing or inactive
        """
        async with storage_errors(db, f"Loading venue {venue_id}"):
            venue = await self.store.get_venue(db, venue_id)

        if not venue.is_active:
            raise NotFound(f"Venue {venue_id} is not active")
        return venue

    async def get_availability(
        self, db: AsyncSession, venue_id: str, slot_date: date
    ) -> AvailabilityResponse:
        """
        Compute the slot grid for a venue on a date.

        Args:
            db: Database session
            venue_id: Venue ID
            slot_date: Date to compute

        Returns:
            One entry per generated slot, in time order

        Raises:
            NotFound: Venue missing or inactive
            StorageError: Store failure
        """
        venue = await self.get_active_venue(db, venue_id)
        opening, _, granularity = venue_hours(venue)
        capacity = venue.courts_count
        slots = venue_slots(venue)

        async with storage_errors(db, f"Loading bookings and blocks for {venue_id} on {slot_date}"):
            bookings = await self.store.list_bookings(db, venue_id, slot_date)
            blocks = await self.store.list_slot_blocks(db, venue_id, slot_date)

        booked = count_booked_courts(bookings, opening, granularity) if slots else {}
        blocked = {block.slot_time: block for block in blocks}

        # Blocks outside current hours have no slot to land in
        orphans = set(blocked) - set(slots)
        if orphans:
            logger.debug(f"Venue {venue_id} on {slot_date} has blocks outside opening hours: {sorted(orphans)}")

        grid: List[SlotAvailability] = []
        for time in slots:
            block = blocked.get(time)
            grid.append(
                SlotAvailability(
                    time=time,
                    booked_courts=booked.get(time, 0),
                    is_blocked=block is not None,
                    block_reason=block.reason if block else None,
                )
            )

        return AvailabilityResponse(
            venue_id=venue_id,
            date=slot_date,
            capacity=capacity,
            slots=grid,
        )


# Singleton instance
availability_service = AvailabilityService()
