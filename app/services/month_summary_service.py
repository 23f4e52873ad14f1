"""Month summary: which days of a month carry blocks or bookings."""
import calendar
import logging
from datetime import date
from typing import Set, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError
from app.schemas.availability import MonthSummary
from app.services.slot_store import SlotStore, slot_store, storage_errors

logger = logging.getLogger(__name__)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


class MonthSummaryService:
    """Day-level markers for the calendar view."""

    def __init__(self, store: SlotStore = slot_store):
        self.store = store

    async def _ensure_venue(self, db: AsyncSession, venue_id: str):
        async with storage_errors(db, f"Loading venue {venue_id}"):
            await self.store.get_venue(db, venue_id)

    async def get_blocked_dates_in_month(
        self, db: AsyncSession, venue_id: str, year: int, month: int
    ) -> Set[str]:
        """ISO dates of the month with at least one block, orphaned blocks included."""
        first_day, last_day = month_bounds(year, month)
        await self._ensure_venue(db, venue_id)
        async with storage_errors(db, f"Loading blocked dates for {venue_id} {year}-{month:02d}"):
            dates = await self.store.blocked_dates_between(db, venue_id, first_day, last_day)
        return {d.isoformat() for d in dates}

    async def get_booked_dates_in_month(
        self, db: AsyncSession, venue_id: str, year: int, month: int
    ) -> Set[str]:
        """ISO dates of the month with at least one booking that is not cancelled or refunded."""
        first_day, last_day = month_bounds(year, month)
        await self._ensure_venue(db, venue_id)
        async with storage_errors(db, f"Loading booked dates for {venue_id} {year}-{month:02d}"):
            dates = await self.store.booked_dates_between(db, venue_id, first_day, last_day)
        return {d.isoformat() for d in dates}

    async def get_month_summary(
        self, db: AsyncSession, venue_id: str, year: int, month: int
    ) -> MonthSummary:
        blocked = await self.get_blocked_dates_in_month(db, venue_id, year, month)
        booked = await self.get_booked_dates_in_month(db, venue_id, year, month)
        return MonthSummary(
            venue_id=venue_id,
            year=year,
            month=month,
            blocked_dates=sorted(blocked),
            booked_dates=sorted(booked),
        )


# Singleton instance
month_summary_service = MonthSummaryService()
