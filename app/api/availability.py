"""Availability and calendar endpoints."""
from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_caller
from app.core.database import get_db
from app.core.errors import SlotEngineError, to_http_exception
from app.schemas.auth import CallerIdentity
from app.schemas.availability import AvailabilityResponse, MonthSummary
from app.services.availability_service import availability_service
from app.services.month_summary_service import month_summary_service

router = APIRouter(prefix="/venues/{venue_id}", tags=["availability"])


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    venue_id: str,
    date: date = Query(..., description="Date to compute, YYYY-MM-DD"),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the slot grid for a venue on a date.

    Each slot reports booked courts and whether it is blocked. Clients
    should re-fetch after blocking or unblocking instead of patching the grid
    locally.

    Args:
        venue_id: Venue ID
        date: Date to compute
        caller: Authenticated caller
        db: Database session

    Returns:
        Availability for every generated slot
    """
    try:
        return await availability_service.get_availability(db, venue_id, date)
    except SlotEngineError as e:
        raise to_http_exception(e)


@router.get("/month-summary", response_model=MonthSummary)
async def get_month_summary(
    venue_id: str,
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the days of a month that have blocks or bookings.

    Used to paint calendar dots; no slot-level detail is returned.
    """
    try:
        return await month_summary_service.get_month_summary(db, venue_id, year, month)
    except SlotEngineError as e:
        raise to_http_exception(e)
