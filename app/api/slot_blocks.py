"""Slot block endpoints."""
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_caller
from app.core.database import get_db
from app.core.errors import SlotEngineError, to_http_exception
from app.schemas.auth import CallerIdentity
from app.schemas.slot_block import (
    BlockRequest,
    BlockResponse,
    SlotBlockPage,
    SlotRef,
    UnblockResponse,
)
from app.services.slot_block_service import slot_block_service

router = APIRouter(prefix="/venues/{venue_id}/blocks", tags=["slot-blocks"])


@router.get("", response_model=SlotBlockPage)
async def list_slot_blocks(
    venue_id: str,
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=5000),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    List a venue's blocks, latest slot first.

    Blocks whose time falls outside the venue's current hours are listed too.
    """
    try:
        return await slot_block_service.list_slot_blocks(
            db, venue_id, date_from, date_to, page, limit
        )
    except SlotEngineError as e:
        raise to_http_exception(e)


@router.post("", response_model=BlockResponse)
async def create_blocks(
    venue_id: str,
    request: BlockRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Block one slot, several slots, or the whole day.

    Blocking is idempotent: already-blocked slots come back without being
    re-created and do not count toward blocks_created. For several slots or a
    full day, slots that could not be written are listed under failed while
    the others stay blocked.

    Args:
        venue_id: Venue ID
        request: Date plus exactly one of time, times or full_day
        caller: Authenticated caller
        db: Database session

    Returns:
        The resulting blocks, how many were new, and any failures
    """
    try:
        if request.time is not None:
            block, created = await slot_block_service.block_slot_with_status(
                db, caller, venue_id, request.date, request.time, request.reason
            )
            return BlockResponse(blocks=[block], blocks_created=int(created))

        if request.full_day:
            result = await slot_block_service.block_full_day(
                db, caller, venue_id, request.date, request.reason
            )
        else:
            refs = [
                SlotRef(venue_id=venue_id, slot_date=request.date, slot_time=t, reason=request.reason)
                for t in request.times
            ]
            result = await slot_block_service.block_multiple_slots(db, caller, refs)

    except SlotEngineError as e:
        raise to_http_exception(e)

    return BlockResponse(
        blocks=result.blocks,
        blocks_created=result.blocks_created,
        failed=result.failed,
    )


@router.delete("", response_model=UnblockResponse)
async def delete_blocks(
    venue_id: str,
    date: date = Query(...),
    time: Optional[str] = Query(default=None, description="Slot time, HH:MM"),
    full_day: bool = Query(default=False),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_db),
):
    """
    Unblock one slot, or every slot of the day with full_day=true.

    Unblocking a slot that is not blocked succeeds.
    """
    if (time is None) == (not full_day):
        raise HTTPException(status_code=422, detail="Provide either 'time' or 'full_day=true'")

    try:
        if full_day:
            removed = await slot_block_service.unblock_full_day(db, caller, venue_id, date)
            return UnblockResponse(success=True, blocks_removed=removed)

        success = await slot_block_service.unblock_slot(db, caller, venue_id, date, time)
        return UnblockResponse(success=success)
    except SlotEngineError as e:
        raise to_http_exception(e)
