"""Block/unblock service.

Every mutation authorizes the caller first, validates every requested slot
against the venue's generated slots, and only then writes. Each slot is
committed on its own, so a batch that fails halfway reports exactly which
slots made it.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import SlotFullyBooked, StorageError, ValidationError
from app.models.venue import Venue
from app.schemas.auth import CallerIdentity
from app.schemas.slot_block import (
    BatchBlockResult,
    BlockItemResult,
    SlotBlockInDB,
    SlotBlockPage,
    SlotRef,
)
from app.services.availability_service import count_booked_courts, venue_hours, venue_slots
from app.services.permissions import ensure_can_manage_venue
from app.services.slot_generator import normalize_time_of_day
from app.services.slot_store import SlotStore, slot_store, storage_errors

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PlannedBlock:
    """A validated slot waiting to be written."""

    venue_id: str
    slot_date: date
    slot_time: str
    reason: Optional[str]
    rejection: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "venue_id": self.venue_id,
            "slot_date": self.slot_date.isoformat(),
            "slot_time": self.slot_time,
        }


class SlotBlockService:
    """Service for creating and removing slot blocks."""

    def __init__(self, store: SlotStore = slot_store):
        self.store = store

    async def _load_managed_venue(
        self, db: AsyncSession, caller: CallerIdentity, venue_id: str
    ) -> Venue:
        async with storage_errors(db, f"Loading venue {venue_id}"):
            venue = await self.store.get_venue(db, venue_id)
        ensure_can_manage_venue(caller, venue)
        return venue

    def _validate_slot_time(self, venue: Venue, slot_time: str) -> str:
        time = normalize_time_of_day(slot_time)
        if time not in venue_slots(venue):
            opening, closing, granularity = venue_hours(venue)
            raise ValidationError(
                f"{time} is not a slot of venue {venue.id} "
                f"({opening}-{closing} every {granularity} minutes)"
            )
        return time

    async def _full_slots(
        self, db: AsyncSession, venue: Venue, slot_date: date
    ) -> Dict[str, int]:
        """Booked courts of every slot at or over capacity. Empty when blocking full slots is allowed."""
        if settings.ALLOW_BLOCK_WHEN_FULL or not venue_slots(venue):
            return {}

        opening, _, granularity = venue_hours(venue)
        async with storage_errors(db, f"Loading bookings for {venue.id} on {slot_date}"):
            bookings = await self.store.list_bookings(db, venue.id, slot_date)
        counts = count_booked_courts(bookings, opening, granularity)
        return {time: booked for time, booked in counts.items() if booked >= venue.courts_count}

    async def _write_block(
        self, db: AsyncSession, caller: CallerIdentity, planned: _PlannedBlock
    ) -> Tuple[SlotBlockInDB, bool]:
        """Insert or refresh one block and commit it."""
        async with storage_errors(
            db, f"Blocking {planned.slot_time} on {planned.slot_date}", slot=planned.as_dict()
        ):
            block, created = await self.store.insert_slot_block(
                db,
                planned.venue_id,
                planned.slot_date,
                planned.slot_time,
                reason=planned.reason or settings.DEFAULT_BLOCK_REASON,
                created_by=caller.user_id,
                update_reason=planned.reason is not None,
            )
            await db.commit()
            result = SlotBlockInDB.model_validate(block)

        return result, created

    async def _write_planned(
        self, db: AsyncSession, caller: CallerIdentity, plan: Sequence[_PlannedBlock]
    ) -> BatchBlockResult:
        items: List[BlockItemResult] = []

        for planned in plan:
            item = BlockItemResult(
                venue_id=planned.venue_id,
                slot_date=planned.slot_date,
                slot_time=planned.slot_time,
                status="failed",
            )

            if planned.rejection:
                item.error = planned.rejection
                items.append(item)
                continue

            try:
                block, created = await self._write_block(db, caller, planned)
            except StorageError as e:
                item.error = e.message
            else:
                item.block = block
                item.status = "created" if created else "already_blocked"
            items.append(item)

        result = BatchBlockResult(items=items)
        logger.info(
            f"User {caller.user_id} blocked {len(plan)} slot(s): "
            f"{result.blocks_created} created, {len(result.failed)} failed"
        )
        return result

    async def block_slot(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        venue_id: str,
        slot_date: date,
        slot_time: str,
        reason: Optional[str] = None,
    ) -> SlotBlockInDB:
        """
        Block one slot. Blocking an already-blocked slot returns the existing block.

        Existing bookings are never touched. Whether a fully booked slot may
        be blocked follows ALLOW_BLOCK_WHEN_FULL.

        Raises:
            NotFound: Venue missing
            Forbidden: Caller may not manage the venue
            ValidationError: Time is not one of the venue's slots
            SlotFullyBooked: Slot is full and blocking full slots is disabled
            StorageError: Store failure
        """
        block, _ = await self.block_slot_with_status(db, caller, venue_id, slot_date, slot_time, reason)
        return block

    async def block_slot_with_status(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        venue_id: str,
        slot_date: date,
        slot_time: str,
        reason: Optional[str] = None,
    ) -> Tuple[SlotBlockInDB, bool]:
        """Same as block_slot, also telling whether the block is new."""
        venue = await self._load_managed_venue(db, caller, venue_id)
        time = self._validate_slot_time(venue, slot_time)

        full = await self._full_slots(db, venue, slot_date)
        if time in full:
            raise SlotFullyBooked(f"{time} on {slot_date} is fully booked ({full[time]} courts)")

        block, created = await self._write_block(
            db, caller, _PlannedBlock(venue_id, slot_date, time, reason)
        )
        logger.info(
            f"User {caller.user_id} blocked venue {venue_id} {slot_date} {time}"
            + ("" if created else " (already blocked)")
        )
        return block, created

    async def block_multiple_slots(
        self, db: AsyncSession, caller: CallerIdentity, slots: Sequence[SlotRef]
    ) -> BatchBlockResult:
        """
        Block several slots, possibly across venues and dates.

        Authorization and validation cover the whole batch before the first
        write. Writes are independent: a failed slot does not undo the others,
        and the result says which ones failed.

        Raises:
            NotFound: A venue is missing
            Forbidden: Caller may not manage one of the venues
            ValidationError: One of the times is not a slot of its venue
        """
        venues: Dict[str, Venue] = {}
        full_by_day: Dict[Tuple[str, date], Dict[str, int]] = {}
        plan: List[_PlannedBlock] = []

        for ref in slots:
            venue = venues.get(ref.venue_id)
            if venue is None:
                venue = await self._load_managed_venue(db, caller, ref.venue_id)
                venues[ref.venue_id] = venue

            time = self._validate_slot_time(venue, ref.slot_time)

            day = (ref.venue_id, ref.slot_date)
            if day not in full_by_day:
                full_by_day[day] = await self._full_slots(db, venue, ref.slot_date)

            rejection = None
            if time in full_by_day[day]:
                rejection = f"{time} on {ref.slot_date} is fully booked"
            plan.append(_PlannedBlock(ref.venue_id, ref.slot_date, time, ref.reason, rejection))

        return await self._write_planned(db, caller, plan)

    async def block_full_day(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        venue_id: str,
        slot_date: date,
        reason: Optional[str] = None,
    ) -> BatchBlockResult:
        """
        Block every slot of a venue's day.

        Slots that were already blocked come back as already_blocked and do
        not count toward blocks_created.
        """
        venue = await self._load_managed_venue(db, caller, venue_id)
        slots = venue_slots(venue)
        full = await self._full_slots(db, venue, slot_date)

        plan = [
            _PlannedBlock(
                venue_id,
                slot_date,
                time,
                reason,
                f"{time} on {slot_date} is fully booked" if time in full else None,
            )
            for time in slots
        ]
        return await self._write_planned(db, caller, plan)

    async def unblock_slot(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        venue_id: str,
        slot_date: date,
        slot_time: str,
    ) -> bool:
        """
        Remove the block on one slot.

        Always True once the slot is unblocked, whether or not a block existed.
        Times outside current hours are accepted so orphaned blocks can be removed.
        """
        await self._load_managed_venue(db, caller, venue_id)
        time = normalize_time_of_day(slot_time)
        slot = {"venue_id": venue_id, "slot_date": slot_date.isoformat(), "slot_time": time}

        async with storage_errors(db, f"Unblocking {time} on {slot_date}", slot=slot):
            removed = await self.store.delete_slot_block(db, venue_id, slot_date, time)
            await db.commit()

        if removed:
            logger.info(f"User {caller.user_id} unblocked venue {venue_id} {slot_date} {time}")
        else:
            logger.debug(f"Nothing to unblock for venue {venue_id} {slot_date} {time}")
        return True

    async def unblock_full_day(
        self,
        db: AsyncSession,
        caller: CallerIdentity,
        venue_id: str,
        slot_date: date,
    ) -> int:
        """Remove every block of a venue's day, orphans included. Returns how many were removed."""
        await self._load_managed_venue(db, caller, venue_id)

        async with storage_errors(db, f"Unblocking {slot_date}"):
            removed = await self.store.delete_slot_blocks_for_date(db, venue_id, slot_date)
            await db.commit()

        logger.info(f"User {caller.user_id} unblocked {removed} slot(s) of venue {venue_id} on {slot_date}")
        return removed

    async def list_slot_blocks(
        self,
        db: AsyncSession,
        venue_id: str,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> SlotBlockPage:
        """List a venue's blocks, orphans included, latest slot first."""
        if limit is None:
            limit = settings.BLOCKS_PAGE_LIMIT
        if page < 1 or limit < 1:
            raise ValidationError("page and limit must be positive")
        if date_from and date_to and date_from > date_to:
            raise ValidationError("date_from must be before or equal to date_to")

        async with storage_errors(db, f"Listing blocks for {venue_id}"):
            await self.store.get_venue(db, venue_id)
            blocks, total = await self.store.page_slot_blocks(
                db, venue_id, date_from, date_to, (page - 1) * limit, limit
            )

        return SlotBlockPage(
            blocks=[SlotBlockInDB.model_validate(block) for block in blocks],
            total=total,
            page=page,
            limit=limit,
        )


# Singleton instance
slot_block_service = SlotBlockService()
