"""Persistence operations the slot engine needs.

SlotStore is the only code that talks SQL. It never commits: the calling
service owns the transaction so it can commit each slot write on its own.
"""
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional, Sequence, Set, Tuple

from sqlalchemy import select, delete, func, and_
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound, StorageError
from app.models.booking import Booking, INACTIVE_BOOKING_STATUSES
from app.models.slot_block import SlotBlock
from app.models.venue import Venue

logger = logging.getLogger(__name__)

SLOT_KEY = ("venue_id", "slot_date", "slot_time")

# Dialects whose INSERT supports ON CONFLICT DO NOTHING ... RETURNING
_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


@asynccontextmanager
async def storage_errors(db: AsyncSession, action: str, slot: Optional[dict] = None):
    """Roll back and re-raise SQLAlchemy failures as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{action} failed: {e}")
        raise StorageError(f"{action} failed: {e.__class__.__name__}", slot=slot) from e


class SlotStore:
    """Store operations for venues, bookings and slot blocks."""

    async def get_venue(self, db: AsyncSession, venue_id: str) -> Venue:
        """
        Fetch a venue.

        Raises:
            NotFound: No venue with this ID
        """
        result = await db.execute(select(Venue).where(Venue.id == venue_id))
        venue = result.scalar_one_or_none()

        if not venue:
            raise NotFound(f"Venue {venue_id} not found")

        return venue

    async def list_bookings(
        self,
        db: AsyncSession,
        venue_id: str,
        slot_date: date,
        exclude_statuses: Sequence[str] = INACTIVE_BOOKING_STATUSES,
    ) -> List[Booking]:
        """List a venue's bookings on one date, minus the excluded statuses."""
        query = select(Booking).where(
            and_(Booking.venue_id == venue_id, Booking.slot_date == slot_date)
        )
        if exclude_statuses:
            query = query.where(Booking.status.notin_(exclude_statuses))

        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_slot_blocks(
        self, db: AsyncSession, venue_id: str, slot_date: date
    ) -> List[SlotBlock]:
        """List a venue's blocks on one date, ordered by time."""
        result = await db.execute(
            select(SlotBlock)
            .where(and_(SlotBlock.venue_id == venue_id, SlotBlock.slot_date == slot_date))
            .order_by(SlotBlock.slot_time)
        )
        return list(result.scalars().all())

    async def get_slot_block(
        self, db: AsyncSession, venue_id: str, slot_date: date, slot_time: str
    ) -> Optional[SlotBlock]:
        result = await db.execute(
            select(SlotBlock).where(
                and_(
                    SlotBlock.venue_id == venue_id,
                    SlotBlock.slot_date == slot_date,
                    SlotBlock.slot_time == slot_time,
                )
            )
        )
        return result.scalar_one_or_none()

    async def insert_slot_block(
        self,
        db: AsyncSession,
        venue_id: str,
        slot_date: date,
        slot_time: str,
        reason: Optional[str],
        created_by: str,
        update_reason: bool = False,
    ) -> Tuple[SlotBlock, bool]:
        """
        Insert a block unless one already exists for the slot.

        A unique-constraint hit is not an error: the existing row is returned
        with created=False, and its reason replaced when update_reason is set.

        Returns:
            (block, created)
        """
        values = {
            "id": str(uuid.uuid4()),
            "venue_id": venue_id,
            "slot_date": slot_date,
            "slot_time": slot_time,
            "reason": reason,
            "created_by": created_by,
        }

        created = await self._insert_on_conflict_do_nothing(db, values)

        block = await self.get_slot_block(db, venue_id, slot_date, slot_time)
        if block is None:
            # Deleted by a concurrent unblock between our insert and read
            raise StorageError(
                f"Block for {slot_time} on {slot_date} vanished during write",
                slot={"venue_id": venue_id, "slot_date": slot_date.isoformat(), "slot_time": slot_time},
            )

        if not created:
            logger.debug(f"Block already exists for venue {venue_id} {slot_date} {slot_time}")
            if update_reason and block.reason != reason:
                block.reason = reason
                await db.flush()

        return block, created

    async def _insert_on_conflict_do_nothing(self, db: AsyncSession, values: dict) -> bool:
        dialect = db.get_bind().dialect.name
        insert = _CONFLICT_INSERTS.get(dialect)
        if insert is None:
            raise StorageError(f"Database dialect {dialect} has no ON CONFLICT insert")

        stmt = (
            insert(SlotBlock)
            .values(**values)
            .on_conflict_do_nothing(index_elements=list(SLOT_KEY))
            .returning(SlotBlock.id)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def delete_slot_block(
        self, db: AsyncSession, venue_id: str, slot_date: date, slot_time: str
    ) -> bool:
        """Delete one block. Returns whether a row was removed."""
        result = await db.execute(
            delete(SlotBlock).where(
                and_(
                    SlotBlock.venue_id == venue_id,
                    SlotBlock.slot_date == slot_date,
                    SlotBlock.slot_time == slot_time,
                )
            )
        )
        return result.rowcount > 0

    async def delete_slot_blocks_for_date(
        self, db: AsyncSession, venue_id: str, slot_date: date
    ) -> int:
        """Delete every block of a venue on one date. Returns the row count."""
        result = await db.execute(
            delete(SlotBlock).where(
                and_(SlotBlock.venue_id == venue_id, SlotBlock.slot_date == slot_date)
            )
        )
        return result.rowcount or 0

    async def blocked_dates_between(
        self, db: AsyncSession, venue_id: str, first_day: date, last_day: date
    ) -> Set[date]:
        """Distinct dates in [first_day, last_day] holding at least one block."""
        result = await db.execute(
            select(SlotBlock.slot_date)
            .where(
                and_(
                    SlotBlock.venue_id == venue_id,
                    SlotBlock.slot_date >= first_day,
                    SlotBlock.slot_date <= last_day,
                )
            )
            .distinct()
        )
        return set(result.scalars().all())

    async def booked_dates_between(
        self,
        db: AsyncSession,
        venue_id: str,
        first_day: date,
        last_day: date,
        exclude_statuses: Sequence[str] = INACTIVE_BOOKING_STATUSES,
    ) -> Set[date]:
        """Distinct dates in [first_day, last_day] holding at least one live booking."""
        query = (
            select(Booking.slot_date)
            .where(
                and_(
                    Booking.venue_id == venue_id,
                    Booking.slot_date >= first_day,
                    Booking.slot_date <= last_day,
                )
            )
            .distinct()
        )
        if exclude_statuses:
            query = query.where(Booking.status.notin_(exclude_statuses))

        result = await db.execute(query)
        return set(result.scalars().all())

    async def page_slot_blocks(
        self,
        db: AsyncSession,
        venue_id: str,
        date_from: Optional[date],
        date_to: Optional[date],
        offset: int,
        limit: int,
    ) -> Tuple[List[SlotBlock], int]:
        """One page of a venue's blocks, latest slot first, plus the total count."""
        conditions = [SlotBlock.venue_id == venue_id]
        if date_from:
            conditions.append(SlotBlock.slot_date >= date_from)
        if date_to:
            conditions.append(SlotBlock.slot_date <= date_to)

        total = await db.scalar(select(func.count(SlotBlock.id)).where(and_(*conditions)))

        result = await db.execute(
            select(SlotBlock)
            .where(and_(*conditions))
            .order_by(SlotBlock.slot_date.desc(), SlotBlock.slot_time.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0


# Singleton instance
slot_store = SlotStore()
