"""Slot block model."""
import uuid

from sqlalchemy import Column, String, ForeignKey, DateTime, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class SlotBlock(Base):
    """An administrative block on one (venue, date, time) slot."""

    __tablename__ = "slot_blocks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String(36), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    slot_date = Column(Date, nullable=False)
    slot_time = Column(String(5), nullable=False)  # HH:MM
    reason = Column(String, nullable=True)
    created_by = Column(String(36), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    venue = relationship("Venue", back_populates="slot_blocks")

    # At most one block per slot; concurrent inserts collapse on this
    __table_args__ = (
        UniqueConstraint("venue_id", "slot_date", "slot_time", name="uq_slot_blocks_venue_date_time"),
    )
