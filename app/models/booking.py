"""Booking model."""
import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

BOOKING_STATUSES = ("confirmed", "pending", "cancelled", "refunded")

# Bookings in these states no longer hold a court
INACTIVE_BOOKING_STATUSES = ("cancelled", "refunded")


class Booking(Base):
    """
    Represents a court reservation.

    Two time shapes coexist: slot_time + duration_minutes (current) and
    start_time + end_time (legacy). See app.services.booking_time.
    """

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    venue_id = Column(String(36), ForeignKey("venues.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=True)
    slot_date = Column(Date, nullable=False)
    slot_time = Column(String(8), nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    start_time = Column(String(8), nullable=True)
    end_time = Column(String(8), nullable=True)
    status = Column(String, default="pending", nullable=False)  # confirmed, pending, cancelled, refunded
    court_count = Column(Integer, default=1, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    venue = relationship("Venue", back_populates="bookings")

    __table_args__ = (
        Index("ix_bookings_venue_date", "venue_id", "slot_date"),
    )
