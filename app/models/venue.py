"""Venue model."""
import uuid

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base


class Venue(Base):
    """Represents a bookable venue. Owned by the venue service, read-only here."""

    __tablename__ = "venues"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), nullable=False, index=True)
    name = Column(String, nullable=False)
    opening_time = Column(String(5), nullable=True)  # HH:MM, 24-hour
    closing_time = Column(String(5), nullable=True)  # HH:MM, 24-hour
    courts_count = Column(Integer, default=1, nullable=False)
    slot_duration_minutes = Column(Integer, nullable=True)  # Falls back to SLOT_GRANULARITY_MINUTES
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    bookings = relationship("Booking", back_populates="venue", cascade="all, delete-orphan")
    slot_blocks = relationship("SlotBlock", back_populates="venue", cascade="all, delete-orphan")
