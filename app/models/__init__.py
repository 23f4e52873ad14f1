"""Database models."""
from app.models.venue import Venue
from app.models.booking import Booking
from app.models.slot_block import SlotBlock

__all__ = ["Venue", "Booking", "SlotBlock"]
