"""API schemas."""
from app.schemas.availability import (
    SlotState,
    SlotAvailability,
    AvailabilityResponse,
    MonthSummary,
)
from app.schemas.slot_block import (
    SlotBlockInDB,
    SlotRef,
    BlockRequest,
    BlockItemResult,
    BatchBlockResult,
    BlockResponse,
    UnblockResponse,
    SlotBlockPage,
)
from app.schemas.auth import CallerIdentity, CallerRole

__all__ = [
    "SlotState",
    "SlotAvailability",
    "AvailabilityResponse",
    "MonthSummary",
    "SlotBlockInDB",
    "SlotRef",
    "BlockRequest",
    "BlockItemResult",
    "BatchBlockResult",
    "BlockResponse",
    "UnblockResponse",
    "SlotBlockPage",
    "CallerIdentity",
    "CallerRole",
]
