"""Slot block schemas."""
from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, List, Literal
from datetime import datetime, date


class SlotBlockInDB(BaseModel):
    """Schema for a slot block from the database."""

    id: str
    venue_id: str
    slot_date: date
    slot_time: str
    reason: Optional[str] = None
    created_by: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SlotRef(BaseModel):
    """One (venue, date, time) tuple to block."""

    venue_id: str
    slot_date: date
    slot_time: str
    reason: Optional[str] = None


class BlockRequest(BaseModel):
    """
    Body of POST /venues/{venue_id}/blocks.

    Exactly one of time, times or full_day selects what to block.
    """

    date: date
    time: Optional[str] = None
    times: Optional[List[str]] = None
    full_day: bool = False
    reason: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _one_target(self):
        targets = sum([self.time is not None, self.times is not None, self.full_day])
        if targets != 1:
            raise ValueError("Provide exactly one of 'time', 'times' or 'full_day'")
        if self.times is not None and not self.times:
            raise ValueError("'times' must not be empty")
        return self


class BlockItemResult(BaseModel):
    """Outcome for one tuple of a batch block."""

    venue_id: str
    slot_date: date
    slot_time: str
    status: Literal["created", "already_blocked", "failed"]
    block: Optional[SlotBlockInDB] = None
    error: Optional[str] = None


class BatchBlockResult(BaseModel):
    """Per-item report for multi-slot and full-day blocks."""

    items: List[BlockItemResult]

    @property
    def blocks(self) -> List[SlotBlockInDB]:
        return [item.block for item in self.items if item.block is not None]

    @property
    def failed(self) -> List[BlockItemResult]:
        return [item for item in self.items if item.status == "failed"]

    @property
    def blocks_created(self) -> int:
        return sum(1 for item in self.items if item.status == "created")


class BlockResponse(BaseModel):
    """Response of POST /venues/{venue_id}/blocks."""

    blocks: List[SlotBlockInDB]
    blocks_created: int
    failed: List[BlockItemResult] = []


class UnblockResponse(BaseModel):
    """Response of DELETE /venues/{venue_id}/blocks."""

    success: bool
    blocks_removed: int = 0


class SlotBlockPage(BaseModel):
    """Paginated block listing."""

    blocks: List[SlotBlockInDB]
    total: int
    page: int
    limit: int
