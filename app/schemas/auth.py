"""Caller identity schemas."""
from enum import Enum
from pydantic import BaseModel


class CallerRole(str, Enum):
    """Role resolved by the auth service."""

    ADMIN = "admin"
    VENUE_OWNER = "venue_owner"
    NONE = "none"


class CallerIdentity(BaseModel):
    """Authenticated caller."""

    user_id: str
    role: CallerRole = CallerRole.NONE

    @property
    def is_admin(self) -> bool:
        return self.role == CallerRole.ADMIN
