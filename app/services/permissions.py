"""Authorization rules for slot mutations."""
import logging

from app.core.errors import Forbidden
from app.models.venue import Venue
from app.schemas.auth import CallerIdentity, CallerRole

logger = logging.getLogger(__name__)


def can_manage_venue(caller: CallerIdentity, venue: Venue) -> bool:
    """Admins manage every venue, owners only their own."""
    if caller.is_admin:
        return True
    return caller.role == CallerRole.VENUE_OWNER and venue.owner_id == caller.user_id


def ensure_can_manage_venue(caller: CallerIdentity, venue: Venue):
    """Raise Forbidden unless the caller may block or unblock on this venue."""
    if not can_manage_venue(caller, venue):
        logger.warning(f"User {caller.user_id} ({caller.role.value}) denied on venue {venue.id}")
        raise Forbidden("You must be an admin or the owner of this venue")
