"""
Error taxonomy for the slot engine.

Every error carries the HTTP status it maps to, so routes stay thin:
catch SlotEngineError and hand it to to_http_exception().
"""
from typing import Optional

from fastapi import HTTPException


class SlotEngineError(Exception):
    """Base class for errors surfaced to callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(SlotEngineError):
    """A venue that must exist is missing or inactive."""

    status_code = 404


class Forbidden(SlotEngineError):
    """Caller is neither a platform admin nor the venue owner."""

    status_code = 403


class AuthenticationError(SlotEngineError):
    """Bearer token missing, invalid or expired."""

    status_code = 401


class ValidationError(SlotEngineError):
    """Malformed input, rejected before any store call."""

    status_code = 422


class SlotFullyBooked(SlotEngineError):
    """Block refused because the slot is at capacity and policy is strict."""

    status_code = 409


class StorageError(SlotEngineError):
    """Failure reported by the backing store."""

    status_code = 503

    def __init__(self, message: str, slot: Optional[dict] = None):
        super().__init__(message)
        # The (venue_id, date, time) tuple that failed, when there is one
        self.slot = slot


class AuthServiceUnavailable(SlotEngineError):
    """Auth service could not be reached after retries."""

    status_code = 503


def to_http_exception(exc: SlotEngineError) -> HTTPException:
    """Map a SlotEngineError onto an HTTPException."""
    detail = exc.message
    if isinstance(exc, StorageError) and exc.slot:
        return HTTPException(status_code=exc.status_code, detail={"error": detail, "slot": exc.slot})
    return HTTPException(status_code=exc.status_code, detail=detail)
