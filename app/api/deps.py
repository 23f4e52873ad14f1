"""Shared API dependencies."""
from typing import Optional

from fastapi import Header, HTTPException

from app.core.errors import SlotEngineError, to_http_exception
from app.schemas.auth import CallerIdentity
from app.services.auth_client import auth_client


async def get_caller(authorization: Optional[str] = Header(default=None)) -> CallerIdentity:
    """
    Resolve the caller from the Authorization header.

    Raises:
        HTTPException: 401 when the header is missing or the token is rejected
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing authorization header")

    token = authorization[len("bearer "):].strip()
    try:
        return await auth_client.resolve_caller_role(token)
    except SlotEngineError as e:
        raise to_http_exception(e)
