"""Auth service client.

Resolves a bearer token to the calling user and their role. The auth service
exposes a GoTrue-style `/user` endpoint; roles come from a PostgREST-style
`user_roles` table on a separate base URL.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import settings
from app.core.errors import AuthenticationError, AuthServiceUnavailable
from app.schemas.auth import CallerIdentity, CallerRole

logger = logging.getLogger(__name__)


class AuthClient:
    """Client for the external auth service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        roles_url: Optional[str] = None,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the auth client."""
        self.base_url = (base_url or settings.AUTH_API_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.AUTH_API_KEY
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS
        self.max_retries = settings.MAX_RETRIES
        self._transport = transport

        self.endpoints = {
            "user": f"{self.base_url}/user",
            "roles": roles_url or settings.AUTH_ROLES_URL,
        }

    def _headers(self, token: str) -> Dict[str, str]:
        headers = {"Authorization": f"Bearer {token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    async def _make_request(
        self,
        url: str,
        token: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        GET with retries on transport errors and 5xx responses.

        Raises:
            AuthenticationError: Token rejected (401/403)
            AuthServiceUnavailable: Still failing after max retries
        """
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            for attempt in range(self.max_retries):
                try:
                    response = await client.get(url, params=params, headers=self._headers(token))

                    if response.status_code in (401, 403):
                        raise AuthenticationError("Invalid or expired token")
                    response.raise_for_status()

                    return response.json()

                except httpx.HTTPStatusError as e:
                    if e.response.status_code < 500:
                        logger.error(f"Auth service rejected request to {url}: {e}")
                        raise AuthServiceUnavailable(f"Auth service error: {e.response.status_code}")
                    logger.warning(f"Auth request failed (attempt {attempt + 1}/{self.max_retries}): {e}")
                except httpx.TransportError as e:
                    logger.warning(f"Auth request failed (attempt {attempt + 1}/{self.max_retries}): {e}")

                if attempt < self.max_retries - 1:
                    # Exponential backoff
                    await asyncio.sleep(2 ** attempt)

        raise AuthServiceUnavailable("Auth service unavailable")

    async def get_user(self, token: str) -> Dict[str, Any]:
        """Fetch the user a token belongs to."""
        data = await self._make_request(self.endpoints["user"], token)
        if not isinstance(data, dict) or not data.get("id"):
            raise AuthenticationError("Invalid or expired token")
        return data

    async def get_roles(self, token: str, user_id: str) -> List[str]:
        """Fetch the role names granted to a user."""
        data = await self._make_request(
            self.endpoints["roles"],
            token,
            params={"user_id": f"eq.{user_id}", "select": "role"},
        )
        return [row.get("role") for row in data or [] if isinstance(row, dict)]

    async def resolve_caller_role(self, token: str) -> CallerIdentity:
        """
        Resolve a bearer token to the caller's identity.

        Admin wins over venue owner when a user holds both roles.

        Args:
            token: Bearer token, without the 'Bearer ' prefix

        Returns:
            CallerIdentity with role admin, venue_owner or none
        """
        if not token:
            raise AuthenticationError("Missing authorization token")

        user = await self.get_user(token)
        user_id = str(user["id"])
        roles = await self.get_roles(token, user_id)

        if CallerRole.ADMIN.value in roles:
            role = CallerRole.ADMIN
        elif CallerRole.VENUE_OWNER.value in roles:
            role = CallerRole.VENUE_OWNER
        else:
            role = CallerRole.NONE

        logger.debug(f"Resolved user {user_id} as {role.value}")
        return CallerIdentity(user_id=user_id, role=role)


# Singleton instance
auth_client = AuthClient()
