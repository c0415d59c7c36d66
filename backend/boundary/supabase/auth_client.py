"""
Supabase Auth token verification.

Dependencies: supabase
System role: Resolves bearer tokens to the calling user
"""

import asyncio
import logging
from dataclasses import dataclass

from supabase import AuthError, Client, create_client

from backend.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None

    @property
    def display_name(self) -> str:
        """Email when known, otherwise the user id (used for audit columns)."""
        return self.email or self.id


class SupabaseAuthClient:
    """Verifies Supabase JWTs against the hosted auth service."""

    def __init__(self, url: str, service_key: str) -> None:
        self._client: Client = create_client(url, service_key)

    async def verify_token(self, token: str) -> AuthenticatedUser:
        """
        Resolve a JWT to its user.

        Raises:
            AuthenticationError: If the token is missing, invalid or expired
        """
        if not token:
            raise AuthenticationError("Unauthorized")
        try:
            response = await asyncio.to_thread(self._client.auth.get_user, token)
        except AuthError as e:
            logger.info("Rejected bearer token", extra={"error": str(e)})
            raise AuthenticationError("Unauthorized") from e

        user = getattr(response, "user", None)
        if user is None:
            raise AuthenticationError("Unauthorized")
        return AuthenticatedUser(id=str(user.id), email=user.email)
