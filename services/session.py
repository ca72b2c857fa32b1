"""
Session guard — resolves the bearer token on a request to a UserDoc.

authenticate() is the required mode used by `protect`; authenticate_optional()
backs `optional_auth` and returns None instead of rejecting. Only
authentication failures are swallowed in optional mode: a storage error while
loading the user still propagates.
"""

from __future__ import annotations

from typing import Optional

from errors import AuthenticationError
from repositories.user_repository import UserRepository
from schemas.models.user import UserDoc
from services.token_service import SessionTokenError, TokenService
from shared.logging import get_logger

log = get_logger(__name__)

MISSING_TOKEN_MESSAGE = "Not authorized to access this route"
INVALID_TOKEN_MESSAGE = "Invalid or expired token"
UNKNOWN_USER_MESSAGE = "User not found"


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    credentials = credentials.strip()
    return credentials or None


class SessionAuthenticator:
    def __init__(self, tokens: TokenService, users: UserRepository) -> None:
        self._tokens = tokens
        self._users = users

    async def authenticate(self, authorization: Optional[str]) -> UserDoc:
        token = extract_bearer(authorization)
        if token is None:
            raise AuthenticationError(MISSING_TOKEN_MESSAGE)

        try:
            user_id = self._tokens.verify_session_token(token)
        except SessionTokenError as e:
            log.info("session_rejected", reason=type(e).__name__)
            raise AuthenticationError(INVALID_TOKEN_MESSAGE) from e

        user = await self._users.find_by_id(user_id)
        if user is None:
            log.info("session_rejected", reason="unknown_user", user_id=user_id)
            raise AuthenticationError(UNKNOWN_USER_MESSAGE)
        return user

    async def authenticate_optional(
        self, authorization: Optional[str]
    ) -> Optional[UserDoc]:
        try:
            return await self.authenticate(authorization)
        except AuthenticationError:
            return None
