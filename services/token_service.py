"""
Token codec — session JWTs and one-time email tokens.

Session tokens are stateless HS256 JWTs carrying iss/aud/sub/iat/exp. The
signing secret comes from JWTSettings at startup; nothing here reads the
environment.

One-time tokens (email verification, password reset) are returned in
plaintext exactly once; only their SHA-256 digest is stored on the user.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import jwt
from bson import ObjectId

from config import JWTSettings, TokenSettings
from schemas.models.user import PendingToken
from shared.crypto import hash_token
from shared.datetime_utils import expires_in, utcnow
from shared.generators import generate_secure_token


class SessionTokenError(Exception):
    """Base for session token failures."""


class InvalidSessionToken(SessionTokenError):
    """Bad signature, wrong issuer/audience, malformed payload or no subject."""


class ExpiredSessionToken(SessionTokenError):
    """Signature valid but `exp` is in the past."""


class TokenService:
    def __init__(
        self,
        jwt_settings: JWTSettings,
        token_settings: Optional[TokenSettings] = None,
    ) -> None:
        if not jwt_settings.jwt_secret:
            raise RuntimeError("JWT_SECRET must be set")
        self._jwt = jwt_settings
        self._tokens = token_settings or TokenSettings()

    def issue_session_token(
        self, user_id: ObjectId | str, *, now: Optional[datetime] = None
    ) -> str:
        now = now or utcnow()
        claims = {
            "iss": self._jwt.jwt_issuer,
            "aud": self._jwt.jwt_audience,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(
                (now + timedelta(seconds=self._jwt.session_token_ttl_seconds)).timestamp()
            ),
        }
        return jwt.encode(claims, self._jwt.jwt_secret, algorithm=self._jwt.jwt_algorithm)

    def verify_session_token(self, token: str) -> str:
        """Return the user id carried by *token*.

        Raises:
            ExpiredSessionToken: the token is past its `exp`.
            InvalidSessionToken: any other decoding or claim failure.
        """
        try:
            claims = jwt.decode(
                token,
                self._jwt.jwt_secret,
                algorithms=[self._jwt.jwt_algorithm],
                audience=self._jwt.jwt_audience,
                issuer=self._jwt.jwt_issuer,
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredSessionToken(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise InvalidSessionToken(str(e)) from e

        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidSessionToken("token has no subject")
        return subject

    def _new_one_time_token(self, ttl_seconds: int) -> tuple[str, PendingToken]:
        plaintext = generate_secure_token(self._tokens.token_bytes)
        pending = PendingToken(
            token_hash=hash_token(plaintext),
            expires_at=expires_in(ttl_seconds),
        )
        return plaintext, pending

    def new_verification_token(self) -> tuple[str, PendingToken]:
        """Return (plaintext, slot) for an email verification token (24 h)."""
        return self._new_one_time_token(self._tokens.verification_token_ttl_seconds)

    def new_reset_token(self) -> tuple[str, PendingToken]:
        """Return (plaintext, slot) for a password reset token (1 h)."""
        return self._new_one_time_token(self._tokens.reset_token_ttl_seconds)
