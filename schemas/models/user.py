"""
User document model.

Maps to the `users` MongoDB collection.

Two creation paths produce different shapes:
- Local signup: password_hash set, is_email_verified starts False
- OAuth (google / apple): no password_hash, provider_id set, verified

Outstanding one-time tokens live in two optional sub-documents,
`email_verification` and `password_reset`. Each slot holds at most one
PendingToken, so issuing a new token overwrites (and invalidates) the old one.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from schemas.models.base import MongoBaseModel
from shared.crypto import hash_password, verify_password
from shared.datetime_utils import ensure_utc, utcnow


class AuthProvider(str, Enum):
    LOCAL = "local"
    GOOGLE = "google"
    APPLE = "apple"


OAUTH_PROVIDERS = (AuthProvider.GOOGLE, AuthProvider.APPLE)


class PendingToken(BaseModel):
    """Digest and expiry of an outstanding one-time token."""

    token_hash: str
    expires_at: datetime

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """True while the token has not yet expired."""
        return ensure_utc(self.expires_at) > (now or utcnow())


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        use_enum_values=True,
    )

    username: str
    email: Optional[str] = None
    password_hash: Optional[str] = None
    provider: AuthProvider = Field(default=AuthProvider.LOCAL, validate_default=True)
    provider_id: Optional[str] = None
    is_email_verified: bool = False
    email_verification: Optional[PendingToken] = None
    password_reset: Optional[PendingToken] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_credentials(self) -> "UserDoc":
        if self.provider == AuthProvider.LOCAL:
            if not self.password_hash:
                raise ValueError("local users require a password hash")
            if not self.email:
                raise ValueError("local users require an email")
        else:
            if self.password_hash:
                raise ValueError("OAuth users cannot carry a password hash")
            if not self.provider_id:
                raise ValueError("OAuth users require a provider_id")
        return self

    @classmethod
    def new_local(cls, username: str, email: str, plain_password: str) -> "UserDoc":
        now = utcnow()
        return cls(
            username=username,
            email=email,
            password_hash=hash_password(plain_password),
            provider=AuthProvider.LOCAL,
            is_email_verified=False,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def new_oauth(
        cls,
        username: str,
        email: Optional[str],
        provider: AuthProvider,
        provider_id: str,
    ) -> "UserDoc":
        now = utcnow()
        return cls(
            username=username,
            email=email,
            provider=provider,
            provider_id=provider_id,
            is_email_verified=True,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_local(self) -> bool:
        return self.provider == AuthProvider.LOCAL

    def set_password(self, plain_password: str) -> None:
        """Store the argon2 hash of *plain_password*; plaintext is never kept."""
        self.password_hash = hash_password(plain_password)

    def check_password(self, plain_password: str) -> bool:
        if not self.password_hash:
            return False
        return verify_password(plain_password, self.password_hash)

    def active_verification(self, now: Optional[datetime] = None) -> Optional[PendingToken]:
        """The verification slot, or None when it is empty or expired."""
        token = self.email_verification
        if token is None or not token.is_active(now):
            return None
        return token

    def active_password_reset(self, now: Optional[datetime] = None) -> Optional[PendingToken]:
        """The reset slot, or None when it is empty or expired."""
        token = self.password_reset
        if token is None or not token.is_active(now):
            return None
        return token
