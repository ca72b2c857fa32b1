"""
Response DTOs for authentication endpoints.

UserResponse     — public user shape embedded in auth responses
AuthResponse     — POST /auth/signup (201), /auth/login, /auth/oauth (200)
CurrentUserResponse — GET /auth/me (200)

password_hash and token digests never appear here; UserResponse.from_doc
copies an explicit allow-list of fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.user import UserDoc


class UserResponse(BaseModel):
    """Public projection of a UserDoc."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    email: Optional[str] = None
    provider: str
    is_email_verified: bool = Field(alias="isEmailVerified")

    @classmethod
    def from_doc(cls, user: UserDoc) -> "UserResponse":
        return cls(
            id=str(user.id),
            username=user.username,
            email=user.email,
            provider=str(user.provider),
            is_email_verified=user.is_email_verified,
        )


class AuthResponse(BaseModel):
    """Response body carrying a session token."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: UserResponse
    token: str
    message: Optional[str] = None


class CurrentUserResponse(BaseModel):
    """Response body for GET /auth/me (200)."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: UserResponse
