"""
Request DTOs for authentication endpoints.

SignupRequest          — POST /auth/signup
LoginRequest           — POST /auth/login
OAuthLoginRequest      — POST /auth/oauth
EmailRequest           — POST /auth/resend-verification, /auth/forgot-password
ResetPasswordRequest   — POST /auth/reset-password/{token}

Field names match what the mobile client sends (``providerId`` is camelCase).
Semantic checks (email shape, password policy) belong to AuthService so the
error messages stay in one place; these models only enforce presence/type.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    """Request body for POST /auth/signup."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    email: str
    password: str


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str


class OAuthLoginRequest(BaseModel):
    """Request body for POST /auth/oauth.

    The identity is asserted by the client after it completed the provider's
    sign-in flow; ``email`` may be absent (Apple private relay opt-out).
    """

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    username: Optional[str] = None
    provider: str
    provider_id: str = Field(alias="providerId")


class EmailRequest(BaseModel):
    """Request body carrying a single email address."""

    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    """Request body for POST /auth/reset-password/{token}."""

    model_config = ConfigDict(populate_by_name=True)

    password: str
