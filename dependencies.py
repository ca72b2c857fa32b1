"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain async functions
used with FastAPI's Depends() system. Services are built once in the app
lifespan (app.wire_services) and read back from app.state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from config import AppSettings
from schemas.models.user import UserDoc
from services.auth_service import AuthService
from services.session import SessionAuthenticator
from services.video_service import VideoService


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


async def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


async def get_video_service(request: Request) -> VideoService:
    return request.app.state.video_service


async def protect(request: Request) -> UserDoc:
    """Require a valid bearer session; 401 otherwise."""
    authenticator: SessionAuthenticator = request.app.state.session_authenticator
    user = await authenticator.authenticate(request.headers.get("Authorization"))
    request.state.user = user
    return user


async def optional_auth(request: Request) -> Optional[UserDoc]:
    """Resolve the bearer session when present; anonymous requests pass."""
    authenticator: SessionAuthenticator = request.app.state.session_authenticator
    user = await authenticator.authenticate_optional(
        request.headers.get("Authorization")
    )
    request.state.user = user
    return user
