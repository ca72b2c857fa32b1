"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.asynchronous.mongo_client import AsyncMongoClient

from config import AppSettings
from errors import register_error_handlers
from infrastructure.email.protocol import EmailSender
from infrastructure.email.zeptomail import ZeptoMailSender
from infrastructure.http_client import HttpClient
from repositories.user_repository import UserRepository
from repositories.video_repository import VideoRepository
from routes.auth_routes import router as auth_router
from routes.health_routes import router as health_router
from routes.video_routes import router as video_router
from services.auth_service import AuthService
from services.session import SessionAuthenticator
from services.token_service import TokenService
from services.video_service import VideoService
from shared.logging import get_logger
from shared.logging_config import setup_logging

log = get_logger(__name__)


async def wire_services(
    app: FastAPI, settings: AppSettings, db, email_sender: EmailSender
) -> None:
    """Build repositories and services over *db* and attach them to app.state."""
    users = UserRepository(db)
    videos = VideoRepository(db)
    await users.ensure_indexes()
    await videos.ensure_indexes()

    tokens = TokenService(settings.jwt, settings.tokens)
    app.state.settings = settings
    app.state.db = db
    app.state.auth_service = AuthService(users, tokens, email_sender, settings)
    app.state.session_authenticator = SessionAuthenticator(tokens, users)
    app.state.video_service = VideoService(videos)


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and return a fully configured FastAPI application."""
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            environment=settings.env,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        mongo_client: AsyncMongoClient = AsyncMongoClient(
            settings.db.mongodb_uri, tz_aware=True
        )
        app.state.mongo_client = mongo_client
        http_client = HttpClient(timeout=settings.email.email_timeout_seconds)
        email_sender = ZeptoMailSender(settings.email, http_client, settings.tokens)

        await wire_services(app, settings, mongo_client[settings.db.db_name], email_sender)
        log.info("app_started", env=settings.env, db_name=settings.db.db_name)

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await http_client.aclose()
        await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router, prefix=settings.api_prefix)
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(video_router, prefix=settings.api_prefix)

    return app
