"""
Shared fixtures: settings, an in-memory MongoDB, repositories and services.

Every test gets a fresh mongomock store, so nothing leaks between tests.
"""

import pytest

from config import AppSettings, DatabaseSettings, EmailSettings, JWTSettings
from fakes import AsyncDatabase, RecordingEmailSender
from repositories.user_repository import UserRepository
from repositories.video_repository import VideoRepository
from services.auth_service import AuthService
from services.session import SessionAuthenticator
from services.token_service import TokenService
from services.video_service import VideoService

TEST_JWT_SECRET = "test-secret-that-is-long-enough-for-hs256"


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        db=DatabaseSettings(mongodb_uri="mongodb://localhost:27017/", db_name="idj_test"),
        jwt=JWTSettings(jwt_secret=TEST_JWT_SECRET),
        email=EmailSettings(zepto_api_token="test-zepto-key"),
    )


@pytest.fixture
def mongo_db() -> AsyncDatabase:
    return AsyncDatabase()


@pytest.fixture
async def user_repo(mongo_db) -> UserRepository:
    repo = UserRepository(mongo_db)
    await repo.ensure_indexes()
    return repo


@pytest.fixture
async def video_repo(mongo_db) -> VideoRepository:
    repo = VideoRepository(mongo_db)
    await repo.ensure_indexes()
    return repo


@pytest.fixture
def token_service(app_settings) -> TokenService:
    return TokenService(app_settings.jwt, app_settings.tokens)


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def auth_service(user_repo, token_service, email_sender, app_settings) -> AuthService:
    return AuthService(user_repo, token_service, email_sender, app_settings)


@pytest.fixture
def session_authenticator(token_service, user_repo) -> SessionAuthenticator:
    return SessionAuthenticator(token_service, user_repo)


@pytest.fixture
def video_service(video_repo) -> VideoService:
    return VideoService(video_repo)
