"""Unit tests for AppSettings and sub-configs."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import (
    AppSettings,
    DatabaseSettings,
    EmailSettings,
    JWTSettings,
    LoggingSettings,
    SentrySettings,
    TokenSettings,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def with_mongo(monkeypatch):
    """Set the required MONGODB_URI so AppSettings can be instantiated."""
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
    return monkeypatch


# ---------------------------------------------------------------------------
# DatabaseSettings
# ---------------------------------------------------------------------------


class TestDatabaseSettings:
    def test_loads_mongodb_uri(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        assert DatabaseSettings().mongodb_uri == "mongodb://localhost:27017/"

    def test_default_db_name(self, monkeypatch):
        monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017/")
        monkeypatch.delenv("DB_NAME", raising=False)
        assert DatabaseSettings().db_name == "idj"

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            DatabaseSettings()


# ---------------------------------------------------------------------------
# JWTSettings / TokenSettings
# ---------------------------------------------------------------------------


class TestJWTSettings:
    def test_defaults(self, monkeypatch):
        for name in ("JWT_SECRET", "JWT_ISSUER", "JWT_AUDIENCE", "SESSION_TOKEN_TTL_SECONDS"):
            monkeypatch.delenv(name, raising=False)
        s = JWTSettings()
        assert s.jwt_secret == ""
        assert s.jwt_issuer == "idj"
        assert s.jwt_audience == "idj.api"
        assert s.jwt_algorithm == "HS256"
        assert s.session_token_ttl_seconds == 30 * 24 * 3600

    def test_secret_from_env(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "s3cret")
        assert JWTSettings().jwt_secret == "s3cret"


class TestTokenSettings:
    def test_default_lifetimes(self, monkeypatch):
        monkeypatch.delenv("VERIFICATION_TOKEN_TTL_SECONDS", raising=False)
        monkeypatch.delenv("RESET_TOKEN_TTL_SECONDS", raising=False)
        s = TokenSettings()
        assert s.verification_token_ttl_seconds == 24 * 3600
        assert s.reset_token_ttl_seconds == 3600
        assert s.token_bytes == 32

    def test_lifetime_override(self, monkeypatch):
        monkeypatch.setenv("RESET_TOKEN_TTL_SECONDS", "600")
        assert TokenSettings().reset_token_ttl_seconds == 600


# ---------------------------------------------------------------------------
# EmailSettings / LoggingSettings / SentrySettings
# ---------------------------------------------------------------------------


class TestEmailSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ZEPTO_API_TOKEN", raising=False)
        monkeypatch.delenv("FRONTEND_URL", raising=False)
        s = EmailSettings()
        assert s.zepto_api_token == ""
        assert s.email_timeout_seconds == 10.0
        assert s.frontend_url == "http://localhost:3000"

    def test_frontend_url_from_env(self, monkeypatch):
        monkeypatch.setenv("FRONTEND_URL", "https://idj.app")
        assert EmailSettings().frontend_url == "https://idj.app"


class TestLoggingSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        s = LoggingSettings()
        assert s.log_level == "INFO"
        assert s.log_format == "console"


class TestSentrySettings:
    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("SENTRY_DSN", raising=False)
        assert SentrySettings().sentry_dsn == ""


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


class TestAppSettings:
    def test_sub_configs_populated(self, with_mongo):
        s = AppSettings()
        assert isinstance(s.db, DatabaseSettings)
        assert isinstance(s.jwt, JWTSettings)
        assert isinstance(s.tokens, TokenSettings)
        assert isinstance(s.email, EmailSettings)
        assert isinstance(s.logging, LoggingSettings)
        assert isinstance(s.sentry, SentrySettings)

    def test_explicit_sub_config_kept(self, with_mongo):
        jwt = JWTSettings(jwt_secret="explicit")
        assert AppSettings(jwt=jwt).jwt.jwt_secret == "explicit"

    def test_signup_password_policy_off_by_default(self, with_mongo):
        with_mongo.delenv("ENFORCE_PASSWORD_POLICY_ON_SIGNUP", raising=False)
        assert AppSettings().enforce_password_policy_on_signup is False

    def test_signup_password_policy_opt_in(self, with_mongo):
        with_mongo.setenv("ENFORCE_PASSWORD_POLICY_ON_SIGNUP", "true")
        assert AppSettings().enforce_password_policy_on_signup is True

    @pytest.mark.parametrize(
        "env, expected",
        [("production", True), ("development", False)],
        ids=["production", "development"],
    )
    def test_is_production(self, with_mongo, env, expected):
        with_mongo.setenv("ENV", env)
        assert AppSettings().is_production is expected

    def test_missing_mongodb_uri_raises(self, monkeypatch):
        monkeypatch.delenv("MONGODB_URI", raising=False)
        with pytest.raises(PydanticValidationError):
            AppSettings()
