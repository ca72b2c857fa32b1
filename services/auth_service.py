"""
AuthService — local signup/login, OAuth login, email verification and
password reset.

Orchestrates UserRepository (credential store), TokenService (session JWTs
and one-time tokens) and an EmailSender. Route handlers stay thin: every rule
about who gets a session token, and which email failures are fatal, lives
here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from config import AppSettings
from errors import (
    AlreadyVerifiedError,
    AuthenticationError,
    ConflictError,
    EmailDeliveryError,
    EmailNotVerifiedError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    ValidationError,
)
from infrastructure.email.protocol import EmailSender
from repositories.user_repository import DuplicateIdentityError, UserRepository
from schemas.models.user import OAUTH_PROVIDERS, AuthProvider, UserDoc
from services.token_service import TokenService
from shared.crypto import burn_password_check, hash_token
from shared.generators import generate_username_suffix
from shared.logging import get_logger
from shared.validators import (
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    meets_minimum_password_policy,
    normalize_email,
    validate_email,
    validate_password,
    validate_username,
)

log = get_logger(__name__)

FORGOT_PASSWORD_MESSAGE = (
    "If an account exists with that email, a password reset link has been sent."
)

_OAUTH_USERNAME_ATTEMPTS = 5
_USERNAME_SUFFIX_LENGTH = 4
_GENERATED_USERNAME_LENGTH = 8
_USERNAME_STRIP_RE = re.compile(r"[^A-Za-z0-9._-]")


@dataclass
class AuthSession:
    """A user together with a freshly issued session token."""

    user: UserDoc
    token: str
    verification_sent: bool = False


def _email_conflict() -> ConflictError:
    return ConflictError("Email already registered", field="email")


def _username_conflict() -> ConflictError:
    return ConflictError("Username already taken", field="username")


class AuthService:
    def __init__(
        self,
        users: UserRepository,
        tokens: TokenService,
        email_sender: EmailSender,
        settings: AppSettings,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._email = email_sender
        self._settings = settings

    # ── Local signup / login ─────────────────────────────────────────────────

    async def signup(
        self,
        username: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> AuthSession:
        username = (username or "").strip()
        email = normalize_email(email or "")
        password = password or ""

        if not username or not email or not password:
            raise ValidationError("Please provide username, email and password")
        if not validate_email(email):
            raise ValidationError("Please provide a valid email", field="email")
        if not validate_username(username):
            raise ValidationError(
                f"Username must be 1-{USERNAME_MAX_LENGTH} characters of letters, "
                "numbers, dots, underscores or hyphens",
                field="username",
            )
        if self._settings.enforce_password_policy_on_signup:
            is_valid, missing = validate_password(password)
            if not is_valid:
                raise ValidationError(
                    "Password must contain: " + ", ".join(missing),
                    field="password",
                    details=missing,
                )

        existing = await self._users.find_by_email_or_username(email, username)
        if existing is not None:
            if existing.email == email:
                raise _email_conflict()
            raise _username_conflict()

        user = UserDoc.new_local(username, email, password)
        plaintext, pending = self._tokens.new_verification_token()
        user.email_verification = pending

        try:
            user = await self._users.create(user)
        except DuplicateIdentityError as e:
            raise await self._signup_race_conflict(e, email, username) from e

        log.info("user_signed_up", user_id=str(user.id), provider="local")
        session_token = self._tokens.issue_session_token(user.id)

        verification_sent = True
        try:
            await self._email.send_verification(user.email, plaintext, user.username)
        except EmailDeliveryError as e:
            verification_sent = False
            log.warning(
                "verification_email_failed",
                user_id=str(user.id),
                error=e.message,
                stage="signup",
            )

        return AuthSession(
            user=user,
            token=session_token,
            verification_sent=verification_sent,
        )

    async def _signup_race_conflict(
        self, error: DuplicateIdentityError, email: str, username: str
    ) -> ConflictError:
        if error.field == "email":
            return _email_conflict()
        if error.field == "username":
            return _username_conflict()
        winner = await self._users.find_by_email_or_username(email, username)
        if winner is not None and winner.email != email:
            return _username_conflict()
        return _email_conflict()

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthSession:
        email = normalize_email(email or "")
        password = password or ""
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = await self._users.find_by_email(email, AuthProvider.LOCAL)
        if user is None:
            burn_password_check(password)
            log.warning("login_failed", reason="unknown_email")
            raise AuthenticationError("Invalid email or password")

        if not user.check_password(password):
            log.warning("login_failed", reason="wrong_credentials", user_id=str(user.id))
            raise AuthenticationError("Invalid email or password")

        if not user.is_email_verified:
            log.info("login_blocked_unverified", user_id=str(user.id))
            raise EmailNotVerifiedError(
                "Please verify your email before logging in", field="email"
            )

        log.info("login_success", user_id=str(user.id), auth_method="password")
        return AuthSession(user=user, token=self._tokens.issue_session_token(user.id))

    # ── OAuth ────────────────────────────────────────────────────────────────

    async def oauth_login(
        self,
        email: Optional[str],
        username: Optional[str],
        provider: Optional[str],
        provider_id: Optional[str],
    ) -> AuthSession:
        """Find or create the user for an OAuth identity asserted by the client."""
        try:
            auth_provider = AuthProvider(provider or "")
        except ValueError:
            auth_provider = None
        if auth_provider not in OAUTH_PROVIDERS:
            raise ValidationError(
                "Provider must be one of: google, apple", field="provider"
            )

        provider_id = (provider_id or "").strip()
        if not provider_id:
            raise ValidationError("Provider ID is required", field="providerId")

        email = normalize_email(email) if email else None
        if email and not validate_email(email):
            raise ValidationError("Please provide a valid email", field="email")

        user = await self._users.find_oauth_user(auth_provider, email, provider_id)
        if user is not None:
            log.info(
                "login_success", user_id=str(user.id), auth_method=auth_provider.value
            )
            return AuthSession(user=user, token=self._tokens.issue_session_token(user.id))

        base = self._derive_username(username, email)
        user = await self._create_oauth_user(base, email, auth_provider, provider_id)
        log.info("user_signed_up", user_id=str(user.id), provider=auth_provider.value)
        return AuthSession(user=user, token=self._tokens.issue_session_token(user.id))

    @staticmethod
    def _derive_username(username: Optional[str], email: Optional[str]) -> str:
        """Supplied name, else the email local part, else a generated name.

        Characters outside [A-Za-z0-9._-] are dropped first, so a display
        name in a non-Latin script falls through to the next source.
        """
        sources = [username, email.split("@", 1)[0] if email else None]
        for source in sources:
            candidate = _USERNAME_STRIP_RE.sub("", (source or "").strip())
            if candidate:
                # leave room for a collision suffix
                return candidate[: USERNAME_MAX_LENGTH - _USERNAME_SUFFIX_LENGTH - 1]
        return f"user_{generate_username_suffix(_GENERATED_USERNAME_LENGTH)}"

    async def _create_oauth_user(
        self,
        base_username: str,
        email: Optional[str],
        provider: AuthProvider,
        provider_id: str,
    ) -> UserDoc:
        username = base_username
        for _ in range(_OAUTH_USERNAME_ATTEMPTS):
            user = UserDoc.new_oauth(username, email, provider, provider_id)
            try:
                return await self._users.create(user)
            except DuplicateIdentityError as e:
                # A concurrent request may have created this identity already.
                existing = await self._users.find_oauth_user(provider, email, provider_id)
                if existing is not None:
                    return existing
                log.info("oauth_username_taken", username=username, field=e.field)
                username = f"{base_username}_{generate_username_suffix(_USERNAME_SUFFIX_LENGTH)}"
        raise _username_conflict()

    # ── Email verification ───────────────────────────────────────────────────

    async def verify_email(self, token: Optional[str]) -> UserDoc:
        if not token:
            raise InvalidOrExpiredTokenError("Invalid or expired verification token")

        token_hash = hash_token(token)
        user = await self._users.find_by_verification_token_hash(token_hash)
        if user is not None:
            user = await self._users.mark_email_verified(user.id, token_hash)
        if user is None:
            log.info("email_verification_failed", reason="invalid_or_expired")
            raise InvalidOrExpiredTokenError("Invalid or expired verification token")

        log.info("email_verified", user_id=str(user.id))

        try:
            await self._email.send_welcome(user.email, user.username)
        except EmailDeliveryError as e:
            log.warning("welcome_email_failed", user_id=str(user.id), error=e.message)

        return user

    async def resend_verification(self, email: Optional[str]) -> None:
        email = normalize_email(email or "")
        if not email:
            raise ValidationError("Please provide an email", field="email")

        user = await self._users.find_by_email(email, AuthProvider.LOCAL)
        if user is None:
            raise NotFoundError("User not found")
        if user.is_email_verified:
            raise AlreadyVerifiedError("Email is already verified")

        plaintext, pending = self._tokens.new_verification_token()
        await self._users.store_verification_token(user.id, pending)

        try:
            await self._email.send_verification(user.email, plaintext, user.username)
        except EmailDeliveryError as e:
            log.error(
                "verification_email_failed",
                user_id=str(user.id),
                error=e.message,
                stage="resend",
            )
            raise
        log.info("verification_email_resent", user_id=str(user.id))

    # ── Password reset ───────────────────────────────────────────────────────

    async def forgot_password(self, email: Optional[str]) -> str:
        """Issue and mail a reset token when a local account matches.

        Returns the same message whether or not the account exists.
        """
        email = normalize_email(email or "")
        user = await self._users.find_by_email(email, AuthProvider.LOCAL) if email else None
        if user is None:
            log.info("password_reset_requested", matched=False)
            return FORGOT_PASSWORD_MESSAGE

        plaintext, pending = self._tokens.new_reset_token()
        await self._users.store_reset_token(user.id, pending)

        try:
            await self._email.send_password_reset(user.email, plaintext, user.username)
        except EmailDeliveryError as e:
            # a newer reset token issued meanwhile stays in place
            await self._users.clear_reset_token(user.id, pending.token_hash)
            log.error("password_reset_email_failed", user_id=str(user.id), error=e.message)
            return FORGOT_PASSWORD_MESSAGE

        log.info("password_reset_requested", matched=True, user_id=str(user.id))
        return FORGOT_PASSWORD_MESSAGE

    async def reset_password(self, token: Optional[str], password: Optional[str]) -> UserDoc:
        if not token:
            raise InvalidOrExpiredTokenError("Invalid or expired reset token")

        token_hash = hash_token(token)
        user = await self._users.find_by_reset_token_hash(token_hash)
        if user is None:
            log.info("password_reset_failed", reason="invalid_or_expired")
            raise InvalidOrExpiredTokenError("Invalid or expired reset token")

        if not meets_minimum_password_policy(password or ""):
            raise ValidationError(
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
                field="password",
            )

        user.set_password(password)
        user = await self._users.replace_password(user.id, token_hash, user.password_hash)
        if user is None:
            log.info("password_reset_failed", reason="token_consumed")
            raise InvalidOrExpiredTokenError("Invalid or expired reset token")
        log.info("password_reset_completed", user_id=str(user.id))
        return user
