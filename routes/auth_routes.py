"""
Authentication endpoints.

POST /auth/signup                 — local signup, returns a session token (201)
POST /auth/login                  — local login (verified accounts only)
POST /auth/oauth                  — Google / Apple login or signup
GET  /auth/verify-email/{token}   — consume an email verification token
POST /auth/resend-verification    — issue and mail a new verification token
POST /auth/forgot-password        — mail a reset link (uniform response)
POST /auth/reset-password/{token} — set a new password with a reset token
GET  /auth/me                     — the authenticated user
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_auth_service, protect
from schemas.dto.requests.auth import (
    EmailRequest,
    LoginRequest,
    OAuthLoginRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from schemas.dto.responses.auth import AuthResponse, CurrentUserResponse, UserResponse
from schemas.dto.responses.common import MessageResponse
from schemas.models.user import UserDoc
from services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])

SIGNUP_MESSAGE = (
    "User registered successfully. Please check your email to verify your account."
)
SIGNUP_EMAIL_FAILED_MESSAGE = (
    "User registered successfully, but the verification email could not be sent. "
    "Please request a new verification email."
)


@router.post("/signup", status_code=201, response_model=AuthResponse)
async def signup(
    body: SignupRequest, auth: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Register a local account.

    The session token is issued immediately, but login stays blocked until
    the email address is verified.
    """
    result = await auth.signup(body.username, body.email, body.password)
    return AuthResponse(
        user=UserResponse.from_doc(result.user),
        token=result.token,
        message=SIGNUP_MESSAGE if result.verification_sent else SIGNUP_EMAIL_FAILED_MESSAGE,
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest, auth: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    result = await auth.login(body.email, body.password)
    return AuthResponse(user=UserResponse.from_doc(result.user), token=result.token)


@router.post("/oauth", response_model=AuthResponse)
async def oauth_login(
    body: OAuthLoginRequest, auth: AuthService = Depends(get_auth_service)
) -> AuthResponse:
    """
    Log in (or sign up) with an identity asserted by the mobile client after
    the provider's sign-in flow. OAuth accounts are created verified.
    """
    result = await auth.oauth_login(
        body.email, body.username, body.provider, body.provider_id
    )
    return AuthResponse(user=UserResponse.from_doc(result.user), token=result.token)


@router.get("/verify-email/{token}", response_model=MessageResponse)
async def verify_email(
    token: str, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.verify_email(token)
    return MessageResponse(message="Email verified successfully. You can now log in.")


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    body: EmailRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth.resend_verification(body.email)
    return MessageResponse(message="Verification email sent. Please check your inbox.")


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: EmailRequest, auth: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    message = await auth.forgot_password(body.email)
    return MessageResponse(message=message)


@router.post("/reset-password/{token}", response_model=MessageResponse)
async def reset_password(
    token: str,
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    await auth.reset_password(token, body.password)
    return MessageResponse(
        message="Password reset successfully. You can now log in with your new password."
    )


@router.get("/me", response_model=CurrentUserResponse)
async def me(user: UserDoc = Depends(protect)) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserResponse.from_doc(user))
