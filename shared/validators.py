"""
Input validators — framework-agnostic, pure functions.

validate_password reports every rule the mobile client shows on its signup
screen; only the length floor (PASSWORD_MIN_LENGTH) is a hard server rule,
see meets_minimum_password_policy.
"""

from __future__ import annotations

import re

PASSWORD_MIN_LENGTH = 6
USERNAME_MAX_LENGTH = 30

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")
_SPECIAL_RE = re.compile(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]")


def normalize_email(email: str) -> str:
    """Lower-case and strip *email*."""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """Return True if *email* looks like ``local@domain.tld``."""
    return bool(_EMAIL_RE.match(email or ""))


def validate_username(username: str) -> bool:
    """Return True if *username* is 1..30 characters of ``[A-Za-z0-9._-]``."""
    if not username or len(username) > USERNAME_MAX_LENGTH:
        return False
    return bool(_USERNAME_RE.match(username))


def meets_minimum_password_policy(password: str) -> bool:
    """Return True if *password* has at least PASSWORD_MIN_LENGTH characters."""
    return len(password or "") >= PASSWORD_MIN_LENGTH


def validate_password(password: str) -> tuple[bool, list[str]]:
    """
    Check *password* against the full recommended policy.

    Returns:
        (is_valid, missing_requirements)
    """
    if not password:
        return False, ["Password is required"]

    missing = []
    if len(password) < PASSWORD_MIN_LENGTH:
        missing.append(f"At least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        missing.append("One uppercase letter")
    if not re.search(r"[a-z]", password):
        missing.append("One lowercase letter")
    if not re.search(r"[0-9]", password):
        missing.append("One number")
    if not _SPECIAL_RE.search(password):
        missing.append("One special character")

    return not missing, missing
