"""Admin authentication: password check and signed session tokens.

The session cookie holds ``{issued_at}.{signature}`` where the signature is
an HMAC-SHA256 of the issue timestamp keyed with ``settings.secret_key``.
"""

from __future__ import annotations

import hashlib
import hmac
import time

import bcrypt

from hoso.core.config import settings
from hoso.core.logging import get_logger

logger = get_logger(__name__)


class AuthError(Exception):
    """Base exception for admin authentication."""

    pass


class AuthConfigError(AuthError):
    """Raised when no admin password hash is configured."""

    pass


class InvalidCredentialsError(AuthError):
    """Raised when the password is missing or wrong."""

    pass


def verify_password(password: str | None) -> None:
    """Check a password against the configured bcrypt hash.

    Raises:
        InvalidCredentialsError: If the password is empty or does not match.
        AuthConfigError: If no hash is configured.
    """
    if not password:
        raise InvalidCredentialsError("Vui lòng nhập mật khẩu")

    password_hash = settings.admin_password_hash
    if not password_hash:
        logger.error("admin_password_hash_missing")
        raise AuthConfigError("Cấu hình admin chưa được thiết lập")

    try:
        matches = bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as e:
        logger.error("admin_password_hash_invalid", error=str(e))
        raise AuthConfigError("Cấu hình admin chưa được thiết lập") from e

    if not matches:
        logger.warning("admin_login_failed")
        raise InvalidCredentialsError("Mật khẩu không đúng")


def _sign(payload: str) -> str:
    return hmac.new(
        settings.secret_key.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()


def create_session_token(issued_at: int | None = None) -> str:
    """Create a signed admin session token."""
    issued = str(int(issued_at if issued_at is not None else time.time()))
    return f"{issued}.{_sign(issued)}"


def verify_session_token(token: str | None, now: float | None = None) -> bool:
    """Whether a session token has a valid signature and has not expired."""
    if not token or "." not in token:
        return False

    issued, signature = token.split(".", 1)
    if not issued.isdigit():
        return False
    if not hmac.compare_digest(signature, _sign(issued)):
        return False

    age_seconds = (now if now is not None else time.time()) - int(issued)
    return 0 <= age_seconds <= session_max_age()


def session_max_age() -> int:
    """Session lifetime in seconds."""
    return settings.admin_session_hours * 3600
