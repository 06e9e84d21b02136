"""Shared request dependencies."""

from __future__ import annotations

from fastapi import HTTPException, Request

from hoso.core.config import settings
from hoso.services.auth import verify_session_token


def has_admin_session(request: Request) -> bool:
    """Whether the request carries a valid admin session cookie."""
    return verify_session_token(request.cookies.get(settings.admin_cookie_name))


async def require_admin(request: Request) -> None:
    """Reject the request unless it comes from a logged-in admin.

    Disabled when ``admin_auth_enabled`` is false.
    """
    if not settings.admin_auth_enabled:
        return
    if not has_admin_session(request):
        raise HTTPException(status_code=401, detail="Không có quyền truy cập")


async def optional_admin(request: Request) -> bool:
    """True for admin requests, or always when admin auth is disabled."""
    return not settings.admin_auth_enabled or has_admin_session(request)
