"""Pydantic schemas for admin authentication."""

from __future__ import annotations

from hoso.schemas.common import ApiModel


class LoginRequest(ApiModel):
    """Admin login body."""

    password: str | None = None


class LoginResponse(ApiModel):
    success: bool = True


class VerifyResponse(ApiModel):
    authenticated: bool = True
