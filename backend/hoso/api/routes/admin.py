"""Admin session endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from hoso.api.deps import has_admin_session
from hoso.core.config import settings
from hoso.core.logging import get_logger
from hoso.schemas.admin import LoginRequest, LoginResponse, VerifyResponse
from hoso.services.auth import (
    AuthConfigError,
    InvalidCredentialsError,
    create_session_token,
    session_max_age,
    verify_password,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
async def login(payload: LoginRequest, response: Response) -> LoginResponse:
    """Check the admin password and set the session cookie."""
    try:
        verify_password(payload.password)
    except InvalidCredentialsError as e:
        status_code = 400 if not payload.password else 401
        raise HTTPException(status_code=status_code, detail=str(e))
    except AuthConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))

    response.set_cookie(
        key=settings.admin_cookie_name,
        value=create_session_token(),
        max_age=session_max_age(),
        httponly=True,
        secure=settings.admin_cookie_secure,
        samesite="lax",
        path="/",
    )
    logger.info("admin_logged_in")
    return LoginResponse()


@router.get("/verify", response_model=VerifyResponse)
async def verify(request: Request) -> VerifyResponse:
    """Confirm the request carries a valid admin session."""
    if not has_admin_session(request):
        raise HTTPException(status_code=401, detail="Không có quyền truy cập")
    return VerifyResponse()


@router.post("/logout", response_model=LoginResponse)
async def logout(response: Response) -> LoginResponse:
    """Clear the admin session cookie."""
    response.delete_cookie(key=settings.admin_cookie_name, path="/")
    return LoginResponse()
