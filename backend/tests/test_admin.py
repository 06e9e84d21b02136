"""Tests for admin authentication."""

from __future__ import annotations

import time

import pytest
from httpx import AsyncClient

from conftest import ADMIN_PASSWORD
from hoso.core.config import settings
from hoso.services.auth import (
    AuthConfigError,
    InvalidCredentialsError,
    create_session_token,
    session_max_age,
    verify_password,
    verify_session_token,
)


# =============================================================================
# Password and session tokens
# =============================================================================


class TestVerifyPassword:
    def test_correct_password(self) -> None:
        verify_password(ADMIN_PASSWORD)

    def test_wrong_password(self) -> None:
        with pytest.raises(InvalidCredentialsError, match="Mật khẩu không đúng"):
            verify_password("wrong")

    @pytest.mark.parametrize("password", [None, ""])
    def test_empty_password(self, password) -> None:
        with pytest.raises(InvalidCredentialsError, match="Vui lòng nhập mật khẩu"):
            verify_password(password)

    def test_missing_hash(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "admin_password_hash", None)
        with pytest.raises(AuthConfigError):
            verify_password(ADMIN_PASSWORD)

    def test_malformed_hash(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "admin_password_hash", "not-a-bcrypt-hash")
        with pytest.raises(AuthConfigError):
            verify_password(ADMIN_PASSWORD)


class TestSessionToken:
    def test_fresh_token_is_valid(self) -> None:
        assert verify_session_token(create_session_token())

    def test_expired_token(self) -> None:
        issued = int(time.time()) - session_max_age() - 1
        assert not verify_session_token(create_session_token(issued_at=issued))

    def test_token_from_the_future(self) -> None:
        issued = int(time.time()) + 3600
        assert not verify_session_token(create_session_token(issued_at=issued))

    def test_tampered_token(self) -> None:
        issued, signature = create_session_token().split(".")
        assert not verify_session_token(f"{int(issued) + 1}.{signature}")
        flipped = "1" if signature.endswith("0") else "0"
        assert not verify_session_token(f"{issued}.{signature[:-1]}{flipped}")

    @pytest.mark.parametrize("token", [None, "", "abc", "abc.def", ".sig"])
    def test_malformed_token(self, token) -> None:
        assert not verify_session_token(token)

    def test_signature_depends_on_secret(self, monkeypatch) -> None:
        token = create_session_token()
        monkeypatch.setattr(settings, "secret_key", "another-secret")
        assert not verify_session_token(token)


# =============================================================================
# API
# =============================================================================


class TestAdminApi:
    async def test_login_verify_logout(self, client: AsyncClient) -> None:
        assert (await client.get("/api/admin/verify")).status_code == 401

        response = await client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 200
        assert response.json() == {"success": True}

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith(f"{settings.admin_cookie_name}=")
        assert "HttpOnly" in set_cookie
        assert "samesite=lax" in set_cookie.lower()

        response = await client.get("/api/admin/verify")
        assert response.status_code == 200
        assert response.json() == {"authenticated": True}

        response = await client.post("/api/admin/logout")
        assert response.json() == {"success": True}
        assert (await client.get("/api/admin/verify")).status_code == 401

    async def test_wrong_password(self, client: AsyncClient) -> None:
        response = await client.post("/api/admin/login", json={"password": "wrong"})
        assert response.status_code == 401
        assert response.json() == {"error": "Mật khẩu không đúng"}
        assert "set-cookie" not in response.headers

    async def test_missing_password(self, client: AsyncClient) -> None:
        response = await client.post("/api/admin/login", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Vui lòng nhập mật khẩu"}

    async def test_unconfigured(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(settings, "admin_password_hash", None)
        response = await client.post("/api/admin/login", json={"password": ADMIN_PASSWORD})
        assert response.status_code == 500
        assert response.json() == {"error": "Cấu hình admin chưa được thiết lập"}

    async def test_forged_cookie_is_rejected(self, client: AsyncClient) -> None:
        client.cookies.set(settings.admin_cookie_name, "123.forged")
        assert (await client.get("/api/admin/verify")).status_code == 401
        assert (await client.post("/api/tags", json={"name": "A"})).status_code == 401

    async def test_auth_can_be_disabled(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(settings, "admin_auth_enabled", False)
        response = await client.post("/api/tags", json={"name": "Yêu mèo"})
        assert response.status_code == 201
        response = await client.get("/api/profiles", params={"status": "draft"})
        assert response.status_code == 200
