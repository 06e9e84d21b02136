"""Pytest configuration and fixtures."""

import os
import shutil
import tempfile
from io import BytesIO
from pathlib import Path

import bcrypt
import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Create a temporary directory for test paths
_test_tmp_dir = tempfile.mkdtemp(prefix="hoso_test_")

ADMIN_PASSWORD = "secret"

# Set config BEFORE importing hoso modules
os.environ["HOSO_CONFIG_PATH"] = str(Path(_test_tmp_dir) / "config")
os.environ["HOSO_UPLOAD_PATH"] = str(Path(_test_tmp_dir) / "uploads")
os.environ["HOSO_ORIGINALS_PATH"] = str(Path(_test_tmp_dir) / "originals")
os.environ["HOSO_SECRET_KEY"] = "test-secret-key"
os.environ["HOSO_ADMIN_PASSWORD_HASH"] = bcrypt.hashpw(
    ADMIN_PASSWORD.encode(), bcrypt.gensalt(rounds=4)
).decode()

from hoso.core.config import settings  # noqa: E402
from hoso.db import configure_sqlite_engine, get_db  # noqa: E402
from hoso.db.base import Base  # noqa: E402
from hoso.main import app  # noqa: E402
from hoso.services.auth import create_session_token  # noqa: E402


@pytest.fixture
async def db_engine():
    """Create an in-memory test database engine."""
    engine = configure_sqlite_engine(
        create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            echo=False,
            poolclass=StaticPool,
        )
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with async_session() as session:
        yield session


@pytest.fixture(autouse=True)
def media_dirs(tmp_path, monkeypatch):
    """Point upload and originals roots at per-test directories."""
    upload_path = tmp_path / "uploads"
    originals_path = tmp_path / "originals"
    upload_path.mkdir()
    originals_path.mkdir()
    monkeypatch.setattr(settings, "upload_path", upload_path)
    monkeypatch.setattr(settings, "originals_path", originals_path)
    return upload_path, originals_path


@pytest.fixture
async def client(db_engine):
    """Create a test client with overridden database dependency."""
    async_session = async_sessionmaker(
        db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_client(client):
    """Test client carrying a valid admin session cookie."""
    client.cookies.set(settings.admin_cookie_name, create_session_token())
    return client


def make_image_bytes(
    size: tuple[int, int] = (1000, 600),
    color: tuple[int, ...] = (200, 30, 30),
    fmt: str = "JPEG",
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-colour image in memory."""
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A 1000x600 solid red JPEG."""
    return make_image_bytes()


def pytest_sessionfinish(session, exitstatus):
    """Clean up temp directories after test session."""
    if Path(_test_tmp_dir).exists():
        shutil.rmtree(_test_tmp_dir, ignore_errors=True)
