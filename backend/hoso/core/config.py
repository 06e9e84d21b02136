"""Application configuration using pydantic-settings."""

from __future__ import annotations

import secrets
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="HOSO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Hoso"
    version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=3000, description="Server port")

    # Paths
    config_path: Path = Field(
        default=Path("./config"),
        description="Path for the SQLite database",
    )
    upload_path: Path = Field(
        default=Path("./public/uploads/images"),
        description="Root directory for processed image renditions",
    )
    originals_path: Path = Field(
        default=Path("./images"),
        description="Fallback directory for unprocessed source images",
    )

    # Uploads
    upload_max_size_mb: int = Field(default=10, ge=1, description="Maximum upload size in MB")
    upload_allowed_extensions: list[str] = Field(
        default=[".jpg", ".jpeg", ".png", ".webp"],
        description="Accepted image file extensions",
    )
    upload_allowed_content_types: list[str] = Field(
        default=["image/jpeg", "image/png", "image/webp"],
        description="Accepted image MIME types",
    )

    # Image processing
    image_quality: int = Field(default=85, ge=1, le=100, description="WebP quality for renditions")
    image_effort: int = Field(default=6, ge=0, le=6, description="WebP encoder method (0 fast - 6 best)")
    blur_size: int = Field(default=10, ge=2, le=64, description="Edge length of the blur placeholder")
    blur_quality: int = Field(default=20, ge=1, le=100, description="WebP quality for the blur placeholder")
    images_url_prefix: str = Field(
        default="/api/images",
        description="Public URL prefix for the image serving endpoint",
    )

    # Admin authentication
    admin_password_hash: str | None = Field(
        default=None,
        description="bcrypt hash of the admin password",
    )
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Key used to sign admin session cookies",
    )
    admin_cookie_name: str = "admin-token"
    admin_session_hours: int = Field(default=24, ge=1)
    admin_cookie_secure: bool = False
    admin_auth_enabled: bool = Field(
        default=True,
        description="Require the admin cookie for write endpoints",
    )

    # Listing
    default_page_size: int = Field(default=12, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1)
    browse_base_path: str = Field(
        default="/kham-pha",
        description="Base path of the public browse pages",
    )

    # CORS
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )

    @property
    def db_path(self) -> Path:
        """Get the SQLite database file path."""
        return self.config_path / "hoso.db"

    @property
    def upload_max_size_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.upload_max_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()
