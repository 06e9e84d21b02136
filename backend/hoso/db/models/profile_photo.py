"""ProfilePhoto model for the images attached to a profile."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoso.db.base import Base

if TYPE_CHECKING:
    from hoso.db.models.profile import Profile


class ProfilePhoto(Base):
    """A processed photo and its renditions.

    All renditions share ``base_filename``; ``sizes`` maps each rendition
    name to ``{"url", "width", "height", "size"}``.
    """

    __tablename__ = "profile_photos"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    profile_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    url: Mapped[str] = mapped_column(String(512), nullable=False)
    base_filename: Mapped[str] = mapped_column(String(255), nullable=False)
    alt: Mapped[str] = mapped_column(String(255), nullable=False)
    caption: Mapped[str | None] = mapped_column(String(500), nullable=True)
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    format: Mapped[str] = mapped_column(String(16), nullable=False)
    bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    dominant_color: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_lcp: Mapped[bool] = mapped_column(Boolean, default=False)
    blur_data_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    sizes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    profile: Mapped[Profile] = relationship("Profile", back_populates="photos")

    __table_args__ = (
        Index("ix_profile_photos_profile_id", "profile_id"),
        Index("ix_profile_photos_base_filename", "base_filename"),
    )
