"""ProfileTag model holding the tags carried by a profile."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoso.db.base import Base

if TYPE_CHECKING:
    from hoso.db.models.profile import Profile


class ProfileTag(Base):
    """One tag on one profile, with its display text and slug."""

    __tablename__ = "profile_tags"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    profile_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, default=0)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False)

    profile: Mapped[Profile] = relationship("Profile", back_populates="tag_links")

    __table_args__ = (
        Index("ix_profile_tags_slug", "slug"),
        Index("ix_profile_tags_profile_id", "profile_id"),
    )
