"""Profile model for the person listings."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoso.db.base import Base
from hoso.db.models.enums import ProfileStatus, Region

if TYPE_CHECKING:
    from hoso.db.models.profile_photo import ProfilePhoto
    from hoso.db.models.profile_tag import ProfileTag


class Profile(Base):
    """A person listing, browsable by region, province, occupation, age and tags."""

    __tablename__ = "profiles"

    # Primary key
    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # Descriptive attributes
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)
    weight: Mapped[int | None] = mapped_column(Integer, nullable=True)
    region: Mapped[Region] = mapped_column(Enum(Region), nullable=False)
    province: Mapped[str] = mapped_column(String(100), nullable=False)
    district: Mapped[str | None] = mapped_column(String(100), nullable=True)
    occupation: Mapped[str] = mapped_column(String(100), nullable=False)
    occupation_slug: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Publication state
    status: Mapped[ProfileStatus] = mapped_column(
        Enum(ProfileStatus), default=ProfileStatus.DRAFT
    )
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    featured_score: Mapped[int] = mapped_column(Integer, default=0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relationships (eager so async code never lazy-loads)
    tag_links: Mapped[list[ProfileTag]] = relationship(
        "ProfileTag",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="ProfileTag.position",
        lazy="selectin",
    )
    photos: Mapped[list[ProfilePhoto]] = relationship(
        "ProfilePhoto",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="ProfilePhoto.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_profiles_region_province", "region", "province"),
        Index("ix_profiles_occupation_slug", "occupation_slug"),
        Index("ix_profiles_status_published_at", "status", "published_at"),
        Index("ix_profiles_created_at", "created_at"),
        Index("ix_profiles_featured", "is_featured", "featured_score"),
    )

    @property
    def tags(self) -> list[str]:
        """Tag display names in their saved order."""
        return [link.name for link in self.tag_links]

    @property
    def tag_slugs(self) -> list[str]:
        """Tag slugs in their saved order."""
        return [link.slug for link in self.tag_links]
