"""Enum types for database models."""

from __future__ import annotations

import enum


class ProfileStatus(str, enum.Enum):
    """Publication status of a profile."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Region(str, enum.Enum):
    """The three regions of Vietnam a profile can belong to."""

    NORTH = "Miền Bắc"
    CENTRAL = "Miền Trung"
    SOUTH = "Miền Nam"


class RenditionSize(str, enum.Enum):
    """Named sizes produced for every uploaded image."""

    THUMBNAIL = "thumbnail"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ORIGINAL = "original"


# Allowed status transitions. Same-status saves are always accepted.
STATUS_TRANSITIONS: dict[ProfileStatus, set[ProfileStatus]] = {
    ProfileStatus.DRAFT: {ProfileStatus.PUBLISHED},
    ProfileStatus.PUBLISHED: {ProfileStatus.ARCHIVED},
    ProfileStatus.ARCHIVED: set(),
}
