"""Database models for Hoso."""

from hoso.db.models.enums import (
    STATUS_TRANSITIONS,
    ProfileStatus,
    Region,
    RenditionSize,
)
from hoso.db.models.profile import Profile
from hoso.db.models.profile_photo import ProfilePhoto
from hoso.db.models.profile_tag import ProfileTag
from hoso.db.models.tag import DEFAULT_TAG_COLOR, Tag

__all__ = [
    # Models
    "Profile",
    "ProfilePhoto",
    "ProfileTag",
    "Tag",
    # Enums
    "ProfileStatus",
    "Region",
    "RenditionSize",
    # Constants
    "DEFAULT_TAG_COLOR",
    "STATUS_TRANSITIONS",
]
