"""Business logic services."""

from hoso.services.filters import FilterState, build_location, parse_location
from hoso.services.image import ImageTransformer, ImageTransformError
from hoso.services.profile import (
    ProfileNotFoundError,
    ProfilePage,
    ProfileService,
    ProfileValidationError,
)
from hoso.services.profile_query import InvalidFilterError, ProfileQuery
from hoso.services.tag import (
    TagConflictError,
    TagInUseError,
    TagNotFoundError,
    TagService,
    TagValidationError,
)
from hoso.services.upload import (
    ImageAccessError,
    ImageNotFoundError,
    UploadService,
    UploadValidationError,
)

__all__ = [
    "FilterState",
    "ImageAccessError",
    "ImageNotFoundError",
    "ImageTransformError",
    "ImageTransformer",
    "InvalidFilterError",
    "ProfileNotFoundError",
    "ProfilePage",
    "ProfileQuery",
    "ProfileService",
    "ProfileValidationError",
    "TagConflictError",
    "TagInUseError",
    "TagNotFoundError",
    "TagService",
    "TagValidationError",
    "UploadService",
    "UploadValidationError",
    "build_location",
    "parse_location",
]
