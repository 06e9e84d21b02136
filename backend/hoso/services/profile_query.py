"""Typed query builder for profile listings.

Each filter dimension is a small frozen dataclass that renders exactly one
SQLAlchemy clause, so every combination of filters is an explicit value
that can be built, compared and tested without touching the database.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Union

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from hoso.db.models import Profile, ProfileStatus, ProfileTag, Region
from hoso.taxonomy import find_province, find_region
from hoso.utils.slug import to_slug


class InvalidFilterError(ValueError):
    """Raised when a filter parameter cannot be interpreted."""

    pass


# ========== Age ranges ==========

UNDER_PREFIX = "duoi"
OVER_PREFIX = "tren"

_RANGE_TOKEN = re.compile(r"^(\d{1,3})-(\d{1,3})$")
_OPEN_TOKEN = re.compile(rf"^({UNDER_PREFIX}|{OVER_PREFIX})-(\d{{1,3}})$")


@dataclass(frozen=True)
class AgeRange:
    """Inclusive age bounds; ``None`` leaves a side open."""

    min_age: int | None = None
    max_age: int | None = None

    def __post_init__(self) -> None:
        if (
            self.min_age is not None
            and self.max_age is not None
            and self.min_age > self.max_age
        ):
            raise InvalidFilterError("Khoảng tuổi không hợp lệ")

    @property
    def is_open(self) -> bool:
        return self.min_age is None and self.max_age is None


def parse_age_token(token: str | None) -> AgeRange | None:
    """Parse ``18-22``, ``duoi-18`` (17 and under) or ``tren-35`` (36 and over).

    Returns ``None`` for anything else.
    """
    if not token:
        return None
    token = token.strip().lower()

    match = _OPEN_TOKEN.match(token)
    if match:
        bound = int(match.group(2))
        if match.group(1) == UNDER_PREFIX:
            return AgeRange(max_age=bound - 1)
        return AgeRange(min_age=bound + 1)

    match = _RANGE_TOKEN.match(token)
    if match:
        low, high = int(match.group(1)), int(match.group(2))
        if low > high:
            return None
        return AgeRange(min_age=low, max_age=high)

    return None


def format_age_token(age_range: AgeRange | None) -> str | None:
    """Inverse of ``parse_age_token``."""
    if age_range is None or age_range.is_open:
        return None
    if age_range.min_age is None:
        return f"{UNDER_PREFIX}-{age_range.max_age + 1}"
    if age_range.max_age is None:
        return f"{OVER_PREFIX}-{age_range.min_age - 1}"
    return f"{age_range.min_age}-{age_range.max_age}"


# ========== Filter dimensions ==========


@dataclass(frozen=True)
class StatusFilter:
    status: ProfileStatus

    def clause(self) -> ColumnElement[bool]:
        return Profile.status == self.status


@dataclass(frozen=True)
class RegionFilter:
    region: Region

    def clause(self) -> ColumnElement[bool]:
        return Profile.region == self.region


@dataclass(frozen=True)
class ProvinceFilter:
    province: str

    def clause(self) -> ColumnElement[bool]:
        return Profile.province == self.province


@dataclass(frozen=True)
class OccupationFilter:
    occupation_slug: str

    def clause(self) -> ColumnElement[bool]:
        return Profile.occupation_slug == self.occupation_slug


@dataclass(frozen=True)
class TagFilter:
    """Matches profiles carrying any of the tag slugs."""

    slugs: tuple[str, ...]

    def clause(self) -> ColumnElement[bool]:
        return Profile.id.in_(
            select(ProfileTag.profile_id).where(ProfileTag.slug.in_(self.slugs))
        )


@dataclass(frozen=True)
class AgeFilter:
    age_range: AgeRange

    def clause(self) -> ColumnElement[bool]:
        low, high = self.age_range.min_age, self.age_range.max_age
        if low is not None and high is not None:
            return Profile.age.between(low, high)
        if low is not None:
            return Profile.age >= low
        return Profile.age <= high


@dataclass(frozen=True)
class FeaturedFilter:
    def clause(self) -> ColumnElement[bool]:
        return Profile.is_featured.is_(True)


@dataclass(frozen=True)
class ExcludeFilter:
    profile_id: str

    def clause(self) -> ColumnElement[bool]:
        return Profile.id != self.profile_id


ProfileFilter = Union[
    StatusFilter,
    RegionFilter,
    ProvinceFilter,
    OccupationFilter,
    TagFilter,
    AgeFilter,
    FeaturedFilter,
    ExcludeFilter,
]


@dataclass(frozen=True)
class ProfileQuery:
    """A composed set of profile filters. Unset dimensions do not filter."""

    status: StatusFilter | None = field(
        default_factory=lambda: StatusFilter(ProfileStatus.PUBLISHED)
    )
    region: RegionFilter | None = None
    province: ProvinceFilter | None = None
    occupation: OccupationFilter | None = None
    tags: TagFilter | None = None
    age: AgeFilter | None = None
    featured: FeaturedFilter | None = None
    exclude: ExcludeFilter | None = None

    def filters(self) -> list[ProfileFilter]:
        """Active filter dimensions in a fixed order."""
        candidates = (
            self.status,
            self.region,
            self.province,
            self.occupation,
            self.tags,
            self.age,
            self.featured,
            self.exclude,
        )
        return [f for f in candidates if f is not None]

    def clauses(self) -> list[ColumnElement[bool]]:
        return [f.clause() for f in self.filters()]

    def apply(self, statement: Select) -> Select:
        """Add every active clause to a select statement."""
        for clause in self.clauses():
            statement = statement.where(clause)
        return statement

    @classmethod
    def from_params(
        cls,
        *,
        status: str | ProfileStatus | None = None,
        region: str | None = None,
        province: str | None = None,
        occupation: str | None = None,
        tags: str | list[str] | None = None,
        age: str | None = None,
        age_min: int | None = None,
        age_max: int | None = None,
        featured: bool = False,
        exclude: str | None = None,
    ) -> ProfileQuery:
        """Build a query from raw request values.

        Without any age value no age filter applies; there is no implicit
        18 to 50 window.

        Args:
            status: A status value, ``"all"`` for no status filter, or
                ``None`` for published only.
            region: Region code (``bac``), slug (``mien-bac``), name or enum name.
            province: Province slug or name; unknown values match literally.
            occupation: Occupation name or slug.
            tags: Comma-separated string or list of tag names or slugs.
            age: Age token; takes precedence over ``age_min``/``age_max``.
            age_min: Inclusive lower bound.
            age_max: Inclusive upper bound.
            featured: Only featured profiles.
            exclude: Profile ID to leave out.

        Raises:
            InvalidFilterError: For an unknown region or status, or a
                malformed age range.
        """
        status_filter: StatusFilter | None
        if status is None or status == "":
            status_filter = StatusFilter(ProfileStatus.PUBLISHED)
        elif isinstance(status, ProfileStatus):
            status_filter = StatusFilter(status)
        elif status.strip().lower() == "all":
            status_filter = None
        else:
            try:
                status_filter = StatusFilter(ProfileStatus(status.strip().lower()))
            except ValueError:
                raise InvalidFilterError(f"Trạng thái không hợp lệ: {status}") from None

        region_filter = None
        if region:
            info = find_region(region)
            if info is None:
                raise InvalidFilterError(f"Miền không hợp lệ: {region}")
            region_filter = RegionFilter(info.region)

        province_filter = None
        if province and province.strip():
            known = find_province(province)
            province_filter = ProvinceFilter(known.name if known else province.strip())

        occupation_filter = None
        if occupation and to_slug(occupation):
            occupation_filter = OccupationFilter(to_slug(occupation))

        tag_filter = None
        if tags:
            raw = tags.split(",") if isinstance(tags, str) else tags
            slugs = tuple(dict.fromkeys(s for s in (to_slug(t) for t in raw) if s))
            if slugs:
                tag_filter = TagFilter(slugs)

        age_filter = None
        if age:
            age_range = parse_age_token(age)
            if age_range is None:
                raise InvalidFilterError(f"Khoảng tuổi không hợp lệ: {age}")
            age_filter = AgeFilter(age_range)
        elif age_min is not None or age_max is not None:
            age_filter = AgeFilter(AgeRange(min_age=age_min, max_age=age_max))

        return cls(
            status=status_filter,
            region=region_filter,
            province=province_filter,
            occupation=occupation_filter,
            tags=tag_filter,
            age=age_filter,
            featured=FeaturedFilter() if featured else None,
            exclude=ExcludeFilter(exclude) if exclude and exclude != "undefined" else None,
        )
