"""Profile service: listing, CRUD and the normalisation applied on every write."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.core.config import settings
from hoso.core.logging import get_logger
from hoso.db.models import (
    STATUS_TRANSITIONS,
    Profile,
    ProfilePhoto,
    ProfileStatus,
    ProfileTag,
    Region,
)
from hoso.schemas.profile import PhotoSchema, ProfileCreate, ProfileUpdate
from hoso.services.profile_query import ProfileQuery
from hoso.services.tag import TagService
from hoso.services.upload import UploadError, UploadService
from hoso.taxonomy import DEFAULT_OCCUPATIONS, find_province, find_region
from hoso.utils.slug import generate_profile_slug, to_slug

logger = get_logger(__name__)

# Columns an update leaves untouched when the payload sends an explicit null
REQUIRED_FIELDS = frozenset({"name", "age", "occupation", "is_featured", "featured_score"})


class ProfileError(Exception):
    """Error during profile operations."""

    pass


class ProfileNotFoundError(ProfileError):
    """Raised when a profile does not exist or is not visible."""

    pass


class ProfileValidationError(ProfileError):
    """Raised when profile input is inconsistent."""

    pass


@dataclass
class ProfilePage:
    """One page of a profile listing."""

    items: list[Profile]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


class ProfileService:
    """Service for reading and writing profiles.

    Every write passes through the same normalisation: canonical region and
    province, ``occupation_slug`` derived from the occupation, tag slugs
    derived from tag names, and a tag count resync for the tags involved.
    """

    def __init__(
        self,
        db: AsyncSession,
        tag_service: TagService | None = None,
        upload_service: UploadService | None = None,
    ):
        """Initialize the profile service.

        Args:
            db: The database session.
            tag_service: Tag service sharing the same session.
            upload_service: Used to remove renditions of deleted profiles.
        """
        self.db = db
        self.tags = tag_service or TagService(db)
        self.uploads = upload_service or UploadService()

    # ========== Queries ==========

    async def list_profiles(
        self,
        query: ProfileQuery | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> ProfilePage:
        """List profiles newest first.

        Args:
            query: Filters to apply. Defaults to published profiles only.
            page: 1-based page number.
            limit: Page size, capped at ``max_page_size``.
        """
        query = query or ProfileQuery()
        page = max(page, 1)
        limit = limit or settings.default_page_size
        limit = max(1, min(limit, settings.max_page_size))

        total_result = await self.db.execute(
            query.apply(select(func.count(Profile.id)))
        )
        total = total_result.scalar() or 0

        result = await self.db.execute(
            query.apply(select(Profile))
            .order_by(Profile.created_at.desc(), Profile.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        items = list(result.scalars().all())

        return ProfilePage(items=items, total=total, page=page, limit=limit)

    async def get_profile(self, slug: str, include_unpublished: bool = False) -> Profile:
        """Get a profile by slug.

        Raises:
            ProfileNotFoundError: If missing, or not published and
                ``include_unpublished`` is false.
        """
        if not slug:
            raise ProfileValidationError("Slug không được cung cấp")

        result = await self.db.execute(select(Profile).where(Profile.slug == slug))
        profile = result.scalar_one_or_none()

        if profile is None:
            raise ProfileNotFoundError("Không tìm thấy hồ sơ")
        if profile.status != ProfileStatus.PUBLISHED and not include_unpublished:
            raise ProfileNotFoundError("Không tìm thấy hồ sơ")
        return profile

    async def list_occupations(self) -> list[str]:
        """Occupations of published profiles merged with the default list."""
        result = await self.db.execute(
            select(Profile.occupation)
            .where(Profile.status == ProfileStatus.PUBLISHED)
            .distinct()
        )
        used = {occ for occ in result.scalars().all() if occ}
        return sorted(used | set(DEFAULT_OCCUPATIONS))

    # ========== Writes ==========

    async def create_profile(self, data: ProfileCreate) -> Profile:
        """Create a profile with a unique slug.

        Raises:
            ProfileValidationError: On an unknown province or region, a
                region/province mismatch, or an archived initial status.
        """
        region, province = self._resolve_location(data.region, data.province)

        if data.status == ProfileStatus.ARCHIVED:
            raise ProfileValidationError("Không thể tạo hồ sơ ở trạng thái lưu trữ")

        base_slug = generate_profile_slug(
            data.name, data.age, data.occupation, province, district=data.district
        )
        slug = await self._unique_slug(base_slug)

        profile = Profile(
            slug=slug,
            name=data.name.strip(),
            age=data.age,
            height=data.height,
            weight=data.weight,
            region=region,
            province=province,
            district=data.district.strip() if data.district else None,
            occupation=data.occupation.strip(),
            description=data.description,
            status=data.status,
            is_featured=data.is_featured,
            featured_score=data.featured_score,
            published_at=(
                datetime.now(timezone.utc)
                if data.status == ProfileStatus.PUBLISHED
                else None
            ),
        )
        self._normalize(profile, tags=data.tags)
        self._set_photos(profile, data.photos)

        self.db.add(profile)
        await self.db.flush()

        errors = await self.tags.sync_tags_from_profile(profile.tags)
        await self.db.refresh(profile)

        logger.info(
            "profile_created",
            profile_id=profile.id,
            slug=slug,
            status=profile.status.value,
            tags=len(profile.tag_links),
            tag_sync_errors=errors,
        )
        return profile

    async def update_profile(self, slug: str, data: ProfileUpdate) -> Profile:
        """Apply a partial update. The slug never changes.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
            ProfileValidationError: On invalid location or status transition.
        """
        profile = await self.get_profile(slug, include_unpublished=True)
        updates = data.model_dump(exclude_unset=True)

        old_tags = list(profile.tags)
        status_changed = False

        if "region" in updates or "province" in updates:
            region_value = updates.pop("region", None)
            province_value = updates.pop("province", None) or profile.province
            if region_value is None and "province" not in data.model_fields_set:
                region_value = profile.region
            profile.region, profile.province = self._resolve_location(
                region_value, province_value
            )

        if "status" in updates:
            new_status = updates.pop("status")
            if new_status is not None:
                status_changed = self._apply_status(profile, new_status)

        new_tags = updates.pop("tags", None)
        if "photos" in updates:
            updates.pop("photos")
            self._set_photos(profile, data.photos or [])

        for field_name in ("name", "occupation", "district", "description"):
            if field_name in updates and isinstance(updates[field_name], str):
                updates[field_name] = updates[field_name].strip() or None

        for field_name, value in updates.items():
            if field_name in REQUIRED_FIELDS and value is None:
                continue
            setattr(profile, field_name, value)

        self._normalize(profile, tags=new_tags)
        await self.db.flush()

        tags_changed = new_tags is not None and new_tags != old_tags
        if tags_changed or status_changed:
            names = list(dict.fromkeys(old_tags + profile.tags))
            await self.tags.sync_tags_from_profile(names)

        await self.db.refresh(profile)

        logger.info(
            "profile_updated",
            profile_id=profile.id,
            slug=profile.slug,
            fields=sorted(data.model_fields_set),
            status_changed=status_changed,
        )
        return profile

    async def delete_profile(self, slug: str) -> list[str]:
        """Delete a profile and resync its tags.

        Photo files stay on disk; pass the returned base filenames to
        ``remove_photo_files`` once the deletion is committed.

        Returns:
            Base filenames of the profile's photos.

        Raises:
            ProfileNotFoundError: If the profile does not exist.
        """
        profile = await self.get_profile(slug, include_unpublished=True)
        tag_names = list(profile.tags)
        base_filenames = [p.base_filename for p in profile.photos if p.base_filename]
        profile_id = profile.id

        await self.db.delete(profile)
        await self.db.flush()

        if tag_names:
            await self.tags.sync_tags_from_profile(tag_names)

        logger.info("profile_deleted", profile_id=profile_id, slug=slug)
        return base_filenames

    async def remove_photo_files(self, base_filenames: list[str]) -> int:
        """Remove the renditions of deleted photos. Failures are logged."""
        removed = 0
        for base_filename in base_filenames:
            try:
                removed += await self.uploads.delete_renditions(base_filename)
            except (UploadError, OSError) as e:
                logger.warning(
                    "profile_photo_cleanup_failed",
                    base_filename=base_filename,
                    error=str(e),
                )
        logger.debug("profile_photos_removed", files_removed=removed)
        return removed

    # ========== Helpers ==========

    def _resolve_location(
        self, region_value: str | Region | None, province_value: str
    ) -> tuple[Region, str]:
        """Canonical region and province for a write."""
        province = find_province(province_value)
        if province is None:
            raise ProfileValidationError(
                f"Tỉnh/thành phố không hợp lệ: {province_value}"
            )

        if region_value is None or region_value == "":
            return province.region, province.name

        region = find_region(region_value)
        if region is None:
            raise ProfileValidationError(f"Miền không hợp lệ: {region_value}")
        if region.region is not province.region:
            raise ProfileValidationError(
                f"{province.name} không thuộc {region.name}"
            )
        return region.region, province.name

    def _apply_status(self, profile: Profile, new_status: ProfileStatus) -> bool:
        """Move a profile to a new status. Returns whether it changed."""
        if new_status == profile.status:
            return False
        if new_status not in STATUS_TRANSITIONS[profile.status]:
            raise ProfileValidationError(
                f"Không thể chuyển trạng thái từ {profile.status.value} sang {new_status.value}"
            )
        profile.status = new_status
        if new_status == ProfileStatus.PUBLISHED and profile.published_at is None:
            profile.published_at = datetime.now(timezone.utc)
        return True

    def _normalize(self, profile: Profile, tags: list[str] | None = None) -> None:
        """Recompute derived slugs; replace tags when ``tags`` is given."""
        profile.occupation_slug = to_slug(profile.occupation)

        if tags is None:
            return

        links: list[ProfileTag] = []
        seen: set[str] = set()
        for name in tags:
            name = name.strip()
            slug = to_slug(name)
            if not slug or slug in seen:
                continue
            seen.add(slug)
            links.append(ProfileTag(position=len(links), name=name, slug=slug))
        profile.tag_links = links

    def _set_photos(self, profile: Profile, photos: list[PhotoSchema]) -> None:
        profile.photos = [
            ProfilePhoto(position=index, **self._photo_fields(photo))
            for index, photo in enumerate(photos)
        ]

    @staticmethod
    def _photo_fields(photo: PhotoSchema) -> dict[str, Any]:
        return photo.model_dump(by_alias=False)

    async def _unique_slug(self, base_slug: str) -> str:
        """``base``, then ``base-1``, ``base-2``... until unused."""
        slug = base_slug
        counter = 1
        while await self._slug_exists(slug):
            slug = f"{base_slug}-{counter}"
            counter += 1
        return slug

    async def _slug_exists(self, slug: str) -> bool:
        result = await self.db.execute(
            select(Profile.id).where(Profile.slug == slug).limit(1)
        )
        return result.scalar_one_or_none() is not None
