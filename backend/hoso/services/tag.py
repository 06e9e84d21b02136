"""Tag service: tag CRUD, usage counts and synchronisation with profiles.

A tag's identity is its slug. ``Tag.count`` is the number of published
profiles carrying a tag with that slug; it is recomputed whenever a profile
write touches the tag and can be rebuilt for every tag with ``resync_all``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.core.logging import get_logger
from hoso.db.models import DEFAULT_TAG_COLOR, Profile, ProfileStatus, ProfileTag, Tag
from hoso.schemas.tag import (
    MissingTag,
    TagCreate,
    TagSyncReport,
    TagSyncStats,
    TagUpdate,
)
from hoso.utils.slug import to_slug

logger = get_logger(__name__)

MISSING_TAGS_REPORT_LIMIT = 10


class TagError(Exception):
    """Error during tag operations."""

    pass


class TagNotFoundError(TagError):
    """Raised when a tag does not exist."""

    pass


class TagValidationError(TagError):
    """Raised when tag input is invalid."""

    pass


class TagConflictError(TagError):
    """Raised when a tag name or slug is already taken."""

    pass


class TagInUseError(TagError):
    """Raised when deleting a tag still used by published profiles."""

    def __init__(self, message: str, profiles_count: int):
        super().__init__(message)
        self.profiles_count = profiles_count


@dataclass
class _UsageRow:
    slug: str
    name: str
    count: int


class TagService:
    """Service for managing tags and their usage counts."""

    def __init__(self, db: AsyncSession):
        """Initialize the tag service.

        Args:
            db: The database session.
        """
        self.db = db

    # ========== Queries ==========

    async def list_tags(
        self,
        limit: int = 0,
        search: str | None = None,
        active_only: bool = False,
    ) -> list[Tag]:
        """List tags, most used first.

        Args:
            limit: Maximum number of tags; 0 means no limit.
            search: Optional substring matched against name or slug.
            active_only: Only return active tags.
        """
        query = select(Tag)

        if active_only:
            query = query.where(Tag.is_active.is_(True))

        if search and search.strip():
            term = search.strip()
            conditions = [Tag.name.ilike(f"%{term}%")]
            slug_term = to_slug(term)
            if slug_term:
                conditions.append(Tag.slug.contains(slug_term))
            query = query.where(or_(*conditions))

        query = query.order_by(Tag.count.desc(), Tag.name.asc())
        if limit and limit > 0:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_tag(self, tag_id: str) -> Tag:
        """Get a tag by ID.

        Raises:
            TagNotFoundError: If no tag has this ID.
        """
        tag = await self.db.get(Tag, tag_id)
        if tag is None:
            raise TagNotFoundError("Không tìm thấy đặc điểm")
        return tag

    async def count_profiles_with(self, slug: str) -> int:
        """Number of published profiles carrying a tag with this slug."""
        result = await self.db.execute(
            select(func.count(distinct(Profile.id)))
            .select_from(Profile)
            .join(ProfileTag, ProfileTag.profile_id == Profile.id)
            .where(
                Profile.status == ProfileStatus.PUBLISHED,
                ProfileTag.slug == slug,
            )
        )
        return result.scalar() or 0

    async def _find_by_name_or_slug(
        self, name: str, slug: str, exclude_id: str | None = None
    ) -> Tag | None:
        query = select(Tag).where(
            or_(func.lower(Tag.name) == name.lower(), Tag.slug == slug)
        )
        if exclude_id:
            query = query.where(Tag.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def _usage_by_slug(self) -> list[_UsageRow]:
        """Tag usage over published profiles, grouped by slug, most used first."""
        usage = func.count(distinct(Profile.id))
        result = await self.db.execute(
            select(ProfileTag.slug, func.min(ProfileTag.name), usage)
            .join(Profile, ProfileTag.profile_id == Profile.id)
            .where(Profile.status == ProfileStatus.PUBLISHED)
            .group_by(ProfileTag.slug)
            .order_by(usage.desc(), ProfileTag.slug)
        )
        return [_UsageRow(slug=slug, name=name, count=count) for slug, name, count in result.all()]

    # ========== CRUD ==========

    async def create_tag(self, data: TagCreate) -> Tag:
        """Create a tag and compute its current count.

        Raises:
            TagValidationError: If the name is empty.
            TagConflictError: If the name or slug already exists.
        """
        name = data.name.strip()
        slug = to_slug(name)
        if not name or not slug:
            raise TagValidationError("Tên đặc điểm là bắt buộc")

        if await self._find_by_name_or_slug(name, slug):
            raise TagConflictError("Đặc điểm này đã tồn tại")

        tag = Tag(
            name=name,
            slug=slug,
            description=data.description,
            color=data.color or DEFAULT_TAG_COLOR,
            is_active=True,
            count=await self.count_profiles_with(slug),
        )
        self.db.add(tag)
        await self.db.flush()
        await self.db.refresh(tag)

        logger.info("tag_created", tag_id=tag.id, name=name, count=tag.count)
        return tag

    async def update_tag(self, tag_id: str, data: TagUpdate) -> Tag:
        """Apply a partial update; a rename recomputes slug and count.

        Raises:
            TagNotFoundError: If the tag does not exist.
            TagValidationError: If the new name is empty.
            TagConflictError: If the new name or slug is taken.
        """
        tag = await self.get_tag(tag_id)
        updates = data.model_dump(exclude_unset=True)

        new_name = updates.pop("name", None)
        if new_name is not None and new_name != tag.name:
            slug = to_slug(new_name)
            if not new_name or not slug:
                raise TagValidationError("Tên đặc điểm là bắt buộc")
            if await self._find_by_name_or_slug(new_name, slug, exclude_id=tag.id):
                raise TagConflictError("Tên đặc điểm này đã tồn tại")
            tag.name = new_name
            tag.slug = slug
            tag.count = await self.count_profiles_with(slug)

        for field_name, value in updates.items():
            if field_name == "color" and not value:
                continue
            setattr(tag, field_name, value)

        await self.db.flush()
        await self.db.refresh(tag)

        logger.info("tag_updated", tag_id=tag.id, fields=sorted(data.model_fields_set))
        return tag

    async def delete_tag(self, tag_id: str) -> None:
        """Delete a tag that no published profile uses.

        Raises:
            TagNotFoundError: If the tag does not exist.
            TagInUseError: If published profiles still carry the tag.
        """
        tag = await self.get_tag(tag_id)
        in_use = await self.count_profiles_with(tag.slug)
        if in_use > 0:
            raise TagInUseError(
                f"Không thể xóa đặc điểm này vì đang được sử dụng bởi {in_use} hồ sơ. "
                "Hãy deactivate thay vì xóa.",
                profiles_count=in_use,
            )

        await self.db.delete(tag)
        await self.db.flush()
        logger.info("tag_deleted", tag_id=tag_id, name=tag.name)

    # ========== Synchronisation ==========

    async def sync_tags_from_profile(self, names: Iterable[str]) -> int:
        """Find or create a tag for each name and refresh its count.

        Each tag is processed in its own savepoint; a failure is logged and
        the remaining tags are still processed.

        Returns:
            Number of tags that failed to sync.
        """
        errors = 0
        seen: set[str] = set()

        for raw_name in names:
            name = (raw_name or "").strip()
            slug = to_slug(name)
            if not slug or slug in seen:
                continue
            seen.add(slug)

            try:
                async with self.db.begin_nested():
                    tag = await self._find_by_name_or_slug(name, slug)
                    count = await self.count_profiles_with(slug)
                    if tag is None:
                        tag = Tag(
                            name=name,
                            slug=slug,
                            count=count,
                            is_active=True,
                            color=DEFAULT_TAG_COLOR,
                        )
                        self.db.add(tag)
                        logger.info("tag_auto_created", name=name, slug=slug, count=count)
                    else:
                        tag.count = count
            except Exception as e:
                errors += 1
                logger.error("tag_sync_failed", name=name, slug=slug, error=str(e))

        return errors

    async def resync_all(self) -> TagSyncStats:
        """Rebuild every tag count from published profiles.

        Creates tags used on profiles but missing a record, updates the rest
        and resets counts of tags no published profile uses.
        """
        rows = await self._usage_by_slug()
        created = updated = errors = 0

        for row in rows:
            try:
                async with self.db.begin_nested():
                    tag = await self._find_by_name_or_slug(row.name, row.slug)
                    if tag is None:
                        self.db.add(
                            Tag(
                                name=row.name,
                                slug=row.slug,
                                count=row.count,
                                is_active=True,
                                color=DEFAULT_TAG_COLOR,
                            )
                        )
                        created += 1
                    else:
                        tag.count = row.count
                        updated += 1
            except Exception as e:
                errors += 1
                logger.error("tag_sync_failed", name=row.name, slug=row.slug, error=str(e))

        used_slugs = [row.slug for row in rows]
        reset_query = update(Tag).where(Tag.count != 0).values(count=0)
        if used_slugs:
            reset_query = reset_query.where(Tag.slug.not_in(used_slugs))
        reset_result = await self.db.execute(reset_query.execution_options(synchronize_session="fetch"))
        reset = reset_result.rowcount or 0

        await self.db.flush()

        stats = TagSyncStats(
            total=len(rows),
            created=created,
            updated=updated,
            reset=reset,
            errors=errors,
        )
        logger.info("tags_resynced", **stats.model_dump())
        return stats

    async def sync_report(self) -> TagSyncReport:
        """Compare tag records with the tags used on published profiles."""
        rows = await self._usage_by_slug()
        usage = {row.slug: row.count for row in rows}

        result = await self.db.execute(select(Tag.slug, Tag.count))
        tag_counts = dict(result.all())

        missing = [row for row in rows if row.slug not in tag_counts]
        stale = sum(
            1 for slug, count in tag_counts.items() if usage.get(slug, 0) != count
        )

        return TagSyncReport(
            tag_model_count=len(tag_counts),
            profile_unique_tags_count=len(rows),
            missing_tags_count=len(missing),
            stale_count_tags=stale,
            needs_sync=bool(missing) or stale > 0,
            missing_tags=[
                MissingTag(name=row.name, slug=row.slug, count=row.count)
                for row in missing[:MISSING_TAGS_REPORT_LIMIT]
            ],
        )
