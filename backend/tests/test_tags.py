"""Tests for tag management, usage counts and synchronisation."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.db.models import DEFAULT_TAG_COLOR, Profile, ProfileStatus, ProfileTag, Tag
from hoso.schemas.profile import ProfileCreate
from hoso.schemas.tag import TagCreate, TagUpdate
from hoso.services.profile import ProfileService
from hoso.services.tag import (
    TagConflictError,
    TagInUseError,
    TagNotFoundError,
    TagService,
    TagValidationError,
)


def profile_data(**overrides) -> ProfileCreate:
    values = {
        "name": "Linh",
        "age": 22,
        "province": "Hà Nội",
        "occupation": "Sinh viên",
        "tags": ["Vui vẻ"],
    }
    values.update(overrides)
    return ProfileCreate(**values)


# =============================================================================
# TagService
# =============================================================================


class TestTagService:
    async def test_create_tag(self, db_session: AsyncSession) -> None:
        service = TagService(db_session)
        tag = await service.create_tag(TagCreate(name="  Yêu mèo "))
        assert tag.name == "Yêu mèo"
        assert tag.slug == "yeu-meo"
        assert tag.count == 0
        assert tag.is_active
        assert tag.color == DEFAULT_TAG_COLOR

    async def test_create_counts_existing_profiles(self, db_session: AsyncSession) -> None:
        await ProfileService(db_session).create_profile(profile_data(tags=["Yêu mèo"]))
        await db_session.execute(
            Tag.__table__.delete().where(Tag.slug == "yeu-meo")
        )
        db_session.expunge_all()

        tag = await TagService(db_session).create_tag(TagCreate(name="Yêu mèo"))
        assert tag.count == 1

    async def test_create_rejects_empty_name(self, db_session: AsyncSession) -> None:
        with pytest.raises(TagValidationError):
            await TagService(db_session).create_tag(TagCreate(name="!!!"))

    async def test_create_conflict_on_name_or_slug(self, db_session: AsyncSession) -> None:
        service = TagService(db_session)
        await service.create_tag(TagCreate(name="Vui vẻ"))
        with pytest.raises(TagConflictError):
            await service.create_tag(TagCreate(name="VUI VẺ"))
        with pytest.raises(TagConflictError):
            await service.create_tag(TagCreate(name="vui-ve"))

    async def test_rename_recomputes_slug(self, db_session: AsyncSession) -> None:
        service = TagService(db_session)
        tag = await service.create_tag(TagCreate(name="Vui ve"))
        updated = await service.update_tag(tag.id, TagUpdate(name="Hài hước", color="#ff0000"))
        assert updated.slug == "hai-huoc"
        assert updated.color == "#ff0000"

    async def test_rename_conflict(self, db_session: AsyncSession) -> None:
        service = TagService(db_session)
        await service.create_tag(TagCreate(name="Vui vẻ"))
        other = await service.create_tag(TagCreate(name="Hài hước"))
        with pytest.raises(TagConflictError, match="Tên đặc điểm này đã tồn tại"):
            await service.update_tag(other.id, TagUpdate(name="Vui vẻ"))

    async def test_deactivate(self, db_session: AsyncSession) -> None:
        service = TagService(db_session)
        tag = await service.create_tag(TagCreate(name="Vui vẻ"))
        await service.update_tag(tag.id, TagUpdate(is_active=False))

        assert await service.list_tags(active_only=True) == []
        assert len(await service.list_tags()) == 1

    async def test_missing_tag(self, db_session: AsyncSession) -> None:
        with pytest.raises(TagNotFoundError):
            await TagService(db_session).get_tag("missing")

    async def test_delete_in_use(self, db_session: AsyncSession) -> None:
        await ProfileService(db_session).create_profile(profile_data())
        service = TagService(db_session)
        tag = (await service.list_tags(search="vui"))[0]

        with pytest.raises(TagInUseError) as exc_info:
            await service.delete_tag(tag.id)
        assert exc_info.value.profiles_count == 1

    async def test_delete_unused(self, db_session: AsyncSession) -> None:
        await ProfileService(db_session).create_profile(profile_data(status=ProfileStatus.DRAFT))
        service = TagService(db_session)
        tag = (await service.list_tags())[0]

        await service.delete_tag(tag.id)
        assert await service.list_tags() == []

    async def test_list_order_and_search(self, db_session: AsyncSession) -> None:
        profiles = ProfileService(db_session)
        await profiles.create_profile(profile_data(tags=["Vui vẻ", "Thể thao"]))
        await profiles.create_profile(profile_data(tags=["Thể thao"]))
        service = TagService(db_session)
        await service.create_tag(TagCreate(name="Dễ thương"))

        tags = await service.list_tags()
        assert [t.slug for t in tags] == ["the-thao", "vui-ve", "de-thuong"]
        assert [t.slug for t in await service.list_tags(limit=1)] == ["the-thao"]
        assert [t.slug for t in await service.list_tags(search="thể")] == ["the-thao"]
        assert [t.slug for t in await service.list_tags(search="de-thuong")] == ["de-thuong"]

    async def test_sync_counts_published_carriers(self, db_session: AsyncSession) -> None:
        profiles = ProfileService(db_session)
        await profiles.create_profile(profile_data(tags=["Dễ thương"]))
        await profiles.create_profile(profile_data(tags=["dễ thương"]))
        await profiles.create_profile(profile_data(tags=["Dễ thương"], status=ProfileStatus.DRAFT))

        service = TagService(db_session)
        assert await service.sync_tags_from_profile(["Dễ thương"]) == 0
        tag = (await db_session.execute(select(Tag).where(Tag.slug == "de-thuong"))).scalar_one()
        assert tag.count == 2

    async def test_sync_skips_blank_and_duplicate_names(self, db_session: AsyncSession) -> None:
        service = TagService(db_session)
        errors = await service.sync_tags_from_profile(["Vui vẻ", "", "vui-ve", "  ", "Thể thao"])
        assert errors == 0
        assert sorted(t.slug for t in await service.list_tags()) == ["the-thao", "vui-ve"]


# =============================================================================
# Full resync
# =============================================================================


class TestResync:
    async def test_resync_creates_updates_and_resets(self, db_session: AsyncSession) -> None:
        profiles = ProfileService(db_session)
        await profiles.create_profile(profile_data(tags=["Vui vẻ", "Thể thao"]))
        await profiles.create_profile(profile_data(tags=["Vui vẻ"]))

        # Drift: a stray count, a missing record and a tag nobody uses
        vui_ve = (await db_session.execute(select(Tag).where(Tag.slug == "vui-ve"))).scalar_one()
        vui_ve.count = 9
        await db_session.execute(Tag.__table__.delete().where(Tag.slug == "the-thao"))
        db_session.add(Tag(name="Cũ", slug="cu", count=4))
        await db_session.flush()
        db_session.expunge_all()

        service = TagService(db_session)
        report = await service.sync_report()
        assert report.needs_sync
        assert report.missing_tags_count == 1
        assert report.missing_tags[0].slug == "the-thao"
        assert report.stale_count_tags == 2

        stats = await service.resync_all()
        assert stats.total == 2
        assert stats.created == 1
        assert stats.updated == 1
        assert stats.reset == 1
        assert stats.errors == 0

        db_session.expunge_all()
        counts = {t.slug: t.count for t in await service.list_tags()}
        assert counts == {"vui-ve": 2, "the-thao": 1, "cu": 0}

        report = await service.sync_report()
        assert not report.needs_sync

    async def test_resync_ignores_unpublished(self, db_session: AsyncSession) -> None:
        await ProfileService(db_session).create_profile(
            profile_data(tags=["Vui vẻ"], status=ProfileStatus.DRAFT)
        )
        stats = await TagService(db_session).resync_all()
        assert stats.total == 0

    async def test_profile_tags_keep_display_text(self, db_session: AsyncSession) -> None:
        profile = await ProfileService(db_session).create_profile(
            profile_data(tags=["Thích đọc sách"])
        )
        links = (
            await db_session.execute(
                select(ProfileTag).where(ProfileTag.profile_id == profile.id)
            )
        ).scalars().all()
        assert [(link.name, link.slug) for link in links] == [
            ("Thích đọc sách", "thich-doc-sach")
        ]
        assert (await db_session.get(Profile, profile.id)).tag_slugs == ["thich-doc-sach"]


# =============================================================================
# API
# =============================================================================


class TestTagApi:
    async def test_crud(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post("/api/tags", json={"name": "Yêu mèo"})
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Tạo đặc điểm thành công"
        tag = data["tag"]
        assert tag["slug"] == "yeu-meo"
        assert tag["isActive"] is True

        response = await admin_client.get(f"/api/tags/{tag['id']}")
        assert response.json()["tag"]["name"] == "Yêu mèo"

        response = await admin_client.put(
            f"/api/tags/{tag['id']}", json={"description": "Người yêu động vật"}
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Cập nhật đặc điểm thành công"
        assert response.json()["tag"]["description"] == "Người yêu động vật"

        response = await admin_client.delete(f"/api/tags/{tag['id']}")
        assert response.json() == {"message": "Xóa đặc điểm thành công"}

        response = await admin_client.get(f"/api/tags/{tag['id']}")
        assert response.status_code == 404
        assert response.json() == {"error": "Không tìm thấy đặc điểm"}

    async def test_create_errors(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post("/api/tags", json={"name": "  "})
        assert response.status_code == 400
        assert response.json() == {"error": "Tên đặc điểm là bắt buộc"}

        await admin_client.post("/api/tags", json={"name": "Vui vẻ"})
        response = await admin_client.post("/api/tags", json={"name": "Vui vẻ"})
        assert response.status_code == 409
        assert response.json() == {"error": "Đặc điểm này đã tồn tại"}

    async def test_delete_in_use(self, admin_client: AsyncClient) -> None:
        await admin_client.post(
            "/api/profiles",
            json={
                "name": "Linh",
                "age": 22,
                "province": "Hà Nội",
                "occupation": "Sinh viên",
                "tags": ["Vui vẻ"],
            },
        )
        tag = (await admin_client.get("/api/tags")).json()["tags"][0]

        response = await admin_client.delete(f"/api/tags/{tag['id']}")
        assert response.status_code == 409
        data = response.json()
        assert data["profilesCount"] == 1
        assert "1 hồ sơ" in data["error"]

    async def test_writes_require_admin(self, client: AsyncClient) -> None:
        assert (await client.post("/api/tags", json={"name": "A"})).status_code == 401
        assert (await client.put("/api/tags/x", json={"name": "A"})).status_code == 401
        assert (await client.delete("/api/tags/x")).status_code == 401
        assert (await client.post("/api/tags/sync")).status_code == 401

    async def test_list_is_public(self, client: AsyncClient) -> None:
        response = await client.get("/api/tags", params={"activeOnly": "true", "limit": 5})
        assert response.status_code == 200
        assert response.json() == {"tags": []}

    async def test_sync_endpoints(self, admin_client: AsyncClient) -> None:
        response = await admin_client.get("/api/tags/sync")
        assert response.status_code == 200
        assert response.json()["stats"] == {
            "tagModelCount": 0,
            "profileUniqueTagsCount": 0,
            "missingTagsCount": 0,
            "staleCountTags": 0,
            "needsSync": False,
            "missingTags": [],
        }

        response = await admin_client.post("/api/tags/sync")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Sync tags thành công"
        assert data["stats"] == {
            "total": 0,
            "created": 0,
            "updated": 0,
            "reset": 0,
            "errors": 0,
        }
