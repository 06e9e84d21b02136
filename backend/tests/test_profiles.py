"""Tests for the profile API endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from hoso.db.models import RenditionSize


def profile_payload(**overrides) -> dict:
    payload = {
        "name": "Linh",
        "age": 22,
        "province": "Hà Nội",
        "occupation": "Sinh viên",
        "description": "Thích đi dạo và chụp ảnh.",
        "tags": ["Vui vẻ", "Sáng tạo"],
    }
    payload.update(overrides)
    return payload


async def create(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/profiles", json=profile_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["profile"]


async def tag_counts(client: AsyncClient) -> dict[str, int]:
    response = await client.get("/api/tags")
    return {tag["slug"]: tag["count"] for tag in response.json()["tags"]}


# =============================================================================
# Create
# =============================================================================


class TestCreateProfile:
    async def test_create(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post("/api/profiles", json=profile_payload())
        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Hồ sơ đã được tạo thành công"

        profile = data["profile"]
        assert profile["slug"] == "linh-22-tuoi-sinh-vien-ha-noi"
        assert profile["region"] == "Miền Bắc"
        assert profile["province"] == "Hà Nội"
        assert profile["occupationSlug"] == "sinh-vien"
        assert profile["tags"] == ["Vui vẻ", "Sáng tạo"]
        assert profile["tagSlugs"] == ["vui-ve", "sang-tao"]
        assert profile["status"] == "published"
        assert profile["publishedAt"] is not None

    async def test_slug_gets_numeric_suffix(self, admin_client: AsyncClient) -> None:
        first = await create(admin_client)
        second = await create(admin_client)
        third = await create(admin_client)
        assert first["slug"] == "linh-22-tuoi-sinh-vien-ha-noi"
        assert second["slug"] == "linh-22-tuoi-sinh-vien-ha-noi-1"
        assert third["slug"] == "linh-22-tuoi-sinh-vien-ha-noi-2"

    async def test_slug_includes_district(self, admin_client: AsyncClient) -> None:
        profile = await create(admin_client, province="Đà Nẵng", district="Hải Châu")
        assert profile["slug"] == "linh-22-tuoi-sinh-vien-hai-chau-da-nang"

    async def test_province_slug_is_canonicalised(self, admin_client: AsyncClient) -> None:
        profile = await create(admin_client, province="da-nang")
        assert profile["province"] == "Đà Nẵng"
        assert profile["region"] == "Miền Trung"

    async def test_explicit_region_must_match_province(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post(
            "/api/profiles", json=profile_payload(region="nam")
        )
        assert response.status_code == 400
        assert "error" in response.json()

        profile = await create(admin_client, region="bac")
        assert profile["region"] == "Miền Bắc"

    async def test_unknown_province(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post(
            "/api/profiles", json=profile_payload(province="Atlantis")
        )
        assert response.status_code == 400

    async def test_cannot_create_archived(self, admin_client: AsyncClient) -> None:
        response = await admin_client.post(
            "/api/profiles", json=profile_payload(status="archived")
        )
        assert response.status_code == 400

    async def test_missing_fields(self, admin_client: AsyncClient) -> None:
        payload = profile_payload()
        del payload["name"]
        response = await admin_client.post("/api/profiles", json=payload)
        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Dữ liệu không hợp lệ"
        assert data["details"]

    async def test_requires_admin(self, client: AsyncClient) -> None:
        response = await client.post("/api/profiles", json=profile_payload())
        assert response.status_code == 401
        assert response.json() == {"error": "Không có quyền truy cập"}

    async def test_photos_round_trip(self, admin_client: AsyncClient) -> None:
        photo = {
            "url": "/api/images/linh-medium.webp",
            "baseFilename": "linh",
            "alt": "Linh 22 tuổi, Hà Nội",
            "width": 800,
            "height": 800,
            "bytes": 1234,
            "dominantColor": "rgb(248, 8, 8)",
            "isLCP": True,
            "blurDataURL": "data:image/webp;base64,AAAA",
            "sizes": {"medium": {"url": "/api/images/linh-medium.webp"}},
        }
        profile = await create(admin_client, photos=[photo])
        stored = profile["photos"][0]
        assert stored["baseFilename"] == "linh"
        assert stored["isLCP"] is True
        assert stored["blurDataURL"] == "data:image/webp;base64,AAAA"
        assert stored["sizes"]["medium"]["url"] == "/api/images/linh-medium.webp"


# =============================================================================
# Read
# =============================================================================


class TestReadProfiles:
    async def test_list_hides_drafts(self, admin_client: AsyncClient) -> None:
        await create(admin_client, name="An")
        await create(admin_client, name="Bình", status="draft")

        admin_client.cookies.clear()
        response = await admin_client.get("/api/profiles")
        assert response.status_code == 200
        data = response.json()
        assert [p["name"] for p in data["profiles"]] == ["An"]
        assert data["pagination"] == {
            "page": 1,
            "limit": 12,
            "total": 1,
            "pages": 1,
            "hasNext": False,
            "hasPrev": False,
        }

    async def test_draft_listing_requires_admin(self, client: AsyncClient) -> None:
        response = await client.get("/api/profiles", params={"status": "draft"})
        assert response.status_code == 401

    async def test_admin_lists_drafts(self, admin_client: AsyncClient) -> None:
        await create(admin_client, name="An")
        await create(admin_client, name="Bình", status="draft")
        response = await admin_client.get("/api/profiles", params={"status": "draft"})
        assert [p["name"] for p in response.json()["profiles"]] == ["Bình"]

        response = await admin_client.get("/api/profiles", params={"status": "all"})
        assert response.json()["pagination"]["total"] == 2

    async def test_filters(self, admin_client: AsyncClient) -> None:
        await create(admin_client, name="An", age=19, tags=["Thể thao"])
        await create(admin_client, name="Bình", age=30, province="Cần Thơ")

        response = await admin_client.get(
            "/api/profiles", params={"region": "mien-bac", "tags": "the-thao", "age": "18-22"}
        )
        assert [p["name"] for p in response.json()["profiles"]] == ["An"]

        response = await admin_client.get("/api/profiles", params={"ageMin": 25})
        assert [p["name"] for p in response.json()["profiles"]] == ["Bình"]

        response = await admin_client.get("/api/profiles", params={"ageMin": 18, "ageMax": 22})
        assert [p["name"] for p in response.json()["profiles"]] == ["An"]

    async def test_invalid_filter(self, client: AsyncClient) -> None:
        response = await client.get("/api/profiles", params={"region": "mien-tay"})
        assert response.status_code == 400

    async def test_get_by_slug(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client)
        response = await admin_client.get(f"/api/profiles/{created['slug']}")
        assert response.status_code == 200
        assert response.json()["profile"]["id"] == created["id"]

    async def test_draft_is_hidden_from_public(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client, status="draft")
        response = await admin_client.get(f"/api/profiles/{created['slug']}")
        assert response.status_code == 200

        admin_client.cookies.clear()
        response = await admin_client.get(f"/api/profiles/{created['slug']}")
        assert response.status_code == 404
        assert response.json() == {"error": "Không tìm thấy hồ sơ"}

    async def test_get_missing(self, client: AsyncClient) -> None:
        response = await client.get("/api/profiles/khong-ton-tai")
        assert response.status_code == 404


# =============================================================================
# Update
# =============================================================================


class TestUpdateProfile:
    async def test_partial_update_keeps_slug(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client)
        response = await admin_client.put(
            f"/api/profiles/{created['slug']}",
            json={"name": "Linh Chi", "occupation": "Kế toán"},
        )
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["slug"] == created["slug"]
        assert profile["name"] == "Linh Chi"
        assert profile["occupationSlug"] == "ke-toan"
        assert profile["age"] == 22
        assert profile["tags"] == ["Vui vẻ", "Sáng tạo"]

    async def test_province_change_moves_region(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client)
        response = await admin_client.put(
            f"/api/profiles/{created['slug']}", json={"province": "can-tho"}
        )
        profile = response.json()["profile"]
        assert profile["province"] == "Cần Thơ"
        assert profile["region"] == "Miền Nam"

    async def test_publish_draft(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client, status="draft")
        assert created["publishedAt"] is None

        response = await admin_client.put(
            f"/api/profiles/{created['slug']}", json={"status": "published"}
        )
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["status"] == "published"
        assert profile["publishedAt"] is not None

    async def test_invalid_transitions(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client)
        slug = created["slug"]

        response = await admin_client.put(f"/api/profiles/{slug}", json={"status": "draft"})
        assert response.status_code == 400

        response = await admin_client.put(f"/api/profiles/{slug}", json={"status": "archived"})
        assert response.status_code == 200

        response = await admin_client.put(f"/api/profiles/{slug}", json={"status": "published"})
        assert response.status_code == 400

    async def test_null_for_required_fields_is_ignored(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client, isFeatured=True, featuredScore=7)
        response = await admin_client.put(
            f"/api/profiles/{created['slug']}",
            json={"isFeatured": None, "featuredScore": None, "name": None, "age": 23},
        )
        assert response.status_code == 200, response.text
        profile = response.json()["profile"]
        assert profile["isFeatured"] is True
        assert profile["featuredScore"] == 7
        assert profile["name"] == "Linh"
        assert profile["age"] == 23

    async def test_update_missing(self, admin_client: AsyncClient) -> None:
        response = await admin_client.put("/api/profiles/khong-ton-tai", json={"age": 30})
        assert response.status_code == 404

    async def test_requires_admin(self, client: AsyncClient) -> None:
        response = await client.put("/api/profiles/abc", json={"age": 30})
        assert response.status_code == 401


# =============================================================================
# Tag counts
# =============================================================================


class TestTagCounts:
    async def test_create_counts_published_only(self, admin_client: AsyncClient) -> None:
        await create(admin_client, tags=["Vui vẻ"])
        await create(admin_client, tags=["Vui vẻ", "Thể thao"], status="draft")

        counts = await tag_counts(admin_client)
        assert counts["vui-ve"] == 1
        assert counts["the-thao"] == 0

    async def test_retagging_moves_counts(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client, tags=["Vui vẻ"])
        await admin_client.put(
            f"/api/profiles/{created['slug']}", json={"tags": ["Thể thao"]}
        )
        counts = await tag_counts(admin_client)
        assert counts["vui-ve"] == 0
        assert counts["the-thao"] == 1

    async def test_status_changes_resync(self, admin_client: AsyncClient) -> None:
        created = await create(admin_client, tags=["Vui vẻ"], status="draft")
        slug = created["slug"]

        await admin_client.put(f"/api/profiles/{slug}", json={"status": "published"})
        assert (await tag_counts(admin_client))["vui-ve"] == 1

        await admin_client.put(f"/api/profiles/{slug}", json={"status": "archived"})
        assert (await tag_counts(admin_client))["vui-ve"] == 0

    async def test_duplicate_tags_collapse(self, admin_client: AsyncClient) -> None:
        profile = await create(admin_client, tags=["Vui vẻ", "vui vẻ ", "  "])
        assert profile["tagSlugs"] == ["vui-ve"]
        assert (await tag_counts(admin_client))["vui-ve"] == 1


# =============================================================================
# Delete
# =============================================================================


class TestDeleteProfile:
    async def test_delete_removes_renditions_and_counts(
        self, admin_client: AsyncClient, media_dirs: tuple[Path, Path]
    ) -> None:
        upload_path, _ = media_dirs
        for size in RenditionSize:
            (upload_path / f"linh-{size.value}.webp").write_bytes(b"webp")
        (upload_path / "other-medium.webp").write_bytes(b"webp")

        photo = {
            "url": "/api/images/linh-medium.webp",
            "baseFilename": "linh",
            "alt": "Linh",
            "width": 800,
            "height": 800,
        }
        created = await create(admin_client, tags=["Vui vẻ"], photos=[photo])

        response = await admin_client.delete(f"/api/profiles/{created['slug']}")
        assert response.status_code == 200
        assert response.json() == {"message": "Hồ sơ đã được xóa thành công"}

        assert sorted(p.name for p in upload_path.iterdir()) == ["other-medium.webp"]
        assert (await tag_counts(admin_client))["vui-ve"] == 0

        response = await admin_client.get(f"/api/profiles/{created['slug']}")
        assert response.status_code == 404

    async def test_failed_commit_keeps_renditions(
        self,
        admin_client: AsyncClient,
        media_dirs: tuple[Path, Path],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        upload_path, _ = media_dirs
        for size in RenditionSize:
            (upload_path / f"linh-{size.value}.webp").write_bytes(b"webp")
        photo = {
            "url": "/api/images/linh-medium.webp",
            "baseFilename": "linh",
            "alt": "Linh",
            "width": 800,
            "height": 800,
        }
        created = await create(admin_client, photos=[photo])

        async def failing_commit(self) -> None:
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        with monkeypatch.context() as patched:
            patched.setattr(AsyncSession, "commit", failing_commit)
            response = await admin_client.delete(f"/api/profiles/{created['slug']}")
        assert response.status_code == 500
        assert response.json() == {"error": "Không thể xóa hồ sơ"}
        assert len(list(upload_path.iterdir())) == len(RenditionSize)

        response = await admin_client.get(f"/api/profiles/{created['slug']}")
        assert response.status_code == 200

    async def test_delete_missing(self, admin_client: AsyncClient) -> None:
        response = await admin_client.delete("/api/profiles/khong-ton-tai")
        assert response.status_code == 404

    async def test_requires_admin(self, client: AsyncClient) -> None:
        response = await client.delete("/api/profiles/abc")
        assert response.status_code == 401
