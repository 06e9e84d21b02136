#!/usr/bin/env python3
"""Generate demo profiles for local development.

Profiles are created through ProfileService, so slug uniqueness and tag
count synchronisation behave exactly as for admin writes.

Usage:
    # Create 50 published profiles
    python scripts/generate_profiles.py --count 50

    # Wipe profiles and tags first, create drafts
    python scripts/generate_profiles.py --count 20 --reset --draft
"""

from __future__ import annotations

import argparse
import asyncio
import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from sqlalchemy import delete  # noqa: E402

from hoso.core.logging import get_logger, setup_logging  # noqa: E402
from hoso.db import Base, async_session_maker, engine  # noqa: E402
from hoso.db.models import Profile, ProfileStatus, Tag  # noqa: E402
from hoso.schemas.profile import ProfileCreate  # noqa: E402
from hoso.services.profile import ProfileService  # noqa: E402
from hoso.taxonomy import DEFAULT_OCCUPATIONS, DEFAULT_TAGS, PROVINCES  # noqa: E402

logger = get_logger(__name__)

FAMILY_NAMES = [
    "Nguyễn", "Trần", "Lê", "Phạm", "Hoàng", "Vũ", "Đặng", "Bùi", "Đỗ", "Ngô",
    "Dương", "Lý", "Trịnh", "Phan", "Võ", "Đinh", "Mai", "Cao", "Lâm", "Huỳnh",
]
MIDDLE_NAMES = ["Thị", "Ngọc", "Thu", "Minh", "Thanh", "Bảo", "Khánh", "Hồng"]
GIVEN_NAMES = [
    "Lan", "Hương", "Mai", "Linh", "Nga", "Thảo", "Hạnh", "Hoa", "Trang", "Yến",
    "Xuân", "Phương", "Bích", "Dung", "Giang", "Hiền", "Khánh", "Nhi", "Quỳnh", "Vân",
]
DESCRIPTIONS = [
    "Tôi là một người vui vẻ và năng động, luôn tìm kiếm những trải nghiệm mới.",
    "Yêu thích du lịch và khám phá những điều thú vị trong cuộc sống.",
    "Là người tích cực, luôn cố gắng học hỏi và phát triển bản thân.",
    "Thích đọc sách, nghe nhạc và dành thời gian bên gia đình.",
    "Yêu thích nấu ăn và thử nghiệm những món ăn mới.",
    "Là người thân thiện, dễ gần và luôn sẵn sàng giúp đỡ người khác.",
    "Thích tập thể thao và duy trì lối sống lành mạnh.",
    "Yêu thích nghệ thuật, điện ảnh và các hoạt động văn hóa.",
    "Thích làm việc nhóm và kết bạn với mọi người.",
    "Yêu thích công nghệ và luôn cập nhật xu hướng mới.",
]


def random_profile(rng: random.Random, status: ProfileStatus) -> ProfileCreate:
    """Build one random profile payload from the static taxonomy."""
    province = rng.choice(PROVINCES)
    name = f"{rng.choice(FAMILY_NAMES)} {rng.choice(MIDDLE_NAMES)} {rng.choice(GIVEN_NAMES)}"
    return ProfileCreate(
        name=name,
        age=rng.randint(18, 35),
        height=rng.randint(150, 175),
        weight=rng.randint(42, 60),
        province=province.name,
        occupation=rng.choice(DEFAULT_OCCUPATIONS),
        description=rng.choice(DESCRIPTIONS),
        tags=rng.sample(DEFAULT_TAGS, k=rng.randint(2, 4)),
        status=status,
        is_featured=rng.random() < 0.1,
    )


async def generate(count: int, reset: bool, draft: bool, seed: int | None) -> int:
    """Create ``count`` profiles and return how many were written."""
    rng = random.Random(seed)
    status = ProfileStatus.DRAFT if draft else ProfileStatus.PUBLISHED

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    created = 0
    async with async_session_maker() as session:
        if reset:
            await session.execute(delete(Profile))
            await session.execute(delete(Tag))
            await session.commit()
            print("Removed existing profiles and tags")

        service = ProfileService(session)
        for _ in range(count):
            profile = await service.create_profile(random_profile(rng, status))
            created += 1
            print(f"  + {profile.slug}")

        await session.commit()

    await engine.dispose()
    return created


def main():
    parser = argparse.ArgumentParser(description="Generate demo profiles for Hoso")
    parser.add_argument(
        "--count",
        type=int,
        default=20,
        help="Number of profiles to create (default: 20)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete all profiles and tags before generating",
    )
    parser.add_argument(
        "--draft",
        action="store_true",
        help="Create profiles as drafts instead of published",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducible output",
    )

    args = parser.parse_args()
    if args.count < 0:
        parser.error("--count must be zero or positive")

    setup_logging()
    created = asyncio.run(generate(args.count, args.reset, args.draft, args.seed))

    print(f"\n{'=' * 40}")
    print(f"Created {created} profile(s)")
    print(f"{'=' * 40}")


if __name__ == "__main__":
    main()
