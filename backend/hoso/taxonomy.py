"""Static taxonomy: regions, provinces, occupations and default tags."""

from __future__ import annotations

from dataclasses import dataclass

from hoso.db.models.enums import Region
from hoso.utils.slug import to_slug


@dataclass(frozen=True)
class RegionInfo:
    """A region with its short code and URL slug."""

    region: Region
    code: str
    slug: str

    @property
    def name(self) -> str:
        return self.region.value


@dataclass(frozen=True)
class ProvinceInfo:
    """A province with its URL slug and region."""

    name: str
    slug: str
    region: Region


REGIONS: tuple[RegionInfo, ...] = (
    RegionInfo(Region.NORTH, "bac", "mien-bac"),
    RegionInfo(Region.CENTRAL, "trung", "mien-trung"),
    RegionInfo(Region.SOUTH, "nam", "mien-nam"),
)

_N, _C, _S = Region.NORTH, Region.CENTRAL, Region.SOUTH

PROVINCES: tuple[ProvinceInfo, ...] = (
    ProvinceInfo("Hà Nội", "ha-noi", _N),
    ProvinceInfo("TP. Hồ Chí Minh", "ho-chi-minh", _S),
    ProvinceInfo("Đà Nẵng", "da-nang", _C),
    ProvinceInfo("Hải Phòng", "hai-phong", _N),
    ProvinceInfo("Cần Thơ", "can-tho", _S),
    ProvinceInfo("An Giang", "an-giang", _S),
    ProvinceInfo("Bà Rịa - Vũng Tàu", "ba-ria-vung-tau", _S),
    ProvinceInfo("Bắc Giang", "bac-giang", _N),
    ProvinceInfo("Bắc Kạn", "bac-kan", _N),
    ProvinceInfo("Bạc Liêu", "bac-lieu", _S),
    ProvinceInfo("Bắc Ninh", "bac-ninh", _N),
    ProvinceInfo("Bến Tre", "ben-tre", _S),
    ProvinceInfo("Bình Định", "binh-dinh", _C),
    ProvinceInfo("Bình Dương", "binh-duong", _S),
    ProvinceInfo("Bình Phước", "binh-phuoc", _S),
    ProvinceInfo("Bình Thuận", "binh-thuan", _C),
    ProvinceInfo("Cà Mau", "ca-mau", _S),
    ProvinceInfo("Cao Bằng", "cao-bang", _N),
    ProvinceInfo("Đắk Lắk", "dak-lak", _C),
    ProvinceInfo("Đắk Nông", "dak-nong", _C),
    ProvinceInfo("Điện Biên", "dien-bien", _N),
    ProvinceInfo("Đồng Nai", "dong-nai", _S),
    ProvinceInfo("Đồng Tháp", "dong-thap", _S),
    ProvinceInfo("Gia Lai", "gia-lai", _C),
    ProvinceInfo("Hà Giang", "ha-giang", _N),
    ProvinceInfo("Hà Nam", "ha-nam", _N),
    ProvinceInfo("Hà Tĩnh", "ha-tinh", _C),
    ProvinceInfo("Hải Dương", "hai-duong", _N),
    ProvinceInfo("Hậu Giang", "hau-giang", _S),
    ProvinceInfo("Hòa Bình", "hoa-binh", _N),
    ProvinceInfo("Hưng Yên", "hung-yen", _N),
    ProvinceInfo("Khánh Hòa", "khanh-hoa", _C),
    ProvinceInfo("Kiên Giang", "kien-giang", _S),
    ProvinceInfo("Kon Tum", "kon-tum", _C),
    ProvinceInfo("Lai Châu", "lai-chau", _N),
    ProvinceInfo("Lâm Đồng", "lam-dong", _C),
    ProvinceInfo("Lạng Sơn", "lang-son", _N),
    ProvinceInfo("Lào Cai", "lao-cai", _N),
    ProvinceInfo("Long An", "long-an", _S),
    ProvinceInfo("Nam Định", "nam-dinh", _N),
    ProvinceInfo("Nghệ An", "nghe-an", _C),
    ProvinceInfo("Ninh Bình", "ninh-binh", _N),
    ProvinceInfo("Ninh Thuận", "ninh-thuan", _C),
    ProvinceInfo("Phú Thọ", "phu-tho", _N),
    ProvinceInfo("Phú Yên", "phu-yen", _C),
    ProvinceInfo("Quảng Bình", "quang-binh", _C),
    ProvinceInfo("Quảng Nam", "quang-nam", _C),
    ProvinceInfo("Quảng Ngãi", "quang-ngai", _C),
    ProvinceInfo("Quảng Ninh", "quang-ninh", _N),
    ProvinceInfo("Quảng Trị", "quang-tri", _C),
    ProvinceInfo("Sóc Trăng", "soc-trang", _S),
    ProvinceInfo("Sơn La", "son-la", _N),
    ProvinceInfo("Tây Ninh", "tay-ninh", _S),
    ProvinceInfo("Thái Bình", "thai-binh", _N),
    ProvinceInfo("Thái Nguyên", "thai-nguyen", _N),
    ProvinceInfo("Thanh Hóa", "thanh-hoa", _C),
    ProvinceInfo("Thừa Thiên Huế", "thua-thien-hue", _C),
    ProvinceInfo("Tiền Giang", "tien-giang", _S),
    ProvinceInfo("Trà Vinh", "tra-vinh", _S),
    ProvinceInfo("Tuyên Quang", "tuyen-quang", _N),
    ProvinceInfo("Vĩnh Long", "vinh-long", _S),
    ProvinceInfo("Vĩnh Phúc", "vinh-phuc", _N),
    ProvinceInfo("Yên Bái", "yen-bai", _N),
)

DEFAULT_OCCUPATIONS: tuple[str, ...] = (
    "Sinh viên",
    "Người mẫu",
    "Nhân viên văn phòng",
    "Giáo viên",
    "Y tá",
    "Kinh doanh",
    "Freelancer",
    "Học sinh",
    "Nhân viên bán hàng",
    "Kế toán",
    "Nhân viên ngân hàng",
    "Kỹ sư",
    "Bác sĩ",
    "Lập trình viên",
    "Thiết kế đồ họa",
    "Luật sư",
    "Dược sĩ",
    "Thợ may",
    "Thợ cắt tóc",
    "Đầu bếp",
    "Tài xế",
    "Nhân viên y tế",
    "Nhân viên marketing",
    "Nhân viên IT",
    "Công nhân",
    "Nông dân",
    "Nhân viên khách sạn",
    "Hướng dẫn viên du lịch",
    "Kiến trúc sư",
    "Nhà báo",
    "Nhiếp ảnh gia",
    "Nghệ sĩ",
    "Vận động viên",
    "Diễn viên",
    "Ca sĩ",
)

DEFAULT_TAGS: tuple[str, ...] = (
    "Dễ thương",
    "Năng động",
    "Dịu dàng",
    "Cá tính",
    "Thân thiện",
    "Lạc quan",
    "Hòa đồng",
    "Vui vẻ",
    "Sáng tạo",
    "Thông minh",
    "Chuyên nghiệp",
    "Tự tin",
    "Độc lập",
    "Thể thao",
    "Yêu thích du lịch",
    "Thích đọc sách",
    "Yêu âm nhạc",
    "Thích nấu ăn",
)

OCCUPATION_LABELS: dict[str, str] = {to_slug(o): o for o in DEFAULT_OCCUPATIONS}
TAG_LABELS: dict[str, str] = {to_slug(t): t for t in DEFAULT_TAGS}

_REGION_LOOKUP: dict[str, RegionInfo] = {}
for _info in REGIONS:
    for _key in (_info.code, _info.slug, _info.name.lower(), _info.region.name.lower()):
        _REGION_LOOKUP[_key] = _info

_PROVINCE_LOOKUP: dict[str, ProvinceInfo] = {}
for _prov in PROVINCES:
    for _key in (_prov.slug, _prov.name.lower(), to_slug(_prov.name)):
        _PROVINCE_LOOKUP[_key] = _prov


def find_region(value: str | Region | None) -> RegionInfo | None:
    """Look up a region by code, slug, display name or enum name."""
    if value is None:
        return None
    if isinstance(value, Region):
        return _REGION_LOOKUP[value.name.lower()]
    return _REGION_LOOKUP.get(value.strip().lower())


def find_province(value: str | None) -> ProvinceInfo | None:
    """Look up a province by slug or display name."""
    if not value:
        return None
    key = value.strip()
    return _PROVINCE_LOOKUP.get(key.lower()) or _PROVINCE_LOOKUP.get(to_slug(key))


def provinces_in(region: Region) -> list[ProvinceInfo]:
    """Provinces belonging to a region, in table order."""
    return [p for p in PROVINCES if p.region is region]
