"""Vietnamese-aware slug generation and reverse label lookup."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Mapping

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def to_slug(text: str | None) -> str:
    """Convert text to a URL slug.

    Lowercases, maps ``đ`` to ``d``, strips diacritics, drops anything that
    is not ``[a-z0-9]``, whitespace or a hyphen, and joins words with single
    hyphens. The result is idempotent: ``to_slug(to_slug(x)) == to_slug(x)``.

    Args:
        text: Text to convert. ``None`` yields an empty string.

    Returns:
        The slug, possibly empty.
    """
    if not text:
        return ""

    value = text.lower().replace("đ", "d")
    value = unicodedata.normalize("NFD", value)
    value = "".join(ch for ch in value if unicodedata.category(ch) != "Mn")
    value = _INVALID_CHARS.sub("", value)
    value = _WHITESPACE.sub("-", value.strip())
    value = _HYPHENS.sub("-", value)
    return value.strip("-")


def slug_to_label(slug: str, labels: Mapping[str, str] | None = None) -> str:
    """Turn a slug back into a display label.

    Known slugs come from ``labels``. Anything else falls back to
    capitalising each hyphen-separated word, which cannot restore diacritics.
    """
    if labels and slug in labels:
        return labels[slug]
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)


def generate_profile_slug(
    name: str,
    age: int,
    occupation: str,
    province: str,
    district: str | None = None,
) -> str:
    """Build the base slug for a profile.

    Format: ``{name}-{age}-tuoi-{occupation}[-{district}]-{province}``.
    Uniqueness suffixes are added by the caller.
    """
    parts = [to_slug(name), str(age), "tuoi", to_slug(occupation)]
    if district:
        parts.append(to_slug(district))
    parts.append(to_slug(province))
    return "-".join(part for part in parts if part)
