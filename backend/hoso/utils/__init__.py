"""Utility modules for Hoso."""

from hoso.utils.slug import generate_profile_slug, slug_to_label, to_slug

__all__ = ["generate_profile_slug", "slug_to_label", "to_slug"]
