"""String folding and slug helpers shared by the taxonomy tables and resolvers."""

import re
from typing import Optional

_AMPERSAND = re.compile(r"\s*&\s*")
_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN = re.compile(r"-{2,}")


def fold_key(raw: Optional[str]) -> str:
    """Fold a raw classifier string into a synonym-table lookup key.

    Lowercases, turns hyphens and underscores into spaces, then collapses
    every whitespace run (tabs, newlines, Unicode spaces) into a single
    space and trims. ListingRepository matches stored values through this
    same function, so filtering and faceting agree on every raw row.

    Examples:
        >>> fold_key("  New-Grad ")
        'new grad'
        >>> fold_key("PER_DIEM")
        'per diem'
        >>> fold_key("Full - Time")
        'full time'
    """
    if not raw:
        return ""
    return " ".join(raw.lower().replace("-", " ").replace("_", " ").split())


def slugify(display_name: Optional[str]) -> str:
    """Derive a URL slug from a canonical display name.

    Lowercase, "&" and whitespace become hyphens, every other
    non-alphanumeric character is dropped, hyphen runs collapse.

    Examples:
        >>> slugify("Labor & Delivery")
        'labor-delivery'
        >>> slugify("Med-Surg")
        'med-surg'
        >>> slugify("Day Shift")
        'day-shift'
    """
    if not display_name:
        return ""
    slug = display_name.lower().strip()
    slug = _AMPERSAND.sub("-", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_SLUG.sub("", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")
