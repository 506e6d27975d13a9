"""Taxonomy normalization layer.

This module provides:
- TaxonomyNormalizer / normalize: raw classifier string -> CanonicalValue
- SlugResolver / resolve_slug_to_canonical: URL slug -> canonical display name
- fold_key / slugify: the string transforms both sides agree on
- State helpers: normalize_state, parse_state_filter, state_full_name

All tables are immutable after import and safe for concurrent reads.
"""

from .normalizer import (
    NORMALIZERS,
    CanonicalValue,
    TaxonomyNormalizer,
    get_normalizer,
    normalize,
    normalize_state,
    parse_state_filter,
    state_full_name,
    title_case,
)
from .slugs import STATIC_RESOLVERS, SlugResolver, get_resolver, resolve_slug_to_canonical
from .tables import CLINICAL_ACRONYMS, SYNONYM_TABLES
from .text import fold_key, slugify

__all__ = [
    "CanonicalValue",
    "TaxonomyNormalizer",
    "NORMALIZERS",
    "get_normalizer",
    "normalize",
    "normalize_state",
    "parse_state_filter",
    "state_full_name",
    "title_case",
    "SlugResolver",
    "STATIC_RESOLVERS",
    "get_resolver",
    "resolve_slug_to_canonical",
    "CLINICAL_ACRONYMS",
    "SYNONYM_TABLES",
    "fold_key",
    "slugify",
]
