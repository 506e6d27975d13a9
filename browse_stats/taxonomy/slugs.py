"""Slug resolution: URL slug back to canonical display name."""

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from browse_stats.domain.models import Dimension
from browse_stats.logging import get_logger

from .normalizer import NORMALIZERS
from .tables import CANONICAL_VALUES, STATE_NAMES
from .text import slugify

logger = get_logger(__name__, component="taxonomy")


class SlugResolver:
    """Reverse index slug -> display name for one dimension.

    The static resolvers built at import are immutable. Request code that
    has seen extra (fallback) values calls with_values() to get a new,
    request-scoped resolver; the static one is never modified.

    Collisions are resolved deterministically: names already indexed keep
    their slug, new names are added in sorted order and a colliding name
    gets the first free "-2", "-3", ... suffix.
    """

    def __init__(self, dimension: Dimension, slugs: Mapping[str, str]):
        self.dimension = dimension
        self._by_slug: Mapping[str, str] = MappingProxyType(dict(slugs))
        self._by_name: Mapping[str, str] = MappingProxyType(
            {name: slug for slug, name in slugs.items()}
        )

    @classmethod
    def from_names(cls, dimension: Dimension, names: Iterable[str]) -> "SlugResolver":
        """Build a resolver over display names."""
        return cls(dimension, {}).with_values(names)

    def with_values(self, names: Iterable[str]) -> "SlugResolver":
        """Return a new resolver that also indexes the given display names."""
        by_slug: Dict[str, str] = dict(self._by_slug)
        known_names = set(self._by_name)

        for name in sorted(set(names)):
            if name in known_names:
                continue
            base = slugify(name)
            if not base:
                continue
            slug = base
            suffix = 2
            while slug in by_slug:
                slug = f"{base}-{suffix}"
                suffix += 1
            if slug != base:
                logger.warning(
                    f"Slug collision for {self.dimension.value} value '{name}': "
                    f"'{base}' already belongs to '{by_slug[base]}', using '{slug}'",
                    extra={
                        "event": "facets.slug.collision",
                        "dimension": self.dimension.value,
                        "display_name": name,
                        "slug": slug,
                    },
                )
            by_slug[slug] = name
            known_names.add(name)

        return SlugResolver(self.dimension, by_slug)

    def resolve(self, slug: Optional[str]) -> Optional[str]:
        """Resolve a slug to its display name.

        Returns:
            Display name, or None when nothing matches (callers treat this
            as "not found" rather than an empty result)
        """
        if not slug:
            return None
        return self._by_slug.get(slug.strip().lower())

    def slug_for(self, name: str) -> str:
        """Slug assigned to a display name, falling back to plain slugify."""
        return self._by_name.get(name) or slugify(name)

    def __contains__(self, slug: str) -> bool:
        return self.resolve(slug) is not None

    def __len__(self) -> int:
        return len(self._by_slug)


def _build_state_resolver() -> SlugResolver:
    # Lower-case codes ("oh") and full-name slugs ("new-york") both resolve to the code
    slugs: Dict[str, str] = {}
    for code, name in STATE_NAMES.items():
        slugs[code.lower()] = code
        slugs[slugify(name)] = code
    return SlugResolver(Dimension.STATE, slugs)


STATIC_RESOLVERS: Mapping[Dimension, SlugResolver] = MappingProxyType({
    **{
        dimension: SlugResolver.from_names(dimension, CANONICAL_VALUES[dimension])
        for dimension in NORMALIZERS
    },
    Dimension.STATE: _build_state_resolver(),
})


def get_resolver(dimension: Dimension) -> SlugResolver:
    """Return the static resolver for a dimension.

    Raises:
        KeyError: For dimensions without a static taxonomy (employer)
    """
    return STATIC_RESOLVERS[dimension]


def resolve_slug_to_canonical(dimension: Dimension, slug: str) -> Optional[str]:
    """Resolve a slug against the static taxonomy of a dimension."""
    return get_resolver(dimension).resolve(slug)
