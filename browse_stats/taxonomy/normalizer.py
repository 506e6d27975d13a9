"""Taxonomy normalization for raw classifier tags.

One parameterized TaxonomyNormalizer implements the folding algorithm; each
dimension gets an instance configured with its own synonym table:

1. Blank input contributes to no bucket (None)
2. Fold: lowercase, hyphens/underscores to spaces, trim
3. Synonym table lookup
4. Fallback: Title Case per word, clinical acronyms upper-cased
5. Slug derived from the display name

Unknown values are not errors. They still form a bucket, flagged with
known=False, so an unrecognized tag stays visible instead of silently
dropping listings.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import AbstractSet, Dict, List, Mapping, Optional, Tuple

from browse_stats.domain.models import Dimension
from browse_stats.logging import get_logger

from .tables import (
    CANONICAL_VALUES,
    CLINICAL_ACRONYMS,
    STATE_CODES_BY_NAME,
    STATE_NAMES,
    SYNONYM_TABLES,
)
from .text import fold_key, slugify

logger = get_logger(__name__, component="taxonomy")


@dataclass(frozen=True)
class CanonicalValue:
    """Canonical form of a raw classifier value.

    Attributes:
        display_name: Canonical display name (bucket key)
        slug: URL slug derived from display_name
        known: False when the value came from the Title Case fallback
    """

    display_name: str
    slug: str
    known: bool = True


def title_case(folded: str, acronyms: AbstractSet[str] = CLINICAL_ACRONYMS) -> str:
    """Title Case each space-separated word, upper-casing clinical acronyms.

    Examples:
        >>> title_case("float pool icu")
        'Float Pool ICU'
    """
    words = []
    for word in folded.split(" "):
        if word in acronyms:
            words.append(word.upper())
        else:
            words.append(word[:1].upper() + word[1:])
    return " ".join(words)


class TaxonomyNormalizer:
    """Normalizes raw values of one dimension against a static synonym table.

    Instances hold only immutable data and keep no per-call state, so the
    same input always yields the same output regardless of call order.
    """

    def __init__(
        self,
        dimension: Dimension,
        synonyms: Mapping[str, str],
        acronyms: AbstractSet[str] = CLINICAL_ACRONYMS,
    ):
        self.dimension = dimension
        self.synonyms = synonyms
        self.acronyms = acronyms

        # Reverse index canonical name -> folded keys that normalize to it
        reverse: Dict[str, List[str]] = {}
        for key, canonical in synonyms.items():
            reverse.setdefault(canonical, []).append(key)
        self._keys_by_canonical: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {canonical: tuple(sorted(keys)) for canonical, keys in reverse.items()}
        )

    def normalize(self, raw: Optional[str]) -> Optional[CanonicalValue]:
        """Normalize a raw value.

        Args:
            raw: Raw classifier string (may be None)

        Returns:
            CanonicalValue, or None when the raw value is blank
        """
        key = fold_key(raw)
        if not key:
            return None

        canonical = self.synonyms.get(key)
        if canonical is not None:
            return CanonicalValue(display_name=canonical, slug=slugify(canonical))

        display_name = title_case(key, self.acronyms)
        logger.debug(
            f"Unrecognized {self.dimension.value} value '{raw}'",
            extra={
                "event": "facets.taxonomy.unknown_value",
                "dimension": self.dimension.value,
                "raw_value": raw,
                "display_name": display_name,
            },
        )
        return CanonicalValue(display_name=display_name, slug=slugify(display_name), known=False)

    def match_keys(self, canonical_name: str) -> Tuple[str, ...]:
        """Return every folded key that normalizes to a canonical name.

        For a static canonical value this is the full alias list. For a
        fallback value it is the name's own folded key, unless that key
        belongs to a different canonical value, in which case nothing can
        normalize to the name and the result is empty.
        """
        keys = self._keys_by_canonical.get(canonical_name)
        if keys is not None:
            return keys

        key = fold_key(canonical_name)
        if not key or key in self.synonyms:
            return ()
        if title_case(key, self.acronyms) != canonical_name:
            return ()
        return (key,)

    def canonical_values(self) -> Tuple[CanonicalValue, ...]:
        """All static canonical values of this dimension."""
        return tuple(
            CanonicalValue(display_name=name, slug=slugify(name))
            for name in CANONICAL_VALUES[self.dimension]
        )


NORMALIZERS: Mapping[Dimension, TaxonomyNormalizer] = MappingProxyType(
    {dimension: TaxonomyNormalizer(dimension, table) for dimension, table in SYNONYM_TABLES.items()}
)


def get_normalizer(dimension: Dimension) -> TaxonomyNormalizer:
    """Return the normalizer for a taxonomy dimension.

    Raises:
        KeyError: If the dimension has no synonym table (state, employer)
    """
    return NORMALIZERS[dimension]


def normalize(dimension: Dimension, raw: Optional[str]) -> Optional[CanonicalValue]:
    """Normalize a raw value of any taxonomy dimension."""
    return get_normalizer(dimension).normalize(raw)


def normalize_state(raw: Optional[str]) -> Optional[str]:
    """Normalize a stored state value to an upper-case code.

    Full state names map to their code; anything else is trimmed and
    upper-cased so unexpected values still form a visible bucket.
    """
    if not raw or not raw.strip():
        return None
    cleaned = raw.strip()
    code = STATE_CODES_BY_NAME.get(cleaned.lower())
    return code or cleaned.upper()


def parse_state_filter(value: str) -> Optional[str]:
    """Parse a state filter value into a known 2-letter code.

    Accepts a 2-letter code or a full state name, case-insensitive.

    Returns:
        The upper-case code, or None when the value is not a known state
    """
    cleaned = value.strip()
    if len(cleaned) == 2 and cleaned.upper() in STATE_NAMES:
        return cleaned.upper()
    return STATE_CODES_BY_NAME.get(cleaned.lower())


def state_full_name(code: str) -> str:
    """Full name for a state code; unknown codes are returned as-is."""
    return STATE_NAMES.get(code.upper(), code)
