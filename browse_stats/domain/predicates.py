"""Store-agnostic filter predicate values.

Predicates are built by browse_stats.facets.predicates and translated into
SQL by ListingRepository. They are frozen: a predicate is never modified
after construction, a different filter combination is a new value.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .models import Dimension


@dataclass(frozen=True)
class TaxonomyClause:
    """Match rows whose raw value folds (fold_key) to one of match_keys.

    Attributes:
        dimension: Taxonomy dimension the clause filters on
        canonical: Canonical display name the filter resolved to
        match_keys: Folded raw keys that normalize to canonical
    """

    dimension: Dimension
    canonical: str
    match_keys: Tuple[str, ...]


@dataclass(frozen=True)
class StateClause:
    """Match rows whose stored state normalizes to code."""

    code: str


@dataclass(frozen=True)
class Predicate:
    """Immutable filter predicate over active listings.

    Attributes:
        state: State clause, if a state filter applies
        taxonomy: Taxonomy clauses, at most one per dimension
        employer_slug: Exact employer slug, if an employer filter applies
        search: Case-insensitive substring over title and specialty
        matches_nothing: True when an active filter can never match
        excluded: Dimension whose own filter was left out
    """

    state: Optional[StateClause] = None
    taxonomy: Tuple[TaxonomyClause, ...] = ()
    employer_slug: Optional[str] = None
    search: Optional[str] = None
    matches_nothing: bool = False
    excluded: Optional[Dimension] = None

    def clause_for(self, dimension: Dimension) -> Optional[TaxonomyClause]:
        """Return the taxonomy clause for a dimension, if present."""
        for clause in self.taxonomy:
            if clause.dimension == dimension:
                return clause
        return None


# Every active listing
MATCH_ALL = Predicate()
