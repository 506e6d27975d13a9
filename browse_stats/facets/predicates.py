"""Filter composition: leave-one-out predicates.

build_predicate() turns a FilterSet into an immutable Predicate that applies
every active filter except the one belonging to the excluded dimension. The
predicate is store-agnostic; ListingRepository translates it into SQL.

Taxonomy filters are canonical-aware: a filter of "Per Diem" (or "prn", or
"PER-DIEM") becomes a clause over every folded raw key that normalizes to
Per Diem, so filtering and faceting agree on which raw rows belong to which
canonical value.
"""

from typing import Dict, Optional

from browse_stats.domain.models import FILTER_DIMENSIONS, TAXONOMY_DIMENSIONS, Dimension, FilterSet
from browse_stats.domain.predicates import Predicate, StateClause, TaxonomyClause
from browse_stats.logging import get_logger
from browse_stats.taxonomy import get_normalizer, parse_state_filter

from .exceptions import InvalidFilterValueError

logger = get_logger(__name__, component="facets")


def _state_clause(value: str) -> StateClause:
    code = parse_state_filter(value)
    if code is None:
        raise InvalidFilterValueError(
            "state", value, "expected a 2-letter state code or a full state name"
        )
    return StateClause(code=code)


def _taxonomy_clause(dimension: Dimension, value: str) -> TaxonomyClause:
    normalizer = get_normalizer(dimension)
    canonical = normalizer.normalize(value)
    if canonical is None:
        raise InvalidFilterValueError(dimension.value, value, "blank value")
    match_keys = normalizer.match_keys(canonical.display_name)
    if not match_keys:
        raise InvalidFilterValueError(
            dimension.value, value, f"no raw value can normalize to '{canonical.display_name}'"
        )
    return TaxonomyClause(dimension=dimension, canonical=canonical.display_name, match_keys=match_keys)


def build_predicate(filter_set: FilterSet, exclude: Optional[Dimension] = None) -> Predicate:
    """Build the predicate for a FilterSet, leaving out one dimension's filter.

    search always applies. employer_slug applies to every dimension except
    the employer facet itself. Invalid filter values are recovered locally:
    they produce a predicate that matches nothing, never an exception.

    Args:
        filter_set: Active filters for the request
        exclude: Dimension whose own filter is lifted (None keeps all filters)

    Returns:
        New Predicate value (filter_set is never modified)
    """
    state: Optional[StateClause] = None
    clauses = []
    matches_nothing = False

    try:
        if exclude != Dimension.STATE and filter_set.state:
            state = _state_clause(filter_set.state)

        for dimension in TAXONOMY_DIMENSIONS:
            value = filter_set.value_for(dimension)
            if dimension == exclude or not value:
                continue
            clauses.append(_taxonomy_clause(dimension, value))

    except InvalidFilterValueError as e:
        logger.warning(
            f"Ignoring unmatchable filter: {e}",
            extra={
                "event": "facets.filter.invalid",
                "field": e.field,
                "value": e.value,
                "excluded_dimension": exclude.value if exclude else None,
            },
        )
        matches_nothing = True

    return Predicate(
        state=state,
        taxonomy=tuple(clauses),
        employer_slug=filter_set.employer_slug if exclude != Dimension.EMPLOYER else None,
        search=filter_set.search,
        matches_nothing=matches_nothing,
        excluded=exclude,
    )


def build_leave_one_out_predicates(filter_set: FilterSet) -> Dict[Dimension, Predicate]:
    """Build one leave-one-out predicate per facet dimension, employer included."""
    dimensions = FILTER_DIMENSIONS + (Dimension.EMPLOYER,)
    return {dimension: build_predicate(filter_set, exclude=dimension) for dimension in dimensions}
