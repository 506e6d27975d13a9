"""Facet aggregation service.

This module implements leave-one-out faceted counting:
1. Build one predicate per dimension that lifts that dimension's own filter
2. Issue one grouped-count query per dimension against the listing store
3. Fold raw values into canonical buckets, summing merged duplicates
4. Attach stable slugs and sort deterministically

Aggregation is fail-fast: if any dimension's query fails the whole request
fails with StoreUnavailableError instead of returning a partial facet set.
"""

import logging
from contextlib import AbstractContextManager
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from sqlalchemy.orm import Session

from browse_stats.domain.models import TAXONOMY_DIMENSIONS, Dimension, FilterSet
from browse_stats.domain.predicates import MATCH_ALL, Predicate
from browse_stats.logging import get_logger
from browse_stats.logging.context import log_context
from browse_stats.persistence import (
    EmployerRepository,
    GroupCount,
    ListingRepository,
    PersistenceError,
    bounded_statements,
    get_session,
)
from browse_stats.taxonomy import get_normalizer, get_resolver, normalize_state, state_full_name

from .context import AggregationContext
from .exceptions import FacetError, StoreUnavailableError
from .models import BrowseStats, EmployerFacet, FacetBucket, JobTypeFacet, StateFacet, TaxonomyFacet
from .predicates import build_leave_one_out_predicates

logger = get_logger(__name__, component="facets")

T = TypeVar("T")

SessionFactory = Callable[[], AbstractContextManager]

DEFAULT_EMPLOYER_LIMIT = 20
DEFAULT_QUERY_TIMEOUT_SECONDS = 10.0


def fold_buckets(dimension: Dimension, rows: Iterable[GroupCount]) -> List[FacetBucket]:
    """Fold raw grouped counts of a taxonomy dimension into canonical buckets.

    Counts of raw values that normalize to the same canonical value are
    summed; blank raw values contribute to no bucket. Buckets are sorted
    alphabetically by display name.

    Args:
        dimension: Taxonomy dimension the rows were grouped by
        rows: Raw value counts from the listing store

    Returns:
        Sorted list of FacetBucket
    """
    normalizer = get_normalizer(dimension)
    counts: Dict[str, int] = {}
    raw_values: Dict[str, set] = {}

    for row in rows:
        canonical = normalizer.normalize(row.raw_value)
        if canonical is None:
            continue
        name = canonical.display_name
        counts[name] = counts.get(name, 0) + row.count
        raw_values.setdefault(name, set()).add(row.raw_value)

    # Request-scoped resolver; the static one is never touched
    resolver = get_resolver(dimension).with_values(counts)

    buckets = [
        FacetBucket(
            dimension=dimension,
            name=name,
            slug=resolver.slug_for(name),
            count=count,
            raw_values=tuple(sorted(raw_values[name])),
        )
        for name, count in counts.items()
    ]
    return sorted(buckets, key=lambda b: (b.name.lower(), b.name))


def fold_states(rows: Iterable[GroupCount]) -> List[StateFacet]:
    """Fold raw state values by code, sorted by count desc then full name."""
    counts: Dict[str, int] = {}
    for row in rows:
        code = normalize_state(row.raw_value)
        if code is None:
            continue
        counts[code] = counts.get(code, 0) + row.count

    states = [
        StateFacet(code=code, full_name=state_full_name(code), count=count, slug=code.lower())
        for code, count in counts.items()
    ]
    return sorted(states, key=lambda s: (-s.count, s.full_name))


class FacetAggregator:
    """Computes leave-one-out facet counts for browse requests.

    Holds only configuration. Every call to aggregate() opens its own
    session and AggregationContext, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        session_factory: SessionFactory = get_session,
        employer_limit: int = DEFAULT_EMPLOYER_LIMIT,
        query_timeout_seconds: float = DEFAULT_QUERY_TIMEOUT_SECONDS,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize FacetAggregator.

        Args:
            session_factory: Context manager factory yielding a SQLAlchemy session
            employer_limit: Employer facet is capped to this many top employers
            query_timeout_seconds: Per-request deadline for listing store calls
            logger_instance: Logger instance (defaults to module logger)
        """
        self.session_factory = session_factory
        self.employer_limit = employer_limit
        self.query_timeout_seconds = query_timeout_seconds
        self.logger = logger_instance or logger

    def new_context(self, request_id: Optional[str] = None) -> AggregationContext:
        """Create a request-scoped context using the configured timeout."""
        return AggregationContext.start(self.query_timeout_seconds, request_id=request_id)

    def aggregate(
        self, filter_set: FilterSet, context: Optional[AggregationContext] = None
    ) -> BrowseStats:
        """Compute every facet for a FilterSet.

        Args:
            filter_set: Active filters for the request
            context: Request context (a fresh one is created when omitted)

        Returns:
            BrowseStats with states, employers and every taxonomy dimension

        Raises:
            StoreUnavailableError: If any store query fails or the deadline passes
            AggregationCancelledError: If the context was cancelled
        """
        context = context or self.new_context()

        with log_context(request_id=context.request_id):
            self.logger.info(
                "Facet aggregation started",
                extra={
                    "event": "facets.aggregation.started",
                    "filters": filter_set.model_dump(exclude_none=True),
                },
            )

            try:
                predicates = build_leave_one_out_predicates(filter_set)

                with self.session_factory() as session, bounded_statements(
                    session, context.should_stop, context.remaining()
                ):
                    stats = self._aggregate(session, predicates, context)

            except FacetError as e:
                self._log_failure(e)
                raise
            except PersistenceError as e:
                self._log_failure(e)
                raise StoreUnavailableError(f"Listing store unavailable: {e}") from e

            self.logger.info(
                "Facet aggregation completed",
                extra={
                    "event": "facets.aggregation.completed",
                    "state_count": len(stats.states),
                    "employer_count": len(stats.employers),
                    "specialty_count": len(stats.specialties),
                    "job_type_count": len(stats.job_types),
                },
            )
            return stats

    def _aggregate(
        self,
        session: Session,
        predicates: Dict[Dimension, Predicate],
        context: AggregationContext,
    ) -> BrowseStats:
        listings = ListingRepository(session)

        state_rows = self._query(
            context,
            Dimension.STATE,
            lambda: listings.group_by(Dimension.STATE, predicates[Dimension.STATE]),
        )
        states = fold_states(state_rows)

        buckets: Dict[Dimension, List[FacetBucket]] = {}
        for dimension in TAXONOMY_DIMENSIONS:
            rows = self._query(
                context,
                dimension,
                lambda dimension=dimension: listings.group_by(dimension, predicates[dimension]),
            )
            buckets[dimension] = fold_buckets(dimension, rows)

        employers = self._count_employers(session, listings, predicates[Dimension.EMPLOYER], context)

        return BrowseStats(
            states=states,
            employers=employers,
            specialties=[TaxonomyFacet.from_bucket(b) for b in buckets[Dimension.SPECIALTY]],
            job_types=[JobTypeFacet.from_bucket(b) for b in buckets[Dimension.JOB_TYPE]],
            experience_levels=[
                TaxonomyFacet.from_bucket(b) for b in buckets[Dimension.EXPERIENCE_LEVEL]
            ],
            shift_types=[TaxonomyFacet.from_bucket(b) for b in buckets[Dimension.SHIFT_TYPE]],
        )

    def _count_employers(
        self,
        session: Session,
        listings: ListingRepository,
        predicate: Predicate,
        context: AggregationContext,
    ) -> List[EmployerFacet]:
        # Cap before the name lookup to bound the secondary query
        rows = self._query(
            context,
            Dimension.EMPLOYER,
            lambda: listings.group_by(Dimension.EMPLOYER, predicate, limit=self.employer_limit),
        )
        if not rows:
            return []

        employer_repo = EmployerRepository(session)
        details = self._query(
            context,
            Dimension.EMPLOYER,
            lambda: employer_repo.get_by_ids(row.raw_value for row in rows),
        )

        facets = []
        for row in rows:
            employer = details.get(row.raw_value)
            if employer is None:
                self.logger.warning(
                    f"Listings reference missing employer {row.raw_value}",
                    extra={"event": "facets.employer.missing", "employer_id": row.raw_value},
                )
                continue
            facets.append(EmployerFacet(name=employer.name, slug=employer.slug, count=row.count))

        return sorted(facets, key=lambda e: (-e.count, e.name))

    def _query(self, context: AggregationContext, dimension: Dimension, call: Callable[[], T]) -> T:
        """Run one store call inside the request's deadline and cancellation bounds."""
        context.check(dimension.value)
        try:
            result = call()
        except PersistenceError as e:
            # An interrupted statement surfaces as a store error
            reason = context.stop_reason(dimension.value)
            if reason is not None:
                raise reason from e
            raise StoreUnavailableError(
                f"Listing store query for {dimension.value} failed: {e}",
                dimension=dimension.value,
            ) from e
        context.check(dimension.value)

        self.logger.debug(
            f"Counted {dimension.value}",
            extra={"event": "facets.dimension.counted", "dimension": dimension.value},
        )
        return result

    def _log_failure(self, error: Exception) -> None:
        self.logger.error(
            f"Facet aggregation failed: {error}",
            extra={
                "event": "facets.aggregation.failed",
                "error_type": type(error).__name__,
                "dimension": getattr(error, "dimension", None),
            },
        )

    def resolve_slug(
        self, dimension: Dimension, slug: str, context: Optional[AggregationContext] = None
    ) -> Optional[str]:
        """Resolve an inbound URL slug back to a filter value.

        Static taxonomy values resolve without touching the store. Otherwise
        the dimension's raw values are read (active listings, no filters) so
        fallback values seen in the data resolve too. Employer slugs resolve
        to the employer name.

        Args:
            dimension: Dimension the slug belongs to
            slug: URL path segment
            context: Request context (a fresh one is created when omitted)

        Returns:
            Canonical display name (state code for states), or None when
            nothing matches; callers should answer 404

        Raises:
            StoreUnavailableError: If a store lookup fails
        """
        if not slug or not slug.strip():
            return None

        if dimension != Dimension.EMPLOYER:
            found = get_resolver(dimension).resolve(slug)
            if found is not None or dimension == Dimension.STATE:
                return found

        context = context or self.new_context()
        with log_context(request_id=context.request_id):
            try:
                with self.session_factory() as session, bounded_statements(
                    session, context.should_stop, context.remaining()
                ):
                    if dimension == Dimension.EMPLOYER:
                        employer_repo = EmployerRepository(session)
                        employer = self._query(
                            context, dimension, lambda: employer_repo.get_by_slug(slug.strip().lower())
                        )
                        return employer.name if employer is not None else None

                    listings = ListingRepository(session)
                    rows = self._query(
                        context, dimension, lambda: listings.group_by(dimension, MATCH_ALL)
                    )
            except PersistenceError as e:
                self._log_failure(e)
                raise StoreUnavailableError(f"Listing store unavailable: {e}") from e

            names = [bucket.name for bucket in fold_buckets(dimension, rows)]
            return get_resolver(dimension).with_values(names).resolve(slug)
