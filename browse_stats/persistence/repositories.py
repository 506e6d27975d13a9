"""Data access layer (repositories) for the listing store.

Repositories encapsulate read-only database operations and return domain
models or plain count rows rather than ORM models. ListingRepository is the
grouped-count capability the facet aggregator consumes; it translates a
store-agnostic Predicate into SQLAlchemy conditions.

Taxonomy and state clauses are not folded in SQL. SQL string functions
disagree with Python on whitespace and Unicode case, so the repository
reads the distinct stored values of a dimension once, folds them with the
same functions the facet folding uses, and matches rows with an exact IN
over the raw values that qualify.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import false, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from browse_stats.domain.models import Dimension, Employer
from browse_stats.domain.predicates import Predicate
from browse_stats.taxonomy.normalizer import normalize_state
from browse_stats.taxonomy.text import fold_key

from .exceptions import PersistenceError
from .schema import EmployerModel, ListingModel

logger = logging.getLogger(__name__)

_COLUMNS = {
    Dimension.STATE: ListingModel.state,
    Dimension.SPECIALTY: ListingModel.specialty,
    Dimension.JOB_TYPE: ListingModel.job_type,
    Dimension.EXPERIENCE_LEVEL: ListingModel.experience_level,
    Dimension.SHIFT_TYPE: ListingModel.shift_type,
    Dimension.EMPLOYER: ListingModel.employer_id,
}


@dataclass(frozen=True)
class GroupCount:
    """One row of a grouped count: a raw stored value and its listing count."""

    raw_value: Any
    count: int


def has_value(dimension: Dimension, raw: Any) -> bool:
    """Whether a stored raw value contributes to some bucket of a dimension."""
    if dimension == Dimension.STATE:
        return normalize_state(raw) is not None
    return bool(fold_key(raw))


class ListingRepository:
    """Repository for grouped counts over active listings.

    Distinct raw values are cached per instance; create one repository per
    session so the cache never outlives a request.
    """

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session
        self._distinct: Dict[Dimension, List[Any]] = {}

    def _distinct_values(self, dimension: Dimension) -> List[Any]:
        """Distinct non-null raw values stored for a dimension (all listings)."""
        if dimension not in self._distinct:
            column = _COLUMNS[dimension]
            stmt = select(column).where(column.is_not(None)).distinct()
            self._distinct[dimension] = list(self.session.execute(stmt).scalars().all())
        return self._distinct[dimension]

    def _raw_in(self, dimension: Dimension, keep: Callable[[Any], bool]):
        """Exact IN condition over the stored raw values accepted by keep."""
        raw_values = [raw for raw in self._distinct_values(dimension) if keep(raw)]
        return _COLUMNS[dimension].in_(raw_values)

    def _non_blank(self, dimension: Dimension):
        """Condition excluding rows that contribute to no bucket of a dimension."""
        if dimension == Dimension.EMPLOYER:
            return ListingModel.employer_id.is_not(None)
        return self._raw_in(dimension, lambda raw: has_value(dimension, raw))

    def _conditions(self, predicate: Predicate) -> List[Any]:
        """Translate a Predicate into SQLAlchemy WHERE conditions (always includes is_active)."""
        conditions: List[Any] = [ListingModel.is_active.is_(True)]

        if predicate.matches_nothing:
            conditions.append(false())
            return conditions

        if predicate.state is not None:
            code = predicate.state.code
            conditions.append(self._raw_in(Dimension.STATE, lambda raw: normalize_state(raw) == code))

        for clause in predicate.taxonomy:
            keys = frozenset(clause.match_keys)
            conditions.append(self._raw_in(clause.dimension, lambda raw: fold_key(raw) in keys))

        if predicate.employer_slug:
            employer_ids = select(EmployerModel.id).where(EmployerModel.slug == predicate.employer_slug)
            conditions.append(ListingModel.employer_id.in_(employer_ids))

        if predicate.search:
            conditions.append(
                or_(
                    ListingModel.title.icontains(predicate.search, autoescape=True),
                    ListingModel.specialty.icontains(predicate.search, autoescape=True),
                )
            )

        return conditions

    def group_by(
        self, dimension: Dimension, predicate: Predicate, limit: Optional[int] = None
    ) -> List[GroupCount]:
        """Count active listings matching a predicate, grouped by raw dimension value.

        Rows with a null or blank value are excluded. Without a limit, rows
        come back ordered by raw value; with a limit they are the top rows by
        count (ties broken by raw value).

        Args:
            dimension: Column to group by
            predicate: Filter predicate
            limit: Optional cap on returned groups

        Returns:
            List of GroupCount rows

        Raises:
            PersistenceError: If database error occurs
        """
        column = _COLUMNS[dimension]
        count = func.count(ListingModel.id)
        try:
            stmt = (
                select(column, count)
                .where(*self._conditions(predicate), self._non_blank(dimension))
                .group_by(column)
            )
            if limit is not None:
                stmt = stmt.order_by(count.desc(), column.asc()).limit(limit)
            else:
                stmt = stmt.order_by(column.asc())

            result = self.session.execute(stmt)
            return [GroupCount(raw_value=raw, count=int(n)) for raw, n in result.all()]

        except SQLAlchemyError as e:
            logger.error(f"Error grouping listings by {dimension.value}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to group listings by {dimension.value}: {e}") from e

    def count(self, predicate: Predicate, non_blank_dimension: Optional[Dimension] = None) -> int:
        """Count active listings matching a predicate.

        Args:
            predicate: Filter predicate
            non_blank_dimension: If given, only count rows with a value for it

        Returns:
            Number of matching listings

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            conditions = self._conditions(predicate)
            if non_blank_dimension is not None:
                conditions.append(self._non_blank(non_blank_dimension))
            stmt = select(func.count(ListingModel.id)).where(*conditions)
            return int(self.session.execute(stmt).scalar_one())

        except SQLAlchemyError as e:
            logger.error(f"Error counting listings: {e}", exc_info=True)
            raise PersistenceError(f"Failed to count listings: {e}") from e


class EmployerRepository:
    """Repository for employer lookups."""

    def __init__(self, session: Session):
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy session for database operations
        """
        self.session = session

    def get_by_ids(self, employer_ids: Iterable[int]) -> Dict[int, Employer]:
        """Retrieve employers by primary key.

        Args:
            employer_ids: Employer ids to look up

        Returns:
            Mapping of id to Employer (missing ids are absent)

        Raises:
            PersistenceError: If database error occurs
        """
        ids = list(employer_ids)
        if not ids:
            return {}
        try:
            stmt = select(EmployerModel).where(EmployerModel.id.in_(ids))
            models = self.session.execute(stmt).scalars().all()
            return {model.id: model.to_domain() for model in models}

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving employers {ids}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve employers: {e}") from e

    def get_by_slug(self, slug: str) -> Optional[Employer]:
        """Retrieve an employer by slug.

        Returns:
            Employer if found, None otherwise

        Raises:
            PersistenceError: If database error occurs
        """
        try:
            stmt = select(EmployerModel).where(EmployerModel.slug == slug)
            model = self.session.execute(stmt).scalar_one_or_none()
            return model.to_domain() if model is not None else None

        except SQLAlchemyError as e:
            logger.error(f"Error retrieving employer by slug {slug}: {e}", exc_info=True)
            raise PersistenceError(f"Failed to retrieve employer: {e}") from e
