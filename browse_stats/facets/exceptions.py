"""Facet layer exceptions.

All facet exceptions inherit from FacetError. Only StoreUnavailableError
and AggregationCancelledError ever leave the facet layer;
InvalidFilterValueError is recovered inside the filter composer.
"""

from typing import Optional


class FacetError(Exception):
    """Base exception for all facet layer errors."""

    pass


class StoreUnavailableError(FacetError):
    """Raised when a listing store query fails or the request deadline expires.

    The whole aggregation fails; callers surface this as a 5xx rather than
    returning a facet set with a dimension missing.
    """

    def __init__(self, message: str, dimension: Optional[str] = None):
        self.dimension = dimension
        super().__init__(message)


class InvalidFilterValueError(FacetError):
    """Raised when a filter value cannot denote anything (e.g. a 3-letter state code)."""

    def __init__(self, field: str, value: str, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field} filter '{value}': {reason}")


class AggregationCancelledError(FacetError):
    """Raised when the request that owns an aggregation was cancelled."""

    pass
