"""Facet layer: filter composition and leave-one-out aggregation.

Public API:
    - FacetAggregator: computes BrowseStats for a FilterSet and resolves slugs
    - build_predicate / build_leave_one_out_predicates: filter composer
    - fold_buckets / fold_states: pure folding of raw grouped counts
    - AggregationContext: per-request deadline and cancellation
"""

from .aggregator import FacetAggregator, fold_buckets, fold_states
from .context import AggregationContext
from .exceptions import (
    AggregationCancelledError,
    FacetError,
    InvalidFilterValueError,
    StoreUnavailableError,
)
from .models import (
    BrowseStats,
    EmployerFacet,
    FacetBucket,
    JobTypeFacet,
    StateFacet,
    TaxonomyFacet,
)
from .predicates import build_leave_one_out_predicates, build_predicate

__all__ = [
    "FacetAggregator",
    "fold_buckets",
    "fold_states",
    "AggregationContext",
    "FacetError",
    "StoreUnavailableError",
    "InvalidFilterValueError",
    "AggregationCancelledError",
    "BrowseStats",
    "EmployerFacet",
    "FacetBucket",
    "JobTypeFacet",
    "StateFacet",
    "TaxonomyFacet",
    "build_predicate",
    "build_leave_one_out_predicates",
]
