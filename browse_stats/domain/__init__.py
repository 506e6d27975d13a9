"""Domain models for the browse facet engine."""

from .models import (
    FILTER_DIMENSIONS,
    TAXONOMY_DIMENSIONS,
    Dimension,
    Employer,
    FilterSet,
    Listing,
)
from .predicates import MATCH_ALL, Predicate, StateClause, TaxonomyClause

__all__ = [
    "Dimension",
    "Employer",
    "FilterSet",
    "Listing",
    "FILTER_DIMENSIONS",
    "TAXONOMY_DIMENSIONS",
    "Predicate",
    "StateClause",
    "TaxonomyClause",
    "MATCH_ALL",
]
