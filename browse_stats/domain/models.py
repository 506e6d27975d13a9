"""Core domain models for listings, employers, and browse filters.

This module defines the data structures used throughout the application:
- Dimension: the facet dimensions a browse request can be counted over
- Listing: a classified job listing as read from the listing store
- Employer: the employer a listing belongs to
- FilterSet: the immutable set of active filters for a single browse request
"""

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class Dimension(str, Enum):
    """Facet dimensions.

    The first five carry their own filter value in a FilterSet and take part
    in taxonomy folding (state is folded by code). Employer is a facet
    without synonym folding.
    """

    STATE = "state"
    SPECIALTY = "specialty"
    JOB_TYPE = "job_type"
    EXPERIENCE_LEVEL = "experience_level"
    SHIFT_TYPE = "shift_type"
    EMPLOYER = "employer"

    @classmethod
    def from_param(cls, value: str) -> "Dimension":
        """Parse a dimension from a URL segment or query parameter name.

        Accepts snake_case, camelCase and hyphenated spellings
        ("job_type", "jobType", "job-type").

        Raises:
            ValueError: If the value names no dimension
        """
        key = value.strip()
        if key.isupper():
            key = key.lower()
        key = "".join("_" + ch.lower() if ch.isupper() else ch for ch in key)
        key = key.replace("-", "_").lstrip("_")
        return cls(key)


TAXONOMY_DIMENSIONS = (
    Dimension.SPECIALTY,
    Dimension.JOB_TYPE,
    Dimension.EXPERIENCE_LEVEL,
    Dimension.SHIFT_TYPE,
)

# Dimensions that carry their own filter value and get a leave-one-out predicate
FILTER_DIMENSIONS = (Dimension.STATE,) + TAXONOMY_DIMENSIONS


class Listing(BaseModel):
    """A classified job listing.

    Raw taxonomy fields hold whatever the upstream classifier emitted and
    are normalized only when counted.
    """

    id: int = Field(..., description="Listing primary key")
    title: str = Field(..., description="Job title")
    description: str = Field("", description="Job description text")
    state: str = Field(..., description="2-letter state code")
    specialty: Optional[str] = Field(None, description="Raw specialty tag")
    job_type: Optional[str] = Field(None, description="Raw job type tag")
    experience_level: Optional[str] = Field(None, description="Raw experience level tag")
    shift_type: Optional[str] = Field(None, description="Raw shift type tag")
    employer_id: Optional[int] = Field(None, description="Employer foreign key")
    is_active: bool = Field(True, description="Only active listings are counted")

    model_config = {"frozen": True}


class Employer(BaseModel):
    """Employer record. Names and slugs are canonical."""

    id: int
    name: str
    slug: str

    model_config = {"frozen": True}


# Inbound query parameter name -> FilterSet field
_QUERY_PARAMS = {
    "state": "state",
    "specialty": "specialty",
    "jobType": "job_type",
    "job_type": "job_type",
    "experienceLevel": "experience_level",
    "experience_level": "experience_level",
    "shiftType": "shift_type",
    "shift_type": "shift_type",
    "employerSlug": "employer_slug",
    "employer_slug": "employer_slug",
    "search": "search",
}


class FilterSet(BaseModel):
    """Active filters for one browse request.

    Immutable once built. Blank values are stored as None so that "absent"
    and "empty" mean the same thing everywhere downstream.
    """

    state: Optional[str] = None
    specialty: Optional[str] = None
    job_type: Optional[str] = None
    experience_level: Optional[str] = None
    shift_type: Optional[str] = None
    employer_slug: Optional[str] = None
    search: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Optional[str]:
        """Strip whitespace and collapse blank strings to None."""
        if v is None:
            return None
        stripped = str(v).strip()
        return stripped or None

    @classmethod
    def from_query_params(cls, params: Mapping[str, Any]) -> "FilterSet":
        """Build a FilterSet from request query parameters.

        Unknown parameters are ignored. When both spellings of a parameter
        are present the camelCase one wins.

        Args:
            params: Mapping of query parameter name to value

        Returns:
            FilterSet instance
        """
        values: dict = {}
        for name, field_name in _QUERY_PARAMS.items():
            if name in params and field_name not in values:
                values[field_name] = params[name]
        return cls(**values)

    def value_for(self, dimension: Dimension) -> Optional[str]:
        """Return the active filter value for a dimension, if any."""
        if dimension == Dimension.EMPLOYER:
            return self.employer_slug
        return getattr(self, dimension.value)
