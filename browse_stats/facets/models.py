"""Output models for facet aggregation.

FacetBucket is the internal, dimension-agnostic result of folding raw
counts. The pydantic models below are the wire shape of the browse stats
response; serialize with BrowseStats.to_dict() to get camelCase keys.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field

from browse_stats.domain.models import Dimension


@dataclass(frozen=True)
class FacetBucket:
    """One canonical bucket of a taxonomy dimension.

    Attributes:
        dimension: Dimension the bucket belongs to
        name: Canonical display name
        slug: URL slug for the bucket
        count: Sum of the counts of every contributing raw value
        raw_values: Distinct raw strings folded into this bucket, sorted
    """

    dimension: Dimension
    name: str
    slug: str
    count: int
    raw_values: Tuple[str, ...] = ()


class _WireModel(BaseModel):
    model_config = {"populate_by_name": True, "frozen": True}


class StateFacet(_WireModel):
    code: str
    full_name: str = Field(..., alias="fullName")
    count: int
    slug: str


class EmployerFacet(_WireModel):
    name: str
    slug: str
    count: int


class TaxonomyFacet(_WireModel):
    name: str
    count: int
    slug: str

    @classmethod
    def from_bucket(cls, bucket: FacetBucket) -> "TaxonomyFacet":
        return cls(name=bucket.name, count=bucket.count, slug=bucket.slug)


class JobTypeFacet(TaxonomyFacet):
    """Job type bucket; db_values exposes the raw aliases for IN filtering downstream."""

    db_values: List[str] = Field(default_factory=list, alias="dbValues")

    @classmethod
    def from_bucket(cls, bucket: FacetBucket) -> "JobTypeFacet":
        return cls(
            name=bucket.name,
            count=bucket.count,
            slug=bucket.slug,
            db_values=list(bucket.raw_values),
        )


class BrowseStats(_WireModel):
    """Complete facet set for one browse request."""

    states: List[StateFacet] = Field(default_factory=list)
    employers: List[EmployerFacet] = Field(default_factory=list)
    specialties: List[TaxonomyFacet] = Field(default_factory=list)
    job_types: List[JobTypeFacet] = Field(default_factory=list, alias="jobTypes")
    experience_levels: List[TaxonomyFacet] = Field(default_factory=list, alias="experienceLevels")
    shift_types: List[TaxonomyFacet] = Field(default_factory=list, alias="shiftTypes")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON shape consumed by the browse UI."""
        return self.model_dump(by_alias=True)
