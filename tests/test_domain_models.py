"""Tests for domain models."""

import pytest
from pydantic import ValidationError

from browse_stats.domain.models import (
    FILTER_DIMENSIONS,
    TAXONOMY_DIMENSIONS,
    Dimension,
    Employer,
    FilterSet,
    Listing,
)


class TestDimension:
    """Test Dimension parsing and grouping."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("job_type", Dimension.JOB_TYPE),
            ("jobType", Dimension.JOB_TYPE),
            ("job-type", Dimension.JOB_TYPE),
            ("JOB_TYPE", Dimension.JOB_TYPE),
            ("experienceLevel", Dimension.EXPERIENCE_LEVEL),
            ("shift-type", Dimension.SHIFT_TYPE),
            (" state ", Dimension.STATE),
            ("employer", Dimension.EMPLOYER),
        ],
    )
    def test_from_param(self, value, expected):
        assert Dimension.from_param(value) == expected

    def test_from_param_rejects_unknown(self):
        with pytest.raises(ValueError):
            Dimension.from_param("salary")

    def test_filter_dimensions(self):
        assert FILTER_DIMENSIONS == (Dimension.STATE,) + TAXONOMY_DIMENSIONS
        assert Dimension.EMPLOYER not in FILTER_DIMENSIONS


class TestFilterSet:
    """Test FilterSet construction."""

    def test_blank_values_become_none(self):
        filters = FilterSet(state="  ", specialty="", search=" icu ")
        assert filters.state is None
        assert filters.specialty is None
        assert filters.search == "icu"

    def test_frozen(self):
        filters = FilterSet(state="OH")
        with pytest.raises(ValidationError):
            filters.state = "NY"

    def test_from_query_params_accepts_camel_and_snake_case(self):
        filters = FilterSet.from_query_params(
            {"jobType": "PRN", "experience_level": "new grad", "shiftType": "nights", "employerSlug": "mercy"}
        )
        assert filters.job_type == "PRN"
        assert filters.experience_level == "new grad"
        assert filters.shift_type == "nights"
        assert filters.employer_slug == "mercy"

    def test_camel_case_wins_over_snake_case(self):
        filters = FilterSet.from_query_params({"job_type": "Travel", "jobType": "Contract"})
        assert filters.job_type == "Contract"

    def test_from_query_params_ignores_unknown(self):
        filters = FilterSet.from_query_params({"page": "2", "state": "OH"})
        assert filters == FilterSet(state="OH")

    def test_value_for(self):
        filters = FilterSet(specialty="ICU", employer_slug="mercy-health")
        assert filters.value_for(Dimension.SPECIALTY) == "ICU"
        assert filters.value_for(Dimension.EMPLOYER) == "mercy-health"
        assert filters.value_for(Dimension.STATE) is None


class TestListingAndEmployer:
    """Test Listing and Employer models."""

    def test_listing_defaults(self):
        listing = Listing(id=1, title="RN", state="OH")
        assert listing.is_active is True
        assert listing.specialty is None
        assert listing.description == ""

    def test_listing_requires_state(self):
        with pytest.raises(ValidationError):
            Listing(id=1, title="RN")

    def test_employer(self):
        employer = Employer(id=7, name="Mercy Health", slug="mercy-health")
        assert employer.slug == "mercy-health"
