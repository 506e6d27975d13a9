"""Tests for slug resolution."""

import logging

import pytest

from browse_stats.domain.models import TAXONOMY_DIMENSIONS, Dimension
from browse_stats.taxonomy import (
    SlugResolver,
    get_normalizer,
    get_resolver,
    resolve_slug_to_canonical,
    slugify,
)


class TestStaticResolvers:
    """Slugs of the static taxonomy resolve without any data."""

    @pytest.mark.parametrize("dimension", TAXONOMY_DIMENSIONS)
    def test_round_trip_for_every_canonical_value(self, dimension):
        for value in get_normalizer(dimension).canonical_values():
            assert resolve_slug_to_canonical(dimension, slugify(value.display_name)) == value.display_name

    def test_resolves_known_slugs(self):
        assert resolve_slug_to_canonical(Dimension.SPECIALTY, "labor-delivery") == "Labor & Delivery"
        assert resolve_slug_to_canonical(Dimension.JOB_TYPE, "per-diem") == "Per Diem"
        assert resolve_slug_to_canonical(Dimension.SHIFT_TYPE, "night-shift") == "Night Shift"
        assert resolve_slug_to_canonical(Dimension.EXPERIENCE_LEVEL, "new-grad") == "New Grad"

    def test_resolution_is_case_insensitive(self):
        assert resolve_slug_to_canonical(Dimension.SPECIALTY, "ICU") == "ICU"

    def test_unknown_slug_returns_none(self):
        assert resolve_slug_to_canonical(Dimension.SPECIALTY, "no-such-specialty") is None
        assert resolve_slug_to_canonical(Dimension.SPECIALTY, "") is None

    def test_state_slugs(self):
        assert resolve_slug_to_canonical(Dimension.STATE, "oh") == "OH"
        assert resolve_slug_to_canonical(Dimension.STATE, "new-york") == "NY"
        assert resolve_slug_to_canonical(Dimension.STATE, "district-of-columbia") == "DC"
        assert resolve_slug_to_canonical(Dimension.STATE, "zz") is None

    def test_employer_has_no_static_resolver(self):
        with pytest.raises(KeyError):
            get_resolver(Dimension.EMPLOYER)


class TestRequestScopedResolvers:
    """with_values() extends a resolver without touching the original."""

    def test_with_values_adds_fallback_names(self):
        static = get_resolver(Dimension.SPECIALTY)
        extended = static.with_values(["Burn Unit ICU"])

        assert extended.resolve("burn-unit-icu") == "Burn Unit ICU"
        assert static.resolve("burn-unit-icu") is None

    def test_existing_names_keep_their_slug(self):
        extended = get_resolver(Dimension.SPECIALTY).with_values(["ICU", "Labor & Delivery"])
        assert extended.slug_for("ICU") == "icu"
        assert len(extended) == len(get_resolver(Dimension.SPECIALTY))

    def test_collision_gets_numeric_suffix(self, caplog):
        resolver = SlugResolver.from_names(Dimension.SPECIALTY, ["Med Surg"])

        with caplog.at_level(logging.WARNING):
            extended = resolver.with_values(["Med-Surg", "Med/Surg"])

        assert extended.slug_for("Med Surg") == "med-surg"
        assert extended.slug_for("Med-Surg") == "med-surg-2"
        assert extended.slug_for("Med/Surg") == "medsurg"
        assert extended.resolve("med-surg-2") == "Med-Surg"
        assert any(getattr(r, "event", None) == "facets.slug.collision" for r in caplog.records)

    def test_collision_suffixes_follow_sorted_order(self):
        resolver = SlugResolver.from_names(Dimension.JOB_TYPE, ["B-C", "B C", "B&C"])
        # Sorted: "B C", "B&C", "B-C"
        assert resolver.resolve("b-c") == "B C"
        assert resolver.resolve("b-c-2") == "B&C"
        assert resolver.resolve("b-c-3") == "B-C"

    def test_slug_for_unknown_name_falls_back_to_slugify(self):
        assert get_resolver(Dimension.SHIFT_TYPE).slug_for("Weekend Shift") == "weekend-shift"

    def test_contains(self):
        resolver = get_resolver(Dimension.JOB_TYPE)
        assert "travel" in resolver
        assert "seasonal" not in resolver
