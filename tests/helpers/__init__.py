"""Test helper utilities for browse stats tests."""

from .listing_store import ListingFactory, seed_listings

__all__ = ["ListingFactory", "seed_listings"]
