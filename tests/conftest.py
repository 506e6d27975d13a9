"""Shared fixtures for browse stats tests."""

import logging

import pytest

from browse_stats.domain.models import Employer
from browse_stats.logging.config import ContextualFilter
from browse_stats.logging.context import clear_log_context
from browse_stats.persistence import close_database, init_database

from tests.helpers import ListingFactory, seed_listings


@pytest.fixture
def db(tmp_path):
    """Initialize an empty SQLite listing store for one test."""
    init_database(f"sqlite:///{tmp_path / 'listings.db'}")
    yield
    close_database()


@pytest.fixture
def factory():
    return ListingFactory()


@pytest.fixture
def employers():
    return [
        Employer(id=1, name="Mercy Health", slug="mercy-health"),
        Employer(id=2, name="Cleveland Clinic", slug="cleveland-clinic"),
        Employer(id=3, name="OhioHealth", slug="ohiohealth"),
    ]


@pytest.fixture
def seed(db):
    """Seed callable bound to the per-test database."""
    return seed_listings


@pytest.fixture(autouse=True)
def clean_log_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture
def restore_root_logger():
    """Undo configure_logging() changes to the root logger."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if any(isinstance(f, ContextualFilter) for f in handler.filters):
            root.removeHandler(handler)
    root.setLevel(level)
