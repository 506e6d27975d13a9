"""Database schema definition and ORM models.

This module defines SQLAlchemy ORM models for the listing store and
conversion methods between ORM models and domain models. The facet engine
only reads these tables; from_domain() exists for seeding fixtures.
"""

import logging

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from browse_stats.domain.models import Employer, Listing

logger = logging.getLogger(__name__)

Base = declarative_base()


class EmployerModel(Base):
    """ORM model for employers table."""

    __tablename__ = "employers"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, unique=True)

    def to_domain(self) -> Employer:
        """Convert ORM model to domain model."""
        return Employer(id=self.id, name=self.name, slug=self.slug)

    @classmethod
    def from_domain(cls, employer: Employer) -> "EmployerModel":
        """Create ORM model from domain model."""
        return cls(id=employer.id, name=employer.name, slug=employer.slug)


class ListingModel(Base):
    """ORM model for listings table.

    Taxonomy columns hold raw classifier output exactly as emitted.
    """

    __tablename__ = "listings"

    id = Column(Integer, primary_key=True)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")

    # Faceted columns (raw)
    state = Column(String(50), nullable=False)
    specialty = Column(String(255), nullable=True)
    job_type = Column(String(255), nullable=True)
    experience_level = Column(String(255), nullable=True)
    shift_type = Column(String(255), nullable=True)

    employer_id = Column(Integer, ForeignKey("employers.id"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_listings_active_state", "is_active", "state"),
        Index("idx_listings_active_employer", "is_active", "employer_id"),
        Index("idx_listings_specialty", "specialty"),
        Index("idx_listings_job_type", "job_type"),
    )

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingModel":
        """Create ORM model from domain model."""
        return cls(
            id=listing.id,
            title=listing.title,
            description=listing.description,
            state=listing.state,
            specialty=listing.specialty,
            job_type=listing.job_type,
            experience_level=listing.experience_level,
            shift_type=listing.shift_type,
            employer_id=listing.employer_id,
            is_active=listing.is_active,
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes if they don't exist (idempotent).

    Args:
        engine: SQLAlchemy engine instance
    """
    logger.info("Creating database schema if not exists")

    try:
        Base.metadata.create_all(engine, checkfirst=True)

        tables = inspect(engine).get_table_names()
        logger.info(f"Database schema ready. Tables: {', '.join(tables)}")

    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise
