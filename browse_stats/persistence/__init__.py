"""Persistence layer: read access to the listing store.

Public API:
    # Database initialization and session management
    - init_database(database_url: str, create_tables: bool = True) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine
    - bounded_statements(session, should_stop, timeout_seconds) -> ContextManager[None]

    # Repository classes
    - ListingRepository: grouped counts over active listings
    - EmployerRepository: employer lookups by id and slug

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures

Example usage:
    >>> from browse_stats.domain import MATCH_ALL, Dimension
    >>> from browse_stats.persistence import init_database, get_session, ListingRepository
    >>>
    >>> init_database("sqlite:///./data/listings.db")
    >>> with get_session() as session:
    ...     rows = ListingRepository(session).group_by(Dimension.SPECIALTY, MATCH_ALL)
"""

from .database import bounded_statements, close_database, get_engine, get_session, init_database
from .exceptions import DatabaseConnectionError, PersistenceError
from .repositories import EmployerRepository, GroupCount, ListingRepository

__all__ = [
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    "bounded_statements",
    "ListingRepository",
    "EmployerRepository",
    "GroupCount",
    "PersistenceError",
    "DatabaseConnectionError",
]
