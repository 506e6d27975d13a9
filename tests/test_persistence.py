"""Unit tests for persistence layer."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from browse_stats.domain import MATCH_ALL, Dimension, FilterSet
from browse_stats.facets import build_predicate
from browse_stats.persistence import (
    DatabaseConnectionError,
    EmployerRepository,
    GroupCount,
    ListingRepository,
    PersistenceError,
    bounded_statements,
    close_database,
    get_engine,
    get_session,
    init_database,
)
from browse_stats.persistence.database import _redact_url


class TestDatabaseInitialization:
    """Tests for database initialization."""

    def test_init_database_creates_parent_directories(self, tmp_path):
        db_file = tmp_path / "subdir" / "nested" / "listings.db"

        init_database(f"sqlite:///{db_file}")
        try:
            assert db_file.exists()
            with get_session() as session:
                assert session is not None
        finally:
            close_database()

    def test_init_database_invalid_url_raises_error(self):
        with pytest.raises(DatabaseConnectionError):
            init_database("")

        with pytest.raises(DatabaseConnectionError):
            init_database(None)

    def test_schema_creation_is_idempotent(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'listings.db'}"
        init_database(url)
        close_database()
        init_database(url)
        close_database()

    def test_session_before_init_raises(self):
        close_database()
        with pytest.raises(DatabaseConnectionError):
            with get_session():
                pass
        with pytest.raises(DatabaseConnectionError):
            get_engine()

    def test_session_never_commits(self, db):
        from browse_stats.persistence.schema import EmployerModel

        with get_session() as session:
            session.add(EmployerModel(id=1, name="Mercy Health", slug="mercy-health"))
            session.flush()

        with get_session() as session:
            assert EmployerRepository(session).get_by_slug("mercy-health") is None

    def test_redact_url(self):
        assert _redact_url("postgresql://app:secret@db:5432/listings") == "postgresql://app:***@db:5432/listings"
        assert _redact_url("sqlite:///./data/listings.db") == "sqlite:///./data/listings.db"


class TestListingRepositoryGroupBy:
    """Grouped counts against a real SQLite database."""

    def test_group_by_counts_raw_values(self, seed, factory):
        seed(
            factory.many(3, specialty="ICU")
            + factory.many(2, specialty="icu")
            + [factory.make(specialty="ER")]
        )

        with get_session() as session:
            rows = ListingRepository(session).group_by(Dimension.SPECIALTY, MATCH_ALL)

        assert {row.raw_value: row.count for row in rows} == {"ICU": 3, "icu": 2, "ER": 1}

    def test_group_by_skips_blank_and_inactive(self, seed, factory):
        seed(
            [
                factory.make(specialty="ICU"),
                factory.make(specialty=None),
                factory.make(specialty="   "),
                factory.make(specialty="ICU", is_active=False),
            ]
        )

        with get_session() as session:
            rows = ListingRepository(session).group_by(Dimension.SPECIALTY, MATCH_ALL)

        assert rows == [GroupCount(raw_value="ICU", count=1)]

    def test_taxonomy_clause_matches_every_alias(self, seed, factory):
        seed(
            [
                factory.make(job_type="PRN"),
                factory.make(job_type="per-diem"),
                factory.make(job_type=" Per_Diem "),
                factory.make(job_type="Full-Time"),
            ]
        )
        predicate = build_predicate(FilterSet(job_type="Per Diem"))

        with get_session() as session:
            assert ListingRepository(session).count(predicate) == 3

    def test_state_clause_matches_code_and_full_name(self, seed, factory):
        seed([factory.make(state="OH"), factory.make(state=" oh"), factory.make(state="Ohio"), factory.make(state="NY")])

        with get_session() as session:
            assert ListingRepository(session).count(build_predicate(FilterSet(state="OH"))) == 3

    def test_search_is_case_insensitive_over_title_and_specialty(self, seed, factory):
        seed(
            [
                factory.make(title="ICU Nurse"),
                factory.make(title="Staff RN", specialty="Pediatric ICU"),
                factory.make(title="Staff RN", specialty="ER"),
            ]
        )

        with get_session() as session:
            assert ListingRepository(session).count(build_predicate(FilterSet(search="icu"))) == 2

    def test_search_wildcards_are_escaped(self, seed, factory):
        seed([factory.make(title="100% remote RN"), factory.make(title="Remote RN")])

        with get_session() as session:
            assert ListingRepository(session).count(build_predicate(FilterSet(search="100%"))) == 1

    def test_employer_slug_filter(self, seed, factory, employers):
        seed(
            [factory.make(employer_id=1), factory.make(employer_id=2), factory.make(employer_id=2)],
            employers=employers,
        )

        with get_session() as session:
            repo = ListingRepository(session)
            assert repo.count(build_predicate(FilterSet(employer_slug="cleveland-clinic"))) == 2
            assert repo.count(build_predicate(FilterSet(employer_slug="unknown"))) == 0

    def test_whitespace_variants_agree_between_grouping_and_filtering(self, seed, factory):
        seed([factory.make(specialty="ICU"), factory.make(specialty="Icu\n"), factory.make(specialty="\t")])

        with get_session() as session:
            repo = ListingRepository(session)
            rows = repo.group_by(Dimension.SPECIALTY, MATCH_ALL)
            filtered = repo.count(build_predicate(FilterSet(specialty="ICU")))
            non_blank = repo.count(MATCH_ALL, non_blank_dimension=Dimension.SPECIALTY)

        assert {row.raw_value for row in rows} == {"ICU", "Icu\n"}
        assert filtered == 2
        assert non_blank == 2

    def test_spaced_hyphen_matches_alias(self, seed, factory):
        seed(
            [
                factory.make(job_type="Full-Time"),
                factory.make(job_type="Full - Time"),
                factory.make(job_type="full\ttime"),
                factory.make(job_type="Part-Time"),
            ]
        )

        with get_session() as session:
            assert ListingRepository(session).count(build_predicate(FilterSet(job_type="Full Time"))) == 3

    def test_state_with_stray_whitespace(self, seed, factory):
        seed([factory.make(state="\tOH"), factory.make(state="Ohio\n"), factory.make(state="NY")])

        with get_session() as session:
            assert ListingRepository(session).count(build_predicate(FilterSet(state="oh"))) == 2

    def test_matches_nothing(self, seed, factory):
        seed(factory.many(3, state="OH"))

        with get_session() as session:
            repo = ListingRepository(session)
            assert repo.group_by(Dimension.STATE, build_predicate(FilterSet(state="OHI"))) == []

    def test_limit_orders_by_count(self, seed, factory, employers):
        seed(
            factory.many(1, employer_id=1) + factory.many(3, employer_id=2) + factory.many(2, employer_id=3),
            employers=employers,
        )

        with get_session() as session:
            rows = ListingRepository(session).group_by(Dimension.EMPLOYER, MATCH_ALL, limit=2)

        assert rows == [GroupCount(raw_value=2, count=3), GroupCount(raw_value=3, count=2)]

    def test_count_non_blank_dimension(self, seed, factory):
        seed([factory.make(shift_type="nights"), factory.make(shift_type=None)])

        with get_session() as session:
            repo = ListingRepository(session)
            assert repo.count(MATCH_ALL) == 2
            assert repo.count(MATCH_ALL, non_blank_dimension=Dimension.SHIFT_TYPE) == 1

    def test_sqlalchemy_error_wrapped(self):
        session = MagicMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

        with pytest.raises(PersistenceError, match="Failed to group listings by specialty"):
            ListingRepository(session).group_by(Dimension.SPECIALTY, MATCH_ALL)



def count_to(n):
    return text(f"WITH RECURSIVE seq(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM seq LIMIT {n}) SELECT count(*) FROM seq")


class TestBoundedStatements:
    """Interrupting statements that run past their bound."""

    def test_sqlite_statement_interrupted(self, db):
        with get_session() as session:
            with pytest.raises(OperationalError, match="interrupted"):
                with bounded_statements(session, lambda: True):
                    session.execute(count_to(1_000_000_000)).scalar_one()

    def test_sqlite_statement_runs_while_not_stopped(self, db):
        with get_session() as session:
            with bounded_statements(session, lambda: False):
                assert session.execute(count_to(20_000)).scalar_one() == 20_000

    def test_sqlite_handler_removed_after_block(self, db):
        with get_session() as session:
            with bounded_statements(session, lambda: True):
                pass
            assert session.execute(count_to(20_000)).scalar_one() == 20_000

    def test_postgresql_gets_statement_timeout(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "postgresql"

        with bounded_statements(session, lambda: False, timeout_seconds=1.5):
            pass

        _, params = session.execute.call_args.args
        assert params == {"timeout": "1500ms"}

    def test_other_dialects_untouched(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "mysql"

        with bounded_statements(session, lambda: True, timeout_seconds=1.5):
            pass

        session.execute.assert_not_called()

    def test_setup_failure_wrapped(self):
        session = MagicMock()
        session.get_bind.return_value.dialect.name = "postgresql"
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("connection reset"))

        with pytest.raises(PersistenceError, match="Failed to bound statements"):
            with bounded_statements(session, lambda: False, timeout_seconds=1):
                pass


class TestEmployerRepository:
    """Employer lookups."""

    def test_get_by_ids(self, seed, employers):
        seed([], employers=employers)

        with get_session() as session:
            found = EmployerRepository(session).get_by_ids([1, 3, 99])

        assert set(found) == {1, 3}
        assert found[3].name == "OhioHealth"

    def test_get_by_ids_empty(self, db):
        with get_session() as session:
            assert EmployerRepository(session).get_by_ids([]) == {}

    def test_get_by_slug(self, seed, employers):
        seed([], employers=employers)

        with get_session() as session:
            repo = EmployerRepository(session)
            assert repo.get_by_slug("mercy-health").name == "Mercy Health"
            assert repo.get_by_slug("nope") is None
