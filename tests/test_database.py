"""
Database schema and connection tests.

Run with: pytest tests/test_database.py -v
"""

import sqlite3

import pytest


class TestDatabaseSchema:
    """Test database schema creation and structure."""

    def test_database_initialization(self, test_db):
        """Test that database initializes correctly."""
        from application_tracking.database.connection import get_db_connection

        with get_db_connection(test_db) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT name FROM sqlite_master
                WHERE type='table' AND name NOT LIKE 'sqlite_%'
                ORDER BY name
            """)
            tables = [row[0] for row in cursor.fetchall()]

        assert 'applications' in tables
        assert 'deferred_applications' in tables

    def test_applications_table_structure(self, test_db):
        """Test applications table has expected columns."""
        from application_tracking.database.connection import get_db_connection

        with get_db_connection(test_db) as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA table_info(applications)")
            columns = {row[1] for row in cursor.fetchall()}

        expected_columns = {
            'application_id', 'user_id', 'job_id', 'application_status',
            'notes', 'time_of_application', 'created_at', 'updated_at',
        }
        for col in expected_columns:
            assert col in columns, f"Missing column: {col}"

    def test_init_is_idempotent(self, test_db):
        from application_tracking.database.connection import init_database

        init_database(test_db)
        init_database(test_db)

    def test_status_check_constraint(self, test_db):
        """Unknown statuses are rejected by the table itself."""
        from application_tracking.database.connection import get_db_connection

        with pytest.raises(sqlite3.IntegrityError):
            with get_db_connection(test_db) as conn:
                conn.execute("""
                    INSERT INTO applications (user_id, job_id, application_status)
                    VALUES (1, 2, 'hired')
                """)

    def test_failed_transaction_rolls_back(self, test_db):
        from application_tracking.database.connection import get_db_connection

        with pytest.raises(RuntimeError):
            with get_db_connection(test_db) as conn:
                conn.execute("""
                    INSERT INTO applications (user_id, job_id, application_status)
                    VALUES (1, 2, 'saved')
                """)
                raise RuntimeError("abort")

        with get_db_connection(test_db) as conn:
            assert conn.execute("SELECT COUNT(*) FROM applications").fetchone()[0] == 0

    def test_reset_database(self, test_db):
        from application_tracking.database.connection import get_db_connection, reset_database

        with get_db_connection(test_db) as conn:
            conn.execute("""
                INSERT INTO applications (user_id, job_id, application_status)
                VALUES (1, 2, 'saved')
            """)

        reset_database(test_db)

        with get_db_connection(test_db) as conn:
            assert conn.execute("SELECT COUNT(*) FROM applications").fetchone()[0] == 0


class TestDatabaseHealth:
    """Test database health check functionality."""

    def test_check_database_health(self, test_db):
        from application_tracking.database.connection import check_database_health

        stats = check_database_health(test_db)

        assert stats['exists'] is True
        assert stats['tables']['applications'] == 0
        assert 'deferred_applications' in stats['tables']
        assert 'size_bytes' in stats

    def test_health_check_nonexistent_db(self, test_db_path):
        from application_tracking.database.connection import check_database_health

        if test_db_path.exists():
            test_db_path.unlink()

        stats = check_database_health(test_db_path)
        assert stats['exists'] is False


class TestDatabasePackage:
    """The package exports only the connection helpers the service uses."""

    def test_exports(self):
        import application_tracking.database as database

        assert sorted(database.__all__) == [
            "check_database_health",
            "get_connection",
            "get_db_connection",
            "init_database",
            "reset_database",
            "row_to_dict",
        ]
        for name in database.__all__:
            assert callable(getattr(database, name))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
