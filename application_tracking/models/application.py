"""
Application model and database operations.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from application_tracking.database.connection import get_db_connection, row_to_dict


class ApplicationStatus(str, Enum):
    SAVED = "saved"
    APPLIED = "applied"
    WITHDRAW = "withdraw"
    OFFERED = "offered"
    REJECTED = "rejected"
    INTERVIEWING = "interviewing"
    ARCHIVED = "archived"
    SCREENING = "screening"


VALID_STATUSES = frozenset(status.value for status in ApplicationStatus)


def is_valid_status(value) -> bool:
    """True if ``value`` is one of the accepted application statuses."""
    if isinstance(value, ApplicationStatus):
        return True
    return isinstance(value, str) and value in VALID_STATUSES


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class Application:
    """One user's candidacy for one job posting."""

    application_id: Optional[int] = None
    user_id: Optional[int] = None
    job_id: Optional[int] = None
    application_status: str = ApplicationStatus.SAVED.value
    notes: Optional[str] = None
    time_of_application: Optional[datetime] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        # Keep the stored value a plain string
        if isinstance(self.application_status, ApplicationStatus):
            self.application_status = self.application_status.value

    @classmethod
    def from_row(cls, row) -> "Application":
        """Create an Application from a database row."""
        data = row_to_dict(row) if hasattr(row, 'keys') else dict(row)

        for dt_field in ['time_of_application', 'created_at', 'updated_at']:
            data[dt_field] = _parse_datetime(data.get(dt_field))

        return cls(**data)

    @classmethod
    def from_dict(cls, data: dict) -> "Application":
        """Create an Application from a dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known_fields}
        if 'time_of_application' in filtered:
            filtered['time_of_application'] = _parse_datetime(filtered['time_of_application'])
        return cls(**filtered)

    def to_dict(self) -> dict:
        """Convert Application to a JSON-friendly dictionary."""
        return {
            'application_id': self.application_id,
            'user_id': self.user_id,
            'job_id': self.job_id,
            'application_status': self.application_status,
            'notes': self.notes,
            'time_of_application': _format_datetime(self.time_of_application),
            'created_at': _format_datetime(self.created_at),
            'updated_at': _format_datetime(self.updated_at),
        }


class ApplicationRepository:
    """
    Record store for applications backed by SQLite.

    Every method opens its own connection, so one repository can be shared
    between request handlers and deferred tasks.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def create(self, application: Application) -> Application:
        """
        Insert a new application.

        Returns:
            The stored application with its assigned id.
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute("""
                INSERT INTO applications (
                    user_id, job_id, application_status, notes, time_of_application
                ) VALUES (?, ?, ?, ?, ?)
            """, (
                application.user_id,
                application.job_id,
                application.application_status,
                application.notes,
                _format_datetime(application.time_of_application),
            ))
            application_id = cursor.lastrowid

        return self.find_by_id(application_id)

    def save(self, application: Application) -> Application:
        """Insert or update an application."""
        if application.application_id is None:
            return self.create(application)

        with get_db_connection(self.db_path) as conn:
            conn.execute("""
                UPDATE applications SET
                    user_id = ?,
                    job_id = ?,
                    application_status = ?,
                    notes = ?,
                    time_of_application = ?,
                    updated_at = CURRENT_TIMESTAMP
                WHERE application_id = ?
            """, (
                application.user_id,
                application.job_id,
                application.application_status,
                application.notes,
                _format_datetime(application.time_of_application),
                application.application_id,
            ))

        return self.find_by_id(application.application_id) or application

    def find_by_id(self, application_id: int) -> Optional[Application]:
        """Get an application by ID."""
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM applications WHERE application_id = ?",
                (application_id,)
            ).fetchone()
            return Application.from_row(row) if row else None

    def find_by_application_id(self, application_id: int) -> list[Application]:
        """Get the applications matching an ID, as a list."""
        application = self.find_by_id(application_id)
        return [application] if application else []

    def find_by_user_id(self, user_id: int, status: Optional[str] = None) -> list[Application]:
        """Get a user's applications, optionally filtered by status."""
        return self._find_by("user_id", user_id, status)

    def find_by_job_id(self, job_id: int, status: Optional[str] = None) -> list[Application]:
        """Get all applications to a job, optionally filtered by status."""
        return self._find_by("job_id", job_id, status)

    def exists_by_id(self, application_id: int) -> bool:
        with get_db_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT 1 FROM applications WHERE application_id = ? LIMIT 1",
                (application_id,)
            ).fetchone()
            return row is not None

    def delete_by_id(self, application_id: int) -> bool:
        """
        Delete an application by ID.

        Returns:
            True if deleted, False if not found.
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM applications WHERE application_id = ?",
                (application_id,)
            )
            return cursor.rowcount > 0

    def count(self) -> int:
        with get_db_connection(self.db_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM applications").fetchone()[0]

    def _find_by(self, column: str, value: int, status: Optional[str]) -> list[Application]:
        # column is one of our own field names, never user input
        query = f"SELECT * FROM applications WHERE {column} = ?"
        params: tuple = (value,)
        if status is not None:
            query += " AND application_status = ?"
            params += (status.value if isinstance(status, ApplicationStatus) else status,)
        query += " ORDER BY application_id"

        with get_db_connection(self.db_path) as conn:
            rows = conn.execute(query, params).fetchall()
            return [Application.from_row(row) for row in rows]
