"""
Deferred application model and database operations.

A row exists while a deferred create is waiting to run. Rows are only
written when durable deferral is enabled.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
import json

from application_tracking.database.connection import get_db_connection, row_to_dict
from application_tracking.models.application import Application


@dataclass
class DeferredApplication:
    """A create request scheduled for a later time."""

    id: Optional[int] = None
    user_id: int = 0
    job_id: int = 0
    application: Optional[Application] = None
    execute_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "DeferredApplication":
        """Create a DeferredApplication from a database row."""
        data = row_to_dict(row) if hasattr(row, 'keys') else dict(row)
        payload = json.loads(data.pop('payload'))
        return cls(
            id=data['id'],
            user_id=data['user_id'],
            job_id=data['job_id'],
            application=Application.from_dict(payload),
            execute_at=datetime.fromisoformat(data['execute_at']),
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else None,
        )


class DeferredApplicationStore:
    """Persistence for pending deferred creates."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def add(self, user_id: int, job_id: int, application: Application,
            execute_at: datetime) -> DeferredApplication:
        payload = json.dumps(application.to_dict())
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute("""
                INSERT INTO deferred_applications (user_id, job_id, payload, execute_at)
                VALUES (?, ?, ?, ?)
            """, (user_id, job_id, payload, execute_at.isoformat()))
            deferred_id = cursor.lastrowid

        return DeferredApplication(
            id=deferred_id,
            user_id=user_id,
            job_id=job_id,
            application=application,
            execute_at=execute_at,
        )

    def pending(self) -> list[DeferredApplication]:
        """Get all pending deferred creates, soonest first."""
        with get_db_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM deferred_applications ORDER BY execute_at, id"
            ).fetchall()
            return [DeferredApplication.from_row(row) for row in rows]

    def remove(self, deferred_id: int) -> bool:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.execute(
                "DELETE FROM deferred_applications WHERE id = ?",
                (deferred_id,)
            )
            return cursor.rowcount > 0
