"""
Database module for the application tracking service.
"""

from application_tracking.database.connection import (
    get_connection,
    get_db_connection,
    init_database,
    reset_database,
    check_database_health,
    row_to_dict,
)

__all__ = [
    "get_connection",
    "get_db_connection",
    "init_database",
    "reset_database",
    "check_database_health",
    "row_to_dict",
]
