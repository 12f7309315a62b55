"""
Data models for the application tracking service.
"""

from application_tracking.models.application import (
    Application,
    ApplicationRepository,
    ApplicationStatus,
    VALID_STATUSES,
    is_valid_status,
)
from application_tracking.models.deferred import DeferredApplication, DeferredApplicationStore

__all__ = [
    "Application",
    "ApplicationRepository",
    "ApplicationStatus",
    "VALID_STATUSES",
    "is_valid_status",
    "DeferredApplication",
    "DeferredApplicationStore",
]
