"""
Service layer for the application tracking service.
"""

from application_tracking.services.application_service import ApplicationOrchestrator
from application_tracking.services.statistics import group_by_status_and_month

__all__ = ["ApplicationOrchestrator", "group_by_status_and_month"]
