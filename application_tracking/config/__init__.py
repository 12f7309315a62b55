"""
Configuration module for the application tracking service.
"""

from application_tracking.config.logging import configure_logging
from application_tracking.config.settings import settings, Settings, PROJECT_ROOT, DATA_DIR

__all__ = ["settings", "Settings", "PROJECT_ROOT", "DATA_DIR", "configure_logging"]
