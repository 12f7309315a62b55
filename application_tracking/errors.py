"""
Error types raised by the application tracking service.

Each error carries the HTTP status code the serving layer should answer with.
"""

from typing import Optional


class ApplicationTrackingError(Exception):
    """Base error for application tracking failures."""

    status_code: int = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} (cause: {self.cause})"


class InvalidInputError(ApplicationTrackingError):
    """Request carried a value outside the accepted domain, e.g. an unknown status."""

    status_code = 400


class NotFoundError(ApplicationTrackingError):
    """Application, user or job does not exist, or a query matched nothing."""

    status_code = 404


class DependencyFailureError(ApplicationTrackingError):
    """A remote service answered with a server error or could not be reached."""

    status_code = 502
