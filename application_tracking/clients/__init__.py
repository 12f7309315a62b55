"""
HTTP clients for the user and job services.
"""

from application_tracking.clients.base import ServiceClient, create_http_client
from application_tracking.clients.services import IncrementOutcome, JobServiceClient, UserServiceClient

__all__ = [
    "ServiceClient",
    "create_http_client",
    "IncrementOutcome",
    "JobServiceClient",
    "UserServiceClient",
]
