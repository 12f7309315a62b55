"""
Clients for the user service and the job service.

User service:
- Existence check: GET {user_service_url}/{user_id}/exists -> JSON boolean

Job service:
- Existence check: GET {job_service_url}/{job_id} -> 200 or 404
- Applicant count: POST {job_service_base_url}/api/jobs/async/update/{job_id}
"""

from enum import Enum

import httpx

from application_tracking.clients.base import ServiceClient
from application_tracking.errors import DependencyFailureError


class IncrementOutcome(str, Enum):
    """How the job service answered an applicant count update."""

    ACCEPTED = "accepted"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"


class UserServiceClient(ServiceClient):
    """Client for the user directory."""

    SERVICE_NAME = "user-service"

    async def user_exists(self, user_id: int) -> bool:
        """
        Check whether a user exists.

        Returns:
            The boolean reported by the user service, False on 404.

        Raises:
            DependencyFailureError: On server errors, transport failures, or a
                body that is not a JSON boolean.
        """
        url = f"{self.base_url}/{user_id}/exists"
        response = await self._check_exists(url, f"user {user_id}")
        if response is None:
            return False

        try:
            body = response.json()
        except ValueError as e:
            self.logger.error("Malformed existence response", url=url, error=str(e))
            raise DependencyFailureError(f"Malformed {self.SERVICE_NAME} response for user {user_id}", cause=e) from e

        if not isinstance(body, bool):
            self.logger.error("Unexpected existence response", url=url, body=body)
            raise DependencyFailureError(f"Unexpected {self.SERVICE_NAME} response for user {user_id}: {body!r}")
        return body


class JobServiceClient(ServiceClient):
    """Client for the job directory."""

    SERVICE_NAME = "job-service"

    def __init__(self, client: httpx.AsyncClient, base_url: str, update_base_url: str,
                 max_attempts: int = 3, retry_wait=None):
        super().__init__(client, base_url, max_attempts=max_attempts, retry_wait=retry_wait)
        self.update_base_url = update_base_url.rstrip("/")

    async def job_exists(self, job_id: int) -> bool:
        """
        Check whether a job exists.

        Raises:
            DependencyFailureError: On server errors or transport failures.
        """
        url = f"{self.base_url}/{job_id}"
        response = await self._check_exists(url, f"job {job_id}")
        return response is not None

    async def increment_applicant_count(self, job_id: int) -> IncrementOutcome:
        """
        Ask the job service to bump the applicant count of a job.

        Single attempt, never raises for HTTP or transport failures; the
        outcome is returned for logging only.
        """
        url = f"{self.update_base_url}/api/jobs/async/update/{job_id}"
        try:
            response = await self.client.post(url)
        except httpx.HTTPError as e:
            self.logger.error("Applicant count update failed", job_id=job_id, error=str(e))
            return IncrementOutcome.NETWORK_ERROR

        if response.is_success:
            self.logger.info("Applicant count updated", job_id=job_id, status=response.status_code)
            return IncrementOutcome.ACCEPTED
        if response.status_code == httpx.codes.NOT_FOUND:
            self.logger.warning("Job not found for applicant count update", job_id=job_id)
            return IncrementOutcome.NOT_FOUND

        self.logger.error(
            "Job service rejected applicant count update",
            job_id=job_id,
            status=response.status_code,
        )
        return IncrementOutcome.SERVER_ERROR
