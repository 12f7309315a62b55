"""
Base HTTP client for the remote user and job services.
"""

from typing import Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from application_tracking.config.settings import Settings
from application_tracking.errors import DependencyFailureError

logger = structlog.get_logger()


def create_http_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Build the shared async HTTP client.

    Args:
        settings: Source of timeout and user agent.
        transport: Optional transport override (tests use httpx.MockTransport).
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={
            "User-Agent": settings.http_user_agent,
            "Accept": "application/json",
        },
        follow_redirects=True,
        transport=transport,
    )


def _log_retry(retry_state) -> None:
    logger.warning(
        "Retrying request",
        attempt=retry_state.attempt_number,
        wait=getattr(retry_state.next_action, 'sleep', 0) if retry_state.next_action else 0,
    )


class ServiceClient:
    """
    Thin wrapper around a shared ``httpx.AsyncClient`` for one remote service.

    The client is owned by the caller; this class never closes it.
    """

    SERVICE_NAME: str = "unknown"

    def __init__(self, client: httpx.AsyncClient, base_url: str, max_attempts: int = 3,
                 retry_wait: Optional[wait_base] = None):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max(1, max_attempts)
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self.logger = structlog.get_logger().bind(service=self.SERVICE_NAME)

    async def _get(self, url: str) -> httpx.Response:
        """
        GET ``url``, retrying timeouts and connection errors.

        Raises:
            httpx.TimeoutException, httpx.ConnectError: once attempts run out.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.retry_wait,
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
            before_sleep=_log_retry,
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                self.logger.debug("Fetching", url=url)
                return await self.client.get(url)

    async def _check_exists(self, url: str, subject: str) -> httpx.Response | None:
        """
        Run an existence check against ``url``.

        Returns:
            The 2xx response, or None if the remote answered 404.

        Raises:
            DependencyFailureError: on any other status or transport failure.
        """
        try:
            response = await self._get(url)
        except httpx.HTTPError as e:
            self.logger.error("Request failed", url=url, error=str(e))
            raise DependencyFailureError(f"Error contacting {self.SERVICE_NAME} for {subject}", cause=e) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_server_error:
            self.logger.error("Server error", url=url, status=response.status_code)
            raise DependencyFailureError(f"{self.SERVICE_NAME} server error for {subject}")

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            self.logger.error("Unexpected status", url=url, status=response.status_code)
            raise DependencyFailureError(f"Error contacting {self.SERVICE_NAME} for {subject}", cause=e) from e

        return response
