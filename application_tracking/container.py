"""
Composition root.

Builds the store, HTTP client, task runner and orchestrator from settings
and owns their lifetime. The serving layer enters the container once at
startup and uses ``container.orchestrator`` for every request.
"""

from typing import Optional

import httpx
import structlog

from application_tracking.clients.base import create_http_client
from application_tracking.clients.services import JobServiceClient, UserServiceClient
from application_tracking.config.logging import configure_logging
from application_tracking.config.settings import Settings, settings as default_settings
from application_tracking.database.connection import init_database
from application_tracking.models.application import ApplicationRepository
from application_tracking.models.deferred import DeferredApplicationStore
from application_tracking.services.application_service import ApplicationOrchestrator
from application_tracking.tasks.runner import DeferredTaskRunner

logger = structlog.get_logger()


class ServiceContainer:
    """
    Usage:
        async with ServiceContainer(settings) as container:
            await container.orchestrator.create_application(1, 2, application)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        self._transport = transport
        self.http_client: Optional[httpx.AsyncClient] = None
        self.task_runner: Optional[DeferredTaskRunner] = None
        self.orchestrator: Optional[ApplicationOrchestrator] = None

    async def __aenter__(self) -> "ServiceContainer":
        cfg = self.settings
        configure_logging(cfg)
        init_database(cfg.database_path)

        self.http_client = create_http_client(cfg, transport=self._transport)
        self.task_runner = DeferredTaskRunner()

        try:
            deferred_store = DeferredApplicationStore(cfg.database_path) if cfg.deferred_tasks_durable else None
            self.orchestrator = ApplicationOrchestrator(
                repository=ApplicationRepository(cfg.database_path),
                user_client=UserServiceClient(
                    self.http_client,
                    cfg.user_service_url,
                    max_attempts=cfg.http_max_retries,
                ),
                job_client=JobServiceClient(
                    self.http_client,
                    cfg.job_service_url,
                    cfg.job_service_base_url,
                    max_attempts=cfg.http_max_retries,
                ),
                task_runner=self.task_runner,
                deferred_store=deferred_store,
            )
            self.orchestrator.resume_deferred_applications()
        except Exception as e:
            logger.error("Application tracking service failed to start", error=str(e))
            await self.task_runner.shutdown()
            await self.http_client.aclose()
            raise

        logger.info(
            "Application tracking service started",
            database=str(cfg.database_path),
            durable_deferral=cfg.deferred_tasks_durable,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.task_runner:
            await self.task_runner.shutdown()
        if self.http_client:
            await self.http_client.aclose()
        logger.info("Application tracking service stopped")
