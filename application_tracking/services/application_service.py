"""
Application lifecycle orchestration.

Validates requests, mutates the application store and triggers the side
effects of a create: the applicant count update on the job service, or the
whole create sequence at a later time.
"""

import math
from dataclasses import replace
from datetime import datetime, timedelta
from functools import partial
from typing import Callable, Optional

import structlog

from application_tracking.clients.services import JobServiceClient, UserServiceClient
from application_tracking.errors import InvalidInputError, NotFoundError
from application_tracking.models.application import (
    Application,
    ApplicationRepository,
    ApplicationStatus,
    is_valid_status,
)
from application_tracking.models.deferred import DeferredApplicationStore
from application_tracking.services.statistics import group_by_status_and_month
from application_tracking.tasks.runner import DeferredTaskRunner, utcnow

logger = structlog.get_logger()


def _check_status(status) -> str:
    if not is_valid_status(status):
        raise InvalidInputError(f"Invalid application status: {status}")
    return status.value if isinstance(status, ApplicationStatus) else status


class ApplicationOrchestrator:
    """
    Create, update, query and delete applications.

    Every collaborator is passed in; the orchestrator owns none of them.
    When ``deferred_store`` is given, deferred creates are persisted and can
    be resumed after a restart.
    """

    def __init__(
        self,
        repository: ApplicationRepository,
        user_client: UserServiceClient,
        job_client: JobServiceClient,
        task_runner: DeferredTaskRunner,
        deferred_store: Optional[DeferredApplicationStore] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.user_client = user_client
        self.job_client = job_client
        self.task_runner = task_runner
        self.deferred_store = deferred_store
        self._clock = clock

    # Create

    async def create_application(self, user_id: int, job_id: int, application: Application) -> Application:
        """
        Persist a new application for ``user_id`` and ``job_id``.

        IDs embedded in ``application`` are ignored. The applicant count
        update is scheduled afterwards and its outcome never affects the
        result.

        Raises:
            InvalidInputError: If the status is not a known status.
        """
        _check_status(application.application_status)
        return self._persist(user_id, job_id, application)

    async def create_application_deferred(
        self,
        user_id: int,
        job_id: int,
        delay_hours: float,
        application: Application,
    ) -> None:
        """
        Create the application ``delay_hours`` from now.

        The status is checked right away. Failures while the deferred create
        runs are logged and never reported back.

        Raises:
            InvalidInputError: If the status is not a known status, or
                ``delay_hours`` is not a finite number or puts the execution
                time out of range.
        """
        _check_status(application.application_status)
        execute_at = self._execute_at(delay_hours)
        application = replace(application)

        deferred_id = None
        if self.deferred_store is not None:
            deferred_id = self.deferred_store.add(user_id, job_id, application, execute_at).id

        self._schedule_deferred(deferred_id, user_id, job_id, application, execute_at)
        logger.info(
            "Deferred application scheduled",
            user_id=user_id,
            job_id=job_id,
            execute_at=execute_at.isoformat(),
            durable=deferred_id is not None,
        )

    def _execute_at(self, delay_hours) -> datetime:
        # Negative delays are allowed and run as soon as possible
        if isinstance(delay_hours, bool) or not isinstance(delay_hours, (int, float)):
            raise InvalidInputError(f"Invalid delay: {delay_hours!r}")
        try:
            if not math.isfinite(delay_hours):
                raise InvalidInputError(f"Invalid delay: {delay_hours}")
            return self._clock() + timedelta(hours=delay_hours)
        except OverflowError as e:
            raise InvalidInputError(f"Delay out of range: {delay_hours} hours", cause=e) from e

    def resume_deferred_applications(self) -> int:
        """
        Reschedule every persisted deferred create.

        Past-due creates run as soon as possible.

        Returns:
            Number of creates rescheduled.
        """
        if self.deferred_store is None:
            return 0

        pending = self.deferred_store.pending()
        for deferred in pending:
            self._schedule_deferred(
                deferred.id,
                deferred.user_id,
                deferred.job_id,
                deferred.application,
                deferred.execute_at,
            )
        if pending:
            logger.info("Resumed deferred applications", count=len(pending))
        return len(pending)

    def _persist(self, user_id: int, job_id: int, application: Application) -> Application:
        record = replace(application, application_id=None, user_id=user_id, job_id=job_id)
        created = self.repository.create(record)
        logger.info(
            "Application created",
            application_id=created.application_id,
            user_id=user_id,
            job_id=job_id,
        )
        self._schedule_applicant_count_update(job_id)
        return created

    def _schedule_deferred(self, deferred_id: Optional[int], user_id: int, job_id: int,
                           application: Application, execute_at: datetime) -> None:
        self.task_runner.schedule(
            partial(self._run_deferred, deferred_id, user_id, job_id, application),
            execute_at,
            name=f"deferred_application_{user_id}_{job_id}",
        )

    def _run_deferred(self, deferred_id: Optional[int], user_id: int, job_id: int,
                      application: Application) -> None:
        try:
            created = self._persist(user_id, job_id, application)
        except Exception as e:
            # Durable rows stay in place and run again on the next resume
            logger.exception(
                "Deferred application create failed",
                user_id=user_id,
                job_id=job_id,
                error=str(e),
            )
            return

        logger.info(
            "Deferred application created",
            application_id=created.application_id,
            user_id=user_id,
            job_id=job_id,
        )
        if deferred_id is not None:
            try:
                self.deferred_store.remove(deferred_id)
            except Exception as e:
                logger.exception("Failed to clear deferred application", deferred_id=deferred_id, error=str(e))

    def _schedule_applicant_count_update(self, job_id: int) -> None:
        self.task_runner.schedule(
            partial(self._update_applicant_count, job_id),
            name=f"applicant_count_{job_id}",
        )

    async def _update_applicant_count(self, job_id: int) -> None:
        outcome = await self.job_client.increment_applicant_count(job_id)
        logger.info("Applicant count update finished", job_id=job_id, outcome=outcome.value)

    # Update / delete

    def update_application(
        self,
        application_id: int,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        time_of_application: Optional[datetime] = None,
    ) -> Application:
        """
        Partially update an application; None arguments leave fields untouched.

        Raises:
            InvalidInputError: If ``status`` is given and not a known status.
            NotFoundError: If the application does not exist.
        """
        if status is not None:
            status = _check_status(status)

        application = self.repository.find_by_id(application_id)
        if application is None:
            raise NotFoundError("Application not found")

        if status is not None:
            application.application_status = status
        if notes is not None:
            application.notes = notes
        if time_of_application is not None:
            application.time_of_application = time_of_application

        return self.repository.save(application)

    def delete_application(self, application_id: int) -> None:
        """
        Raises:
            NotFoundError: If the application does not exist.
        """
        if not self.repository.exists_by_id(application_id):
            raise NotFoundError("Application not found")
        self.repository.delete_by_id(application_id)
        logger.info("Application deleted", application_id=application_id)

    # Queries
    # An empty result is reported as NotFoundError, not as an empty list.

    def get_applications_by_user_id(self, user_id: int, status: Optional[str] = None) -> list[Application]:
        applications = self.repository.find_by_user_id(user_id, status)
        if not applications:
            raise NotFoundError(f"No applications found for user ID: {user_id}")
        return applications

    def get_applications_by_job_id(self, job_id: int, status: Optional[str] = None) -> list[Application]:
        applications = self.repository.find_by_job_id(job_id, status)
        if not applications:
            raise NotFoundError(f"No applications found for job ID: {job_id}")
        return applications

    def get_application_by_application_id(self, application_id: int) -> list[Application]:
        applications = self.repository.find_by_application_id(application_id)
        if not applications:
            raise NotFoundError(f"No application found with ID: {application_id}")
        return applications

    def get_applications_grouped_by_status_and_month(self, user_id: int) -> dict:
        """
        Statistics for one user's applications.

        Returns:
            ``{"status": {status: count}, "date": {year: {MONTH: count}}}``.
            Applications without a time of application only count towards
            ``status``.

        Raises:
            NotFoundError: If the user has no applications.
        """
        applications = self.repository.find_by_user_id(user_id)
        if not applications:
            raise NotFoundError(f"No applications found for user ID: {user_id}")
        return group_by_status_and_month(applications)

    # Remote validation

    async def validate_user(self, user_id: int) -> bool:
        """
        Raises:
            DependencyFailureError: If the user service fails or is unreachable.
        """
        return await self.user_client.user_exists(user_id)

    async def validate_job(self, job_id: int) -> bool:
        """
        Raises:
            DependencyFailureError: If the job service fails or is unreachable.
        """
        return await self.job_client.job_exists(job_id)
