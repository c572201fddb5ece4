"""Appointment workflow submission.

The chat core never books anything itself. It hands an appointment request
to a downstream workflow and gets back an opaque reference.
"""

import logging
import uuid
from dataclasses import asdict, dataclass
from typing import Protocol

from twin.settings import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentRequest:
    """An appointment request captured in chat."""

    business_id: int
    customer_name: str
    contact: str
    preferred_time: str
    notes: str | None = None


class AppointmentSubmitter(Protocol):
    """Narrow interface to the appointment workflow engine."""

    async def submit(self, request: AppointmentRequest) -> str:
        """Submit a request and return an opaque reference."""
        ...


class CloudTasksAppointmentSubmitter:
    """Enqueues appointment requests on Cloud Tasks for the workflow worker."""

    def __init__(self, worker_url: str) -> None:
        self.worker_url = worker_url
        self._client = None

    def _get_client(self):
        # Created on first use so startup does not require GCP credentials
        if self._client is None:
            from twin.infrastructure.cloud_tasks import CloudTasksClient

            self._client = CloudTasksClient()
        return self._client

    async def submit(self, request: AppointmentRequest) -> str:
        task_name = await self._get_client().create_task_async(asdict(request), self.worker_url)
        logger.info(
            "Appointment request enqueued",
            extra={"business_id": request.business_id, "task_name": task_name},
        )
        # Task name is the full queue path; the last segment is enough to quote to customers
        return task_name.rsplit("/", 1)[-1]


class LoggingAppointmentSubmitter:
    """Development submitter that only logs the request."""

    async def submit(self, request: AppointmentRequest) -> str:
        reference = f"APT-{uuid.uuid4().hex[:8].upper()}"
        logger.info(
            "Appointment request recorded (no workflow configured)",
            extra={"business_id": request.business_id, "reference": reference},
        )
        return reference


def get_appointment_submitter() -> AppointmentSubmitter:
    """Return the submitter for the configured environment."""
    if settings.cloud_tasks_worker_url:
        return CloudTasksAppointmentSubmitter(settings.cloud_tasks_worker_url)
    return LoggingAppointmentSubmitter()
