"""Cloud Tasks client wrapper for handing requests to downstream workflows."""

import asyncio
import json
from typing import Any

from google.cloud import tasks_v2

from twin.settings import settings


class CloudTasksClient:
    """Cloud Tasks client wrapper for queuing workflow jobs."""

    def __init__(self) -> None:
        """Initialize Cloud Tasks client."""
        self.client = tasks_v2.CloudTasksClient()
        self.project = settings.gcp_project_id
        self.location = settings.cloud_tasks_location
        self.queue_name = settings.cloud_tasks_queue_name
        self.queue_path = self.client.queue_path(
            self.project,
            self.location,
            self.queue_name,
        )

    def create_task(self, payload: dict[str, Any], url: str) -> str:
        """Create a Cloud Task.

        Args:
            payload: Task payload (will be JSON serialized)
            url: Target URL for the task

        Returns:
            Task name/path
        """
        task = {
            "http_request": {
                "http_method": tasks_v2.HttpMethod.POST,
                "url": url,
                "headers": {"Content-Type": "application/json"},
                "body": json.dumps(payload).encode(),
            }
        }

        response = self.client.create_task(
            request={
                "parent": self.queue_path,
                "task": task,
            }
        )

        return response.name

    async def create_task_async(self, payload: dict[str, Any], url: str) -> str:
        """Create a Cloud Task without blocking the event loop."""
        # The sync client runs in a worker thread
        return await asyncio.to_thread(self.create_task, payload, url)
