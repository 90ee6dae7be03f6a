"""Task service -- CRUD for the ``task`` table of the hosted backend.

Tasks are not held locally; every call goes straight to the hosted backend
and its envelope is checked by HostedBackendClient.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from src.crm.core.errors import RecordNotFoundError
from src.crm.hosted.client import HostedBackendClient, first_result_data
from src.crm.hosted.schemas import (
    Task,
    TaskCreate,
    TaskStatus,
    TaskUpdate,
    field_list,
    where_clause,
)

logger = structlog.get_logger(__name__)

TASK_TABLE = "task"
TASK_FIELDS = ["Name", "title", "description", "due_date", "priority", "status", "created_at"]


class TaskService:
    """Task operations on top of a HostedBackendClient."""

    def __init__(self, client: HostedBackendClient) -> None:
        self._client = client

    async def get_all(self) -> list[Task]:
        envelope = await self._client.fetch_records(TASK_TABLE, {"fields": field_list(TASK_FIELDS)})
        return [Task.model_validate(row) for row in envelope.data or []]

    async def get_by_id(self, task_id: int) -> Task:
        envelope = await self._client.get_record_by_id(
            TASK_TABLE, task_id, {"fields": field_list(TASK_FIELDS)}
        )
        if not envelope.data:
            raise RecordNotFoundError("task", task_id)
        return Task.model_validate(envelope.data)

    async def get_by_status(self, status: TaskStatus | str) -> list[Task]:
        value = status.value if isinstance(status, TaskStatus) else status
        envelope = await self._client.fetch_records(
            TASK_TABLE,
            {
                "fields": field_list(TASK_FIELDS),
                "where": [where_clause("status", "EqualTo", value)],
            },
        )
        return [Task.model_validate(row) for row in envelope.data or []]

    async def create(self, data: TaskCreate) -> Task:
        """Create a task. ``Name`` mirrors the title and the status starts as active."""
        record: dict[str, Any] = {
            "Name": data.title,
            "title": data.title,
            "description": data.description,
            "due_date": data.due_date.isoformat() if data.due_date else None,
            "priority": data.priority,
            "status": TaskStatus.ACTIVE.value,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        envelope = await self._client.create_record(TASK_TABLE, {"records": [record]})
        task = Task.model_validate(first_result_data(envelope, "create"))
        logger.info("tasks.created", task_id=task.id)
        return task

    async def update(self, task_id: int, data: TaskUpdate) -> Task:
        """Send only the supplied fields; a new title also renames the record."""
        record: dict[str, Any] = {"Id": task_id}
        fields = data.model_dump(mode="json", exclude_unset=True)
        if "title" in fields:
            record["Name"] = fields["title"]
        record.update(fields)

        envelope = await self._client.update_record(TASK_TABLE, {"records": [record]})
        task = Task.model_validate(first_result_data(envelope, "update"))
        logger.info("tasks.updated", task_id=task_id, fields=sorted(fields))
        return task

    async def delete(self, task_id: int) -> bool:
        # Per-record failures are raised by the client; results may be absent.
        await self._client.delete_record(TASK_TABLE, {"RecordIds": [task_id]})
        logger.info("tasks.deleted", task_id=task_id)
        return True

    async def toggle_status(self, task_id: int) -> Task:
        """Flip a task between active and completed.

        Reads the current status and then writes the new one; two callers
        interleaving between the read and the write can lose an update.
        """
        current = await self.get_by_id(task_id)
        new_status = (
            TaskStatus.COMPLETED if current.status == TaskStatus.ACTIVE.value else TaskStatus.ACTIVE
        )
        envelope = await self._client.update_record(
            TASK_TABLE, {"records": [{"Id": task_id, "status": new_status.value}]}
        )
        task = Task.model_validate(first_result_data(envelope, "toggle"))
        logger.info("tasks.status_toggled", task_id=task_id, status=new_status.value)
        return task
