"""REST API endpoints for tasks stored in the hosted backend."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.crm.api.deps import get_task_service, http_error
from src.crm.core.errors import CRMError
from src.crm.hosted.schemas import Task, TaskCreate, TaskStatus, TaskUpdate
from src.crm.hosted.tasks import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[Task])
async def list_tasks(
    task_status: TaskStatus | None = Query(default=None, alias="status"),
    service: TaskService = Depends(get_task_service),
) -> list[Task]:
    """All tasks, or only those with the given status."""
    try:
        if task_status is not None:
            return await service.get_by_status(task_status)
        return await service.get_all()
    except CRMError as exc:
        raise http_error(exc) from exc


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: int, service: TaskService = Depends(get_task_service)) -> Task:
    try:
        return await service.get_by_id(task_id)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.post("", response_model=Task, status_code=201)
async def create_task(body: TaskCreate, service: TaskService = Depends(get_task_service)) -> Task:
    try:
        return await service.create(body)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.patch("/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    service: TaskService = Depends(get_task_service),
) -> Task:
    try:
        return await service.update(task_id, body)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.post("/{task_id}/toggle", response_model=Task)
async def toggle_task(task_id: int, service: TaskService = Depends(get_task_service)) -> Task:
    """Flip a task between active and completed."""
    try:
        return await service.toggle_status(task_id)
    except CRMError as exc:
        raise http_error(exc) from exc


@router.delete("/{task_id}", status_code=204)
async def delete_task(task_id: int, service: TaskService = Depends(get_task_service)) -> None:
    try:
        await service.delete(task_id)
    except CRMError as exc:
        raise http_error(exc) from exc
