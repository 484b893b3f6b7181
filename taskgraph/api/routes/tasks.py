"""
Tasks API Routes.

List and create tasks, check start eligibility and change status.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from taskgraph.api.deps import get_service
from taskgraph.api.errors import to_http_exception
from taskgraph.core.exceptions import TaskGraphError
from taskgraph.core.service import TaskGraphService
from taskgraph.graph.models import Eligibility, Task, TaskPriority, TaskStatus

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class TaskCreate(BaseModel):
    """Task creation request model."""

    id: str | None = Field(default=None, min_length=1)
    title: str = ""
    status: TaskStatus = TaskStatus.PENDING
    priority: TaskPriority = TaskPriority.MEDIUM


class StatusUpdate(BaseModel):
    """Status change request model."""

    status: TaskStatus


# ============================================================================
# Routes
# ============================================================================


@router.get("/", response_model=list[Task])
async def list_tasks(service: TaskGraphService = Depends(get_service)) -> list[Task]:
    """List all tasks in creation order."""
    return await service.repository.list_tasks()


@router.post("/", response_model=Task, status_code=201)
async def create_task(
    request: TaskCreate,
    service: TaskGraphService = Depends(get_service),
) -> Task:
    """
    Create a task.

    Args:
        request: Task fields. The ID is generated when omitted.

    Returns:
        The stored task.

    Raises:
        HTTPException: 409 if a task with the same ID exists.
    """
    fields = request.model_dump(exclude_none=True)
    try:
        return await service.add_task(Task(**fields))
    except TaskGraphError as e:
        raise to_http_exception(e) from e


@router.get("/{task_id}/eligibility", response_model=Eligibility)
async def get_eligibility(
    task_id: str,
    service: TaskGraphService = Depends(get_service),
) -> Eligibility:
    """
    Check whether a task may start.

    Raises:
        HTTPException: 404 if the task is not found.
    """
    try:
        return await service.eligibility(task_id)
    except TaskGraphError as e:
        raise to_http_exception(e) from e


@router.patch("/{task_id}/status", response_model=Task)
async def update_status(
    task_id: str,
    request: StatusUpdate,
    service: TaskGraphService = Depends(get_service),
) -> Task:
    """
    Change a task's status.

    Raises:
        HTTPException: 404 if the task is not found, 409 if it is blocked.
    """
    try:
        return await service.update_task_status(task_id, request.status)
    except TaskGraphError as e:
        raise to_http_exception(e) from e


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    service: TaskGraphService = Depends(get_service),
) -> Response:
    """
    Delete a task and its dependencies.

    Raises:
        HTTPException: 404 if the task is not found.
    """
    try:
        await service.remove_task(task_id)
    except TaskGraphError as e:
        raise to_http_exception(e) from e
    return Response(status_code=204)
