"""
Dependencies API Routes.

Add and remove dependency edges. Insertions are validated first, so a
dependency that would close a cycle is refused instead of stored.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from pydantic import AliasChoices, BaseModel, Field

from taskgraph.api.deps import get_service
from taskgraph.api.errors import to_http_exception
from taskgraph.core.exceptions import TaskGraphError
from taskgraph.core.service import TaskGraphService
from taskgraph.graph.models import DependencyEdge, DependencyType

router = APIRouter()


class DependencyCreate(BaseModel):
    """Dependency creation request model."""

    task_id: str = Field(..., min_length=1)
    depends_on_task_id: str = Field(..., min_length=1)
    type: DependencyType = Field(
        default=DependencyType.BLOCKING,
        validation_alias=AliasChoices("type", "dependency_type"),
    )
    created_by: str | None = None


@router.get("/", response_model=list[DependencyEdge])
async def list_dependencies(
    task_id: str | None = Query(None, description="Only dependencies of this task"),
    service: TaskGraphService = Depends(get_service),
) -> list[DependencyEdge]:
    """List dependency edges, optionally for one dependent task."""
    return await service.repository.list_dependencies(task_id)


@router.post("/", response_model=DependencyEdge, status_code=201)
async def add_dependency(
    request: DependencyCreate,
    service: TaskGraphService = Depends(get_service),
) -> DependencyEdge:
    """
    Add a dependency.

    Raises:
        HTTPException: 404 if a task is not found, 409 if the dependency is
            a self-dependency, a duplicate or would create a cycle.
    """
    try:
        return await service.add_dependency(
            request.task_id,
            request.depends_on_task_id,
            request.type,
            request.created_by,
        )
    except TaskGraphError as e:
        raise to_http_exception(e) from e


@router.delete("/{edge_id}", status_code=204)
async def remove_dependency(
    edge_id: str,
    service: TaskGraphService = Depends(get_service),
) -> Response:
    """
    Remove a dependency.

    Raises:
        HTTPException: 404 if the dependency is not found.
    """
    try:
        await service.remove_dependency(edge_id)
    except TaskGraphError as e:
        raise to_http_exception(e) from e
    return Response(status_code=204)
