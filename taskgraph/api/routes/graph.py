"""
Graph API Routes.

Derived views over the current task/dependency snapshot.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from taskgraph.api.deps import get_service
from taskgraph.api.errors import to_http_exception
from taskgraph.core.exceptions import TaskGraphError
from taskgraph.core.service import TaskGraphService
from taskgraph.graph.models import CriticalPath, GraphLayout

router = APIRouter()


@router.get("/layout", response_model=GraphLayout)
async def get_layout(service: TaskGraphService = Depends(get_service)) -> GraphLayout:
    """
    Compute the layered layout with the critical path highlighted.

    Returns:
        Positioned nodes and flagged edges.

    Raises:
        HTTPException: 409 naming the cyclic tasks if the graph has a cycle.
    """
    try:
        return await service.compute_layout()
    except TaskGraphError as e:
        raise to_http_exception(e) from e


@router.get("/critical-path", response_model=CriticalPath)
async def get_critical_path(service: TaskGraphService = Depends(get_service)) -> CriticalPath:
    """
    Compute the longest chain of blocking dependencies.

    Raises:
        HTTPException: 409 if the blocking dependencies form a cycle.
    """
    try:
        return await service.critical_path()
    except TaskGraphError as e:
        raise to_http_exception(e) from e
