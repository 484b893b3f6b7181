"""Translation of engine errors into HTTP errors."""

from fastapi import HTTPException

from taskgraph.core.exceptions import (
    DependencyRejectedError,
    DuplicateTaskError,
    GraphCycleDetectedError,
    TaskBlockedError,
    TaskGraphError,
    UnknownDependencyError,
    UnknownTaskError,
)


def to_http_exception(error: TaskGraphError) -> HTTPException:
    """
    Map an engine error to an HTTPException with a structured detail.

    Args:
        error: Error raised by the service.

    Returns:
        HTTPException to raise from the route.
    """
    if isinstance(error, UnknownTaskError):
        return HTTPException(
            status_code=404,
            detail={"error": "unknown_task", "task_id": error.task_id, "message": str(error)},
        )

    if isinstance(error, UnknownDependencyError):
        return HTTPException(
            status_code=404,
            detail={"error": "unknown_dependency", "edge_id": error.edge_id, "message": str(error)},
        )

    if isinstance(error, DuplicateTaskError):
        return HTTPException(
            status_code=409,
            detail={"error": "duplicate_task", "task_id": error.task_id, "message": str(error)},
        )

    if isinstance(error, GraphCycleDetectedError):
        return HTTPException(
            status_code=409,
            detail={
                "error": "graph_cycle_detected",
                "task_ids": error.task_ids,
                "cycle": error.cycle,
                "message": error.remediation,
            },
        )

    if isinstance(error, TaskBlockedError):
        return HTTPException(
            status_code=409,
            detail={
                "error": "task_blocked",
                "task_id": error.task_id,
                "unmet_dependencies": error.unmet,
                "message": str(error),
            },
        )

    if isinstance(error, DependencyRejectedError):
        return HTTPException(
            status_code=409,
            detail={"error": "dependency_rejected", "reason": error.reason, "message": str(error)},
        )

    return HTTPException(status_code=500, detail={"error": "internal", "message": str(error)})
