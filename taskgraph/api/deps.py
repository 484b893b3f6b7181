"""FastAPI dependencies."""

from fastapi import Request

from taskgraph.core.service import TaskGraphService


def get_service(request: Request) -> TaskGraphService:
    """Get the graph service attached to the running application."""
    return request.app.state.service
