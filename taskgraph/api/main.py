"""
Taskgraph API.

FastAPI backend serving graph layouts, eligibility checks and dependency
mutations, with WebSocket change notifications.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from taskgraph import __version__
from taskgraph.api.websocket import ConnectionManager
from taskgraph.core.config import Settings, get_settings
from taskgraph.core.service import TaskGraphService
from taskgraph.repository.base import TaskRepository
from taskgraph.repository.memory import InMemoryTaskRepository


async def _default_repository(settings: Settings) -> TaskRepository:
    """Use SQL storage when DATABASE_URL is set, memory otherwise."""
    if settings.database_url is None:
        logger.info("DATABASE_URL not set, using in-memory repository")
        return InMemoryTaskRepository()

    from taskgraph.repository.sql import SqlTaskRepository
    from taskgraph.storage.database import init_db

    await init_db()
    return SqlTaskRepository()


def create_app(
    repository: TaskRepository | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        repository: Optional repository. Chosen from settings if not provided.
        settings: Optional settings override. Uses default if not provided.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """
        Startup and shutdown events.

        Args:
            app: The FastAPI application instance.

        Yields:
            None during application runtime.
        """
        logger.info("Starting Taskgraph API...")
        repo = repository or await _default_repository(settings)
        service = TaskGraphService(repo, settings)
        unsubscribe = service.subscribe(app.state.ws_manager.on_graph_change)
        app.state.service = service

        yield

        unsubscribe()
        if settings.database_url is not None and repository is None:
            from taskgraph.storage.database import close_db

            await close_db()
        logger.info("Shutting down Taskgraph API...")

    app = FastAPI(
        title="Taskgraph API",
        description="Task dependency graph engine",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.ws_manager = ConnectionManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from taskgraph.api.routes import dependencies, graph, tasks

    app.include_router(graph.router, prefix="/api/graph", tags=["graph"])
    app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])
    app.include_router(dependencies.router, prefix="/api/dependencies", tags=["dependencies"])

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """
        WebSocket endpoint for change notifications.

        Clients subscribe by sending ``{"action": "subscribe"}``, optionally
        with a ``task_id``, and receive ``graph_changed`` events.

        Args:
            websocket: The WebSocket connection.
        """
        manager: ConnectionManager = app.state.ws_manager
        await manager.connect(websocket)
        try:
            while True:
                data = await websocket.receive_text()
                await manager.handle_message(websocket, data)
        except WebSocketDisconnect:
            manager.disconnect(websocket)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """
        Health check endpoint.

        Returns:
            Health status and version, plus database reachability when
            DATABASE_URL is configured.
        """
        status = {"status": "healthy", "version": __version__}

        if settings.database_url is not None and repository is None:
            from taskgraph.storage.database import health_check as db_health_check

            status["database"] = "connected" if await db_health_check() else "unreachable"

        return status

    @app.get("/api/ws-status")
    async def ws_status() -> dict[str, int]:
        """
        Get WebSocket connection status.

        Returns:
            Number of active connections.
        """
        return {"active_connections": app.state.ws_manager.connection_count}

    return app


app = create_app()
