"""Taskgraph HTTP and WebSocket API."""

from taskgraph.api.main import app, create_app

__all__ = ["app", "create_app"]
