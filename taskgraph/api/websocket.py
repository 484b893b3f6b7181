"""
WebSocket Connection Manager.

Pushes graph change notifications to rendering clients.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import WebSocket
from loguru import logger

from taskgraph.repository.base import ChangeEvent

# Subscription key meaning "every change"
ALL_TASKS = "*"


class ConnectionManager:
    """
    Manages WebSocket connections and broadcasts.

    Clients subscribe to every change, or only to changes touching given
    tasks, and recompute their view when told the graph changed.
    """

    def __init__(self) -> None:
        self.active_connections: list[WebSocket] = []
        self.subscriptions: dict[WebSocket, set[str]] = {}

    @property
    def connection_count(self) -> int:
        """Number of open connections."""
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a client. It receives nothing until it subscribes."""
        await websocket.accept()
        self.active_connections.append(websocket)
        self.subscriptions[websocket] = set()
        logger.info(f"Graph client connected ({self.connection_count} open)")

    def disconnect(self, websocket: WebSocket) -> None:
        """Forget a client and its subscriptions. Unknown clients are ignored."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)
        self.subscriptions.pop(websocket, None)
        logger.info(f"Graph client disconnected ({self.connection_count} open)")

    async def handle_message(self, websocket: WebSocket, data: str) -> None:
        """
        Apply a client message.

        Supports ``subscribe``/``unsubscribe`` (with an optional ``task_id``)
        and ``ping``.

        Args:
            websocket: The WebSocket that sent the message.
            data: The raw message data (JSON string).
        """
        try:
            message = json.loads(data)
        except json.JSONDecodeError:
            message = None

        if not isinstance(message, dict):
            logger.warning(f"Invalid WebSocket message: {data}")
            return

        action = message.get("action")
        key = message.get("task_id") or ALL_TASKS

        if action == "subscribe" and websocket in self.subscriptions:
            self.subscriptions[websocket].add(key)
            logger.debug(f"Client subscribed to {key}")
            await websocket.send_text(
                json.dumps({"type": "subscription_confirmed", "task_id": key})
            )

        elif action == "unsubscribe" and websocket in self.subscriptions:
            self.subscriptions[websocket].discard(key)
            logger.debug(f"Client unsubscribed from {key}")

        elif action == "ping":
            await websocket.send_text(json.dumps({"type": "pong"}))

    async def broadcast(self, message: dict[str, Any], task_ids: list[str] | None = None) -> None:
        """
        Send a message to every client subscribed to it.

        Args:
            message: The message to send.
            task_ids: Tasks the message concerns. Clients subscribed to any
                of them, or to every change, receive it.
        """
        targets = set(task_ids or [])
        data = json.dumps(message)
        disconnected: list[WebSocket] = []

        for connection, keys in list(self.subscriptions.items()):
            if ALL_TASKS not in keys and not keys & targets:
                continue
            try:
                await connection.send_text(data)
            except Exception as e:
                logger.error(f"Broadcast error: {e}")
                disconnected.append(connection)

        for connection in disconnected:
            self.disconnect(connection)

    async def on_graph_change(self, event: ChangeEvent) -> None:
        """Repository listener relaying a change as ``graph_changed``."""
        message = {"type": "graph_changed", **event.model_dump(mode="json")}
        await self.broadcast(message, event.task_ids)

