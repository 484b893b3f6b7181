"""Repository contract for task and dependency snapshots.

The graph engine never owns persistence. It pulls full snapshots through
this interface and is told, through ``subscribe``, that something changed
and a recomputation is due.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from enum import Enum

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from taskgraph.graph.models import (
    DependencyEdge,
    DependencyType,
    GraphSnapshot,
    Task,
    TaskStatus,
)


class ChangeKind(str, Enum):
    """What kind of mutation a change notification reports."""

    TASK_ADDED = "task_added"
    TASK_UPDATED = "task_updated"
    TASK_REMOVED = "task_removed"
    DEPENDENCY_ADDED = "dependency_added"
    DEPENDENCY_REMOVED = "dependency_removed"


class ChangeEvent(BaseModel):
    """Notification that the task or dependency collection changed."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    task_ids: list[str] = Field(
        default_factory=list,
        description="Tasks touched by the change",
    )
    edge_id: str | None = Field(
        default=None,
        description="Dependency touched by the change, if any",
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


ChangeListener = Callable[[ChangeEvent], Awaitable[None]]


class TaskRepository(ABC):
    """
    Source of task/dependency snapshots and sink for mutation requests.

    Subclasses call ``_notify`` after each committed mutation.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a change listener.

        Args:
            listener: Async callable invoked with every ChangeEvent.

        Returns:
            Callable that removes the listener again.
        """
        self._listeners.append(listener)
        logger.debug(f"Listener subscribed. Total: {len(self._listeners)}")

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
                logger.debug(f"Listener unsubscribed. Total: {len(self._listeners)}")

        return unsubscribe

    async def _notify(self, event: ChangeEvent) -> None:
        """Deliver an event to every listener, in registration order."""
        for listener in list(self._listeners):
            try:
                await listener(event)
            except Exception as e:
                logger.error(f"Change listener failed on {event.kind.value}: {e}")

    async def snapshot(self) -> GraphSnapshot:
        """
        Get the current tasks and dependencies as one snapshot.

        Backends with their own transactions override this so both
        collections are read from the same state.
        """
        tasks = await self.list_tasks()
        dependencies = await self.list_dependencies()
        return GraphSnapshot(tasks=tasks, dependencies=dependencies)

    # =========================================================================
    # QUERIES
    # =========================================================================

    @abstractmethod
    async def list_tasks(self) -> list[Task]:
        """List all tasks in creation order."""

    @abstractmethod
    async def get_task(self, task_id: str) -> Task | None:
        """Get a task by ID, or None."""

    @abstractmethod
    async def list_dependencies(self, task_id: str | None = None) -> list[DependencyEdge]:
        """
        List dependency edges.

        Args:
            task_id: Only return edges whose dependent is this task.
        """

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    @abstractmethod
    async def add_task(self, task: Task) -> Task:
        """
        Store a new task.

        Raises:
            DuplicateTaskError: If a task with the same ID exists.
        """

    @abstractmethod
    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        """
        Change a task's status.

        Raises:
            UnknownTaskError: If the task does not exist.
        """

    @abstractmethod
    async def remove_task(self, task_id: str) -> None:
        """
        Delete a task together with every edge touching it.

        Raises:
            UnknownTaskError: If the task does not exist.
        """

    @abstractmethod
    async def add_dependency(
        self,
        task_id: str,
        depends_on_task_id: str,
        dependency_type: DependencyType = DependencyType.BLOCKING,
        created_by: str | None = None,
    ) -> DependencyEdge:
        """
        Store a new dependency edge.

        Raises:
            UnknownTaskError: If either endpoint does not exist.
        """

    @abstractmethod
    async def remove_dependency(self, edge_id: str) -> None:
        """
        Delete a dependency edge.

        Raises:
            UnknownDependencyError: If the edge does not exist.
        """
