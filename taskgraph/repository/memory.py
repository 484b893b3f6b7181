"""In-memory repository, used by the CLI, tests and the default server."""

from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import uuid4

from loguru import logger

from taskgraph.core.exceptions import (
    DependencyRejectedError,
    DuplicateTaskError,
    UnknownDependencyError,
    UnknownTaskError,
)
from taskgraph.graph.models import (
    DependencyEdge,
    DependencyType,
    GraphSnapshot,
    Task,
    TaskStatus,
)
from taskgraph.repository.base import ChangeEvent, ChangeKind, TaskRepository


class InMemoryTaskRepository(TaskRepository):
    """
    Keep tasks and dependencies in insertion-ordered dicts.

    Stored models are frozen, so the lists handed out are safe snapshots.

    Example:
        >>> repo = InMemoryTaskRepository(tasks=[Task(id="t1"), Task(id="t2")])
        >>> edge = await repo.add_dependency("t2", "t1")
        >>> [e.id for e in await repo.list_dependencies("t2")] == [edge.id]
        True
    """

    def __init__(
        self,
        tasks: Iterable[Task] | None = None,
        dependencies: Iterable[DependencyEdge] | None = None,
    ) -> None:
        super().__init__()
        self._tasks: dict[str, Task] = {}
        self._edges: dict[str, DependencyEdge] = {}

        for task in tasks or []:
            self._tasks[task.id] = task
        for edge in dependencies or []:
            self._edges[edge.id] = edge

    @classmethod
    def from_snapshot(cls, snapshot: GraphSnapshot) -> "InMemoryTaskRepository":
        """Create a repository pre-loaded with a snapshot."""
        return cls(tasks=snapshot.tasks, dependencies=snapshot.dependencies)

    async def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    async def get_task(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    async def list_dependencies(self, task_id: str | None = None) -> list[DependencyEdge]:
        if task_id is None:
            return list(self._edges.values())
        return [e for e in self._edges.values() if e.task_id == task_id]

    async def add_task(self, task: Task) -> Task:
        if task.id in self._tasks:
            raise DuplicateTaskError(task.id)

        self._tasks[task.id] = task
        logger.debug(f"Task {task.id} stored")
        await self._notify(ChangeEvent(kind=ChangeKind.TASK_ADDED, task_ids=[task.id]))
        return task

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise UnknownTaskError(task_id)

        updated = task.model_copy(update={"status": status})
        self._tasks[task_id] = updated
        logger.debug(f"Task {task_id} status {task.status.value} -> {status.value}")
        await self._notify(ChangeEvent(kind=ChangeKind.TASK_UPDATED, task_ids=[task_id]))
        return updated

    async def remove_task(self, task_id: str) -> None:
        if task_id not in self._tasks:
            raise UnknownTaskError(task_id)

        del self._tasks[task_id]
        orphaned = [
            edge_id for edge_id, e in self._edges.items()
            if task_id in (e.task_id, e.depends_on_task_id)
        ]
        for edge_id in orphaned:
            del self._edges[edge_id]

        logger.debug(f"Task {task_id} removed with {len(orphaned)} dependencies")
        await self._notify(ChangeEvent(kind=ChangeKind.TASK_REMOVED, task_ids=[task_id]))

    async def add_dependency(
        self,
        task_id: str,
        depends_on_task_id: str,
        dependency_type: DependencyType = DependencyType.BLOCKING,
        created_by: str | None = None,
    ) -> DependencyEdge:
        for tid in (task_id, depends_on_task_id):
            if tid not in self._tasks:
                raise UnknownTaskError(tid)

        edge = DependencyEdge(
            id=str(uuid4()),
            task_id=task_id,
            depends_on_task_id=depends_on_task_id,
            type=dependency_type,
            created_by=created_by,
            created_at=datetime.now(timezone.utc),
        )
        if any(e.key == edge.key for e in self._edges.values()):
            raise DependencyRejectedError("dependency already exists", task_id, depends_on_task_id)

        self._edges[edge.id] = edge
        logger.debug(f"Dependency {edge.id} stored: {task_id} -> {depends_on_task_id}")
        await self._notify(
            ChangeEvent(
                kind=ChangeKind.DEPENDENCY_ADDED,
                task_ids=[task_id, depends_on_task_id],
                edge_id=edge.id,
            )
        )
        return edge

    async def remove_dependency(self, edge_id: str) -> None:
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            raise UnknownDependencyError(edge_id)

        logger.debug(f"Dependency {edge_id} removed")
        await self._notify(
            ChangeEvent(
                kind=ChangeKind.DEPENDENCY_REMOVED,
                task_ids=[edge.task_id, edge.depends_on_task_id],
                edge_id=edge_id,
            )
        )
