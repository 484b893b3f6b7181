"""Graph service - ties a repository to the graph engine.

The service holds no graph state. Each call pulls the latest full snapshot
from the repository and recomputes from scratch, so no pass ever sees a
half-applied change. Validated writes (new dependencies, status moves)
run one at a time, each checked against the state left by the previous one.
"""

import asyncio
from collections.abc import Callable

from loguru import logger

from taskgraph.core.config import Settings, get_settings
from taskgraph.graph.builder import build_graph
from taskgraph.graph.critical_path import CriticalPathFinder
from taskgraph.graph.eligibility import EligibilityEvaluator
from taskgraph.graph.models import (
    CriticalPath,
    DependencyEdge,
    DependencyType,
    Eligibility,
    GraphLayout,
    Task,
    TaskGraph,
    TaskPriority,
    TaskStatus,
)
from taskgraph.graph.pipeline import compute_layout
from taskgraph.graph.validator import DependencyValidator
from taskgraph.repository.base import ChangeListener, TaskRepository


class TaskGraphService:
    """
    Answer graph questions and relay mutation requests for one repository.

    Example:
        >>> service = TaskGraphService(InMemoryTaskRepository())
        >>> await service.add_task(Task(id="t1"))
        >>> await service.add_task(Task(id="t2"))
        >>> await service.add_dependency("t2", "t1")
        >>> await service.can_start("t2")
        False
    """

    def __init__(
        self,
        repository: TaskRepository,
        settings: Settings | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            repository: Source of task/dependency snapshots.
            settings: Optional settings override. Uses default if not provided.
        """
        self.repository = repository
        self.settings = settings or get_settings()
        # Held across validate-then-write so two requests cannot both pass
        # validation against the same snapshot
        self._write_lock = asyncio.Lock()

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Get told when the graph needs recomputing.

        Debouncing is left to the listener.

        Returns:
            Callable that removes the listener again.
        """
        return self.repository.subscribe(listener)

    async def _current_graph(self) -> TaskGraph:
        snapshot = await self.repository.snapshot()
        return build_graph(snapshot.tasks, snapshot.dependencies)

    # =========================================================================
    # DERIVED VIEWS
    # =========================================================================

    async def compute_layout(self) -> GraphLayout:
        """
        Compute the layout for the current snapshot.

        Raises:
            GraphCycleDetectedError: If the stored graph has a cycle.
        """
        snapshot = await self.repository.snapshot()
        return compute_layout(snapshot.tasks, snapshot.dependencies, self.settings)

    async def critical_path(self) -> CriticalPath:
        """Compute the critical path for the current snapshot."""
        return CriticalPathFinder().find(await self._current_graph())

    async def eligibility(self, task_id: str) -> Eligibility:
        """
        Build the eligibility report for a task.

        Raises:
            UnknownTaskError: If the task does not exist.
        """
        return EligibilityEvaluator(await self._current_graph()).evaluate(task_id)

    async def can_start(self, task_id: str) -> bool:
        """
        Check whether a task may start.

        Raises:
            UnknownTaskError: If the task does not exist.
        """
        return EligibilityEvaluator(await self._current_graph()).can_start(task_id)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def add_task(
        self,
        task: Task | None = None,
        *,
        title: str = "",
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> Task:
        """Create a task, either from a model or from a title and priority."""
        task = task or Task(title=title, priority=priority)
        return await self.repository.add_task(task)

    async def remove_task(self, task_id: str) -> None:
        """Delete a task and every dependency touching it."""
        await self.repository.remove_task(task_id)

    async def add_dependency(
        self,
        task_id: str,
        depends_on_task_id: str,
        dependency_type: DependencyType = DependencyType.BLOCKING,
        created_by: str | None = None,
    ) -> DependencyEdge:
        """
        Validate and store a new dependency.

        Args:
            task_id: Dependent task ID.
            depends_on_task_id: Dependency task ID.
            dependency_type: Blocking or informational.
            created_by: Optional user ID.

        Returns:
            The stored edge.

        Raises:
            UnknownTaskError: If either task is missing.
            DependencyRejectedError: On self-dependency, duplicate or cycle.
        """
        async with self._write_lock:
            graph = await self._current_graph()
            DependencyValidator(graph).validate(task_id, depends_on_task_id, dependency_type)

            edge = await self.repository.add_dependency(
                task_id, depends_on_task_id, dependency_type, created_by
            )
        logger.info(
            f"Added {dependency_type.value} dependency: {task_id} depends on {depends_on_task_id}"
        )
        return edge

    async def remove_dependency(self, edge_id: str) -> None:
        """
        Remove a dependency.

        Raises:
            UnknownDependencyError: If the edge does not exist.
        """
        await self.repository.remove_dependency(edge_id)
        logger.info(f"Removed dependency {edge_id}")

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        """
        Change a task's status, refusing to move a blocked task forward.

        Raises:
            UnknownTaskError: If the task does not exist.
            TaskBlockedError: If blocking dependencies are incomplete.
        """
        async with self._write_lock:
            graph = await self._current_graph()
            EligibilityEvaluator(graph).ensure_can_transition(task_id, status)

            task = await self.repository.update_task_status(task_id, status)
        logger.info(f"Task {task_id} moved to {status.value}")
        return task
