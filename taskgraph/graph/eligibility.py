"""Eligibility evaluator - can a task leave ``pending``?

Only blocking dependencies count. The evaluator reads statuses straight
from the graph it was built with and never caches results, so a fresh
evaluator must be built for every snapshot.
"""

from collections.abc import Iterable

from loguru import logger

from taskgraph.core.exceptions import TaskBlockedError, UnknownTaskError
from taskgraph.graph.builder import build_graph
from taskgraph.graph.models import (
    DependencyEdge,
    Eligibility,
    Task,
    TaskGraph,
    TaskStatus,
)

# Statuses that require every blocking dependency to be completed
GUARDED_STATUSES = frozenset({TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED})


class EligibilityEvaluator:
    """
    Answer start-eligibility questions over one graph snapshot.

    Example:
        >>> evaluator = EligibilityEvaluator(build_graph(tasks, edges))
        >>> evaluator.can_start("t2")
        False
        >>> evaluator.unmet_dependencies("t2")
        ['t1']
    """

    def __init__(self, graph: TaskGraph) -> None:
        """
        Initialize the evaluator.

        Args:
            graph: Built task graph for the current snapshot.
        """
        self._graph = graph

    def blocking_dependencies(self, task_id: str) -> list[str]:
        """
        Get the blocking predecessors of a task.

        Args:
            task_id: Task identifier.

        Returns:
            IDs of tasks this one has a blocking dependency on.

        Raises:
            UnknownTaskError: If the task is not in the snapshot.
        """
        if not self._graph.has_task(task_id):
            raise UnknownTaskError(task_id)
        return list(self._graph.blocking_predecessors.get(task_id, []))

    def unmet_dependencies(self, task_id: str) -> list[str]:
        """
        Get blocking predecessors that are not completed yet.

        Args:
            task_id: Task identifier.

        Returns:
            IDs of incomplete blocking dependencies.
        """
        return [
            dep_id
            for dep_id in self.blocking_dependencies(task_id)
            if not self._graph.tasks[dep_id].is_completed
        ]

    def can_start(self, task_id: str) -> bool:
        """
        Check whether every blocking dependency is completed.

        Args:
            task_id: Task identifier.

        Returns:
            True if the task may start.

        Raises:
            UnknownTaskError: If the task is not in the snapshot.
        """
        return not self.unmet_dependencies(task_id)

    def evaluate(self, task_id: str) -> Eligibility:
        """Build a full eligibility report for a task."""
        blocking = self.blocking_dependencies(task_id)
        unmet = self.unmet_dependencies(task_id)
        return Eligibility(
            task_id=task_id,
            can_start=not unmet,
            blocking_dependencies=blocking,
            unmet_dependencies=unmet,
        )

    def ensure_can_transition(self, task_id: str, new_status: TaskStatus) -> None:
        """
        Guard a status change against incomplete blocking dependencies.

        Moving back to ``pending`` is always allowed.

        Args:
            task_id: Task identifier.
            new_status: Requested status.

        Raises:
            UnknownTaskError: If the task is not in the snapshot.
            TaskBlockedError: If the task would move forward while blocked.
        """
        unmet = self.unmet_dependencies(task_id)
        if new_status in GUARDED_STATUSES and unmet:
            logger.warning(f"Refusing to move {task_id} to {new_status.value}: blocked by {unmet}")
            raise TaskBlockedError(task_id, unmet)


def can_start(
    task_id: str,
    tasks: Iterable[Task],
    edges: Iterable[DependencyEdge],
) -> bool:
    """
    Convenience function to check eligibility from raw snapshots.

    Args:
        task_id: Task identifier.
        tasks: Task snapshots.
        edges: Dependency edge snapshots.

    Returns:
        True if the task may start.

    Raises:
        UnknownTaskError: If the task is not in the snapshot.
    """
    return EligibilityEvaluator(build_graph(tasks, edges)).can_start(task_id)
