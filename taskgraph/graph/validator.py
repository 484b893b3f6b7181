"""Dependency validator - insert-time checks for new edges.

Nothing upstream stops a cycle from being stored, so every insertion is
checked against the current snapshot before it reaches the repository.
"""

from collections import deque

from loguru import logger

from taskgraph.core.exceptions import DependencyRejectedError, UnknownTaskError
from taskgraph.graph.models import DependencyType, TaskGraph


class DependencyValidator:
    """
    Validate a proposed dependency against one graph snapshot.

    A cycle through informational edges still breaks leveling, so cycles are
    refused for both dependency types.

    Example:
        >>> validator = DependencyValidator(graph)
        >>> validator.would_create_cycle("a", "c")  # c already depends on a
        True
    """

    def __init__(self, graph: TaskGraph) -> None:
        self._graph = graph

    def reaches(self, source: str, target: str) -> bool:
        """
        Check if ``target`` is reachable from ``source`` along successor edges.

        Args:
            source: Start task ID.
            target: Task ID to look for.

        Returns:
            True if a directed path exists.
        """
        if source == target:
            return True

        seen = {source}
        queue: deque[str] = deque([source])

        while queue:
            current = queue.popleft()
            for successor in self._graph.successors.get(current, []):
                if successor == target:
                    return True
                if successor not in seen:
                    seen.add(successor)
                    queue.append(successor)

        return False

    def would_create_cycle(self, task_id: str, depends_on_task_id: str) -> bool:
        """
        Check if making ``task_id`` depend on ``depends_on_task_id`` closes a cycle.

        The new edge runs dependency -> dependent, so it closes a cycle when
        the dependent already leads to the dependency.
        """
        return self.reaches(task_id, depends_on_task_id)

    def validate(
        self,
        task_id: str,
        depends_on_task_id: str,
        dependency_type: DependencyType = DependencyType.BLOCKING,
    ) -> None:
        """
        Validate a new dependency.

        Args:
            task_id: Dependent task ID.
            depends_on_task_id: Dependency task ID.
            dependency_type: Type of the new edge.

        Raises:
            UnknownTaskError: If either task is missing.
            DependencyRejectedError: On self-dependency, duplicate or cycle.
        """
        for tid in (task_id, depends_on_task_id):
            if not self._graph.has_task(tid):
                raise UnknownTaskError(tid)

        if task_id == depends_on_task_id:
            raise DependencyRejectedError(
                "a task cannot depend on itself", task_id, depends_on_task_id
            )

        existing = next(
            (
                e for e in self._graph.edges
                if e.task_id == task_id and e.depends_on_task_id == depends_on_task_id
            ),
            None,
        )
        if existing is not None:
            raise DependencyRejectedError(
                f"dependency already exists as {existing.type.value}",
                task_id,
                depends_on_task_id,
            )

        if self.would_create_cycle(task_id, depends_on_task_id):
            logger.warning(
                f"Rejected {dependency_type.value} dependency {task_id} -> "
                f"{depends_on_task_id}: would create a cycle"
            )
            raise DependencyRejectedError(
                "it would create a circular dependency", task_id, depends_on_task_id
            )
