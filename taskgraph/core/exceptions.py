"""Exception hierarchy for the task dependency graph engine."""

from collections.abc import Iterable


class TaskGraphError(Exception):
    """Base exception for taskgraph errors."""

    pass


class UnknownTaskError(TaskGraphError):
    """A query referenced a task id absent from the current task set."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Unknown task: {task_id}")


class DuplicateTaskError(TaskGraphError):
    """A task was created with an id that is already stored."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task already exists: {task_id}")


class UnknownDependencyError(TaskGraphError):
    """A removal referenced a dependency edge that does not exist."""

    def __init__(self, edge_id: str) -> None:
        self.edge_id = edge_id
        super().__init__(f"Unknown dependency: {edge_id}")


class GraphCycleDetectedError(TaskGraphError):
    """
    The dependency graph contains a cycle.

    Tasks in a cycle can never become eligible, so the whole layering is
    refused rather than returned partially.

    Attributes:
        task_ids: Tasks left unresolved by the topological traversal, sorted.
        cycle: One concrete cycle path (first id repeated at the end), if found.
    """

    def __init__(
        self,
        task_ids: Iterable[str],
        cycle: list[str] | None = None,
    ) -> None:
        self.task_ids = sorted(task_ids)
        self.cycle = cycle or []
        message = f"Circular dependency detected between tasks: {', '.join(self.task_ids)}"
        if self.cycle:
            message += f" (cycle: {' -> '.join(self.cycle)})"
        super().__init__(message)

    @property
    def remediation(self) -> str:
        """Human-readable hint for the deadlock banner."""
        return (
            "Remove one of the dependencies between these tasks: "
            f"{', '.join(self.task_ids)}"
        )


class DependencyRejectedError(TaskGraphError):
    """A dependency insertion failed validation."""

    def __init__(self, reason: str, task_id: str, depends_on_task_id: str) -> None:
        self.reason = reason
        self.task_id = task_id
        self.depends_on_task_id = depends_on_task_id
        super().__init__(
            f"Cannot add dependency {task_id} -> {depends_on_task_id}: {reason}"
        )


class TaskBlockedError(TaskGraphError):
    """A task was moved forward while blocking dependencies are incomplete."""

    def __init__(self, task_id: str, unmet: list[str]) -> None:
        self.task_id = task_id
        self.unmet = unmet
        super().__init__(
            f"Task {task_id} is blocked by incomplete dependencies: {', '.join(unmet)}"
        )
