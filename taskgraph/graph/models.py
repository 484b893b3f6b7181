"""Pydantic models for the task dependency graph.

This module defines the data structures shared by the graph engine:
task and dependency snapshots, the adjacency structure produced by the
graph builder, and the derived views (critical path, eligibility, layout)
handed to the rendering layer.
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS
# =============================================================================


class TaskStatus(str, Enum):
    """Lifecycle status of a task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskPriority(str, Enum):
    """Task priority level."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DependencyType(str, Enum):
    """Kind of dependency between two tasks.

    BLOCKING edges gate the dependent task's start; INFORMATIONAL edges are
    advisory and take no part in eligibility or critical-path computation.
    """

    BLOCKING = "blocking"
    INFORMATIONAL = "informational"


# =============================================================================
# SNAPSHOTS
# =============================================================================


class Task(BaseModel):
    """Read-only snapshot of a task.

    Example:
        >>> task = Task(id="t1", title="Draft agenda", status=TaskStatus.PENDING)
        >>> task.is_completed
        False
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque task identifier",
    )
    title: str = Field(
        default="",
        max_length=500,
        description="Task title",
    )
    status: TaskStatus = Field(
        default=TaskStatus.PENDING,
        description="Current task status",
    )
    priority: TaskPriority = Field(
        default=TaskPriority.MEDIUM,
        description="Task priority",
    )

    @property
    def is_completed(self) -> bool:
        """Check if the task is completed."""
        return self.status is TaskStatus.COMPLETED


class DependencyEdge(BaseModel):
    """A dependency between two tasks.

    ``task_id`` depends on ``depends_on_task_id``. Accepts ``dependency_type``
    as an alias of ``type`` so rows from the dependencies table validate as-is.

    Example:
        >>> edge = DependencyEdge(task_id="t2", depends_on_task_id="t1")
        >>> edge.type
        <DependencyType.BLOCKING: 'blocking'>
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Opaque edge identifier",
    )
    task_id: str = Field(
        ...,
        min_length=1,
        description="ID of the dependent task",
    )
    depends_on_task_id: str = Field(
        ...,
        min_length=1,
        description="ID of the task this one depends on",
    )
    type: DependencyType = Field(
        default=DependencyType.BLOCKING,
        validation_alias=AliasChoices("type", "dependency_type"),
        description="Dependency type",
    )
    created_by: str | None = Field(
        default=None,
        description="User who created the dependency",
    )
    created_at: datetime | None = Field(
        default=None,
        description="Creation timestamp",
    )

    @property
    def key(self) -> tuple[str, str, DependencyType]:
        """Identity of the edge ignoring its id."""
        return (self.task_id, self.depends_on_task_id, self.type)


class GraphSnapshot(BaseModel):
    """A full task/dependency snapshot, as stored in a JSON file."""

    model_config = ConfigDict(frozen=True)

    tasks: list[Task] = Field(default_factory=list)
    dependencies: list[DependencyEdge] = Field(default_factory=list)


# =============================================================================
# ADJACENCY STRUCTURE
# =============================================================================


class TaskGraph(BaseModel):
    """Adjacency structure built from a task/edge snapshot.

    Successor lists run from dependency to dependent, the inverse of how
    edges are stored.
    """

    model_config = ConfigDict(frozen=False)

    tasks: dict[str, Task] = Field(
        default_factory=dict,
        description="Task ID -> Task, in input order",
    )
    edges: list[DependencyEdge] = Field(
        default_factory=list,
        description="Edges whose endpoints both exist",
    )
    dropped_edges: list[DependencyEdge] = Field(
        default_factory=list,
        description="Edges excluded because an endpoint is missing",
    )
    successors: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Dependency -> dependents, all edge types",
    )
    in_degree: dict[str, int] = Field(
        default_factory=dict,
        description="Incoming edge count, all edge types",
    )
    blocking_successors: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Dependency -> dependents, blocking edges only",
    )
    blocking_predecessors: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Dependent -> dependencies, blocking edges only",
    )

    def has_task(self, task_id: str) -> bool:
        """Check if the task is part of the graph."""
        return task_id in self.tasks

    @property
    def task_ids(self) -> list[str]:
        """Task IDs in input order."""
        return list(self.tasks)

    @property
    def has_blocking_edges(self) -> bool:
        """Check if any blocking edge survived graph building."""
        return any(self.blocking_successors.values())


# =============================================================================
# DERIVED VIEWS
# =============================================================================


class CriticalPath(BaseModel):
    """Longest chain of blocking dependencies, in dependency order."""

    model_config = ConfigDict(frozen=True)

    task_ids: list[str] = Field(
        default_factory=list,
        description="Task IDs from the root dependency to the last dependent",
    )
    length: int = Field(
        default=0,
        ge=0,
        description="Number of tasks on the path",
    )

    def contains(self, task_id: str) -> bool:
        """Check if a task lies on the critical path."""
        return task_id in self.task_ids

    def is_critical_edge(self, from_task_id: str, to_task_id: str) -> bool:
        """Check if dependency -> dependent are consecutive on the path."""
        return any(
            a == from_task_id and b == to_task_id
            for a, b in zip(self.task_ids, self.task_ids[1:])
        )


class Eligibility(BaseModel):
    """Whether a task may leave ``pending`` and what holds it back."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    can_start: bool
    blocking_dependencies: list[str] = Field(default_factory=list)
    unmet_dependencies: list[str] = Field(default_factory=list)


class LayoutNode(BaseModel):
    """A positioned task for the rendering layer."""

    model_config = ConfigDict(frozen=True)

    task_id: str
    title: str
    status: TaskStatus
    priority: TaskPriority
    level: int = Field(ge=0)
    x: float
    y: float
    is_critical: bool = False


class LayoutEdge(BaseModel):
    """A drawable edge, oriented from dependency to dependent."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    from_task_id: str = Field(alias="from")
    to_task_id: str = Field(alias="to")
    type: DependencyType
    is_critical: bool = False


class GraphLayout(BaseModel):
    """Everything the rendering layer needs for one pass."""

    model_config = ConfigDict(frozen=True)

    nodes: list[LayoutNode] = Field(default_factory=list)
    edges: list[LayoutEdge] = Field(default_factory=list)
    levels: dict[str, int] = Field(default_factory=dict)
    critical_path: CriticalPath = Field(default_factory=CriticalPath)

    def get_node(self, task_id: str) -> LayoutNode | None:
        """Get a positioned node by task ID."""
        return next((n for n in self.nodes if n.task_id == task_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return self.model_dump(mode="json", by_alias=True)
