"""Layout projector - maps levels to 2-D anchors for rendering."""

from collections import Counter

from taskgraph.core.config import Settings, get_settings
from taskgraph.graph.models import (
    CriticalPath,
    DependencyType,
    GraphLayout,
    LayoutEdge,
    LayoutNode,
    TaskGraph,
)


class LayoutProjector:
    """
    Place each task in a column per level, stacked within the column.

    Tasks keep their input order inside a level, and each column is
    vertically centered on ``center_y``:

        x = level * column_width + origin_x
        y = position * row_height + (center_y - count * row_height / 2) + origin_y

    Example:
        >>> projector = LayoutProjector()
        >>> layout = projector.project(graph, {"t1": 0}, CriticalPath())
        >>> layout.nodes[0].x, layout.nodes[0].y
        (100.0, 425.0)
    """

    def __init__(
        self,
        column_width: int = 250,
        row_height: int = 150,
        origin_x: int = 100,
        origin_y: int = 100,
        center_y: int = 400,
    ) -> None:
        self.column_width = column_width
        self.row_height = row_height
        self.origin_x = origin_x
        self.origin_y = origin_y
        self.center_y = center_y

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LayoutProjector":
        """Create a projector using the configured spacing."""
        settings = settings or get_settings()
        return cls(
            column_width=settings.taskgraph_layout_column_width,
            row_height=settings.taskgraph_layout_row_height,
            origin_x=settings.taskgraph_layout_origin_x,
            origin_y=settings.taskgraph_layout_origin_y,
            center_y=settings.taskgraph_layout_center_y,
        )

    def position(self, level: int, ordinal: int, count: int) -> tuple[float, float]:
        """
        Compute the anchor of one node.

        Args:
            level: Node level.
            ordinal: 0-based position of the node within its level.
            count: Number of nodes on that level.

        Returns:
            Tuple of (x, y).
        """
        x = float(level * self.column_width + self.origin_x)
        y = ordinal * self.row_height + (self.center_y - count * self.row_height / 2) + self.origin_y
        return x, float(y)

    def project(
        self,
        graph: TaskGraph,
        levels: dict[str, int],
        critical_path: CriticalPath,
    ) -> GraphLayout:
        """
        Build the full layout for a leveled graph.

        Args:
            graph: Built task graph.
            levels: Output of the topological leveler.
            critical_path: Output of the critical path finder.

        Returns:
            GraphLayout with positioned nodes and flagged edges.
        """
        counts = Counter(levels.get(task_id, 0) for task_id in graph.task_ids)
        next_ordinal: Counter[int] = Counter()
        nodes: list[LayoutNode] = []

        for task_id, task in graph.tasks.items():
            level = levels.get(task_id, 0)
            x, y = self.position(level, next_ordinal[level], counts[level])
            next_ordinal[level] += 1

            nodes.append(
                LayoutNode(
                    task_id=task_id,
                    title=task.title,
                    status=task.status,
                    priority=task.priority,
                    level=level,
                    x=x,
                    y=y,
                    is_critical=critical_path.contains(task_id),
                )
            )

        edges = [
            LayoutEdge(
                id=edge.id,
                from_task_id=edge.depends_on_task_id,
                to_task_id=edge.task_id,
                type=edge.type,
                is_critical=(
                    edge.type is DependencyType.BLOCKING
                    and critical_path.is_critical_edge(edge.depends_on_task_id, edge.task_id)
                ),
            )
            for edge in graph.edges
        ]

        return GraphLayout(
            nodes=nodes,
            edges=edges,
            levels=dict(levels),
            critical_path=critical_path,
        )
