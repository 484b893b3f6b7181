"""Full recomputation pipeline.

Every call rebuilds the graph from the snapshots it is given; nothing is
kept between calls.
"""

from collections.abc import Iterable

from loguru import logger

from taskgraph.core.config import Settings
from taskgraph.graph.builder import build_graph
from taskgraph.graph.critical_path import CriticalPathFinder
from taskgraph.graph.eligibility import can_start
from taskgraph.graph.layout import LayoutProjector
from taskgraph.graph.leveler import TopologicalLeveler
from taskgraph.graph.models import CriticalPath, DependencyEdge, GraphLayout, Task


def compute_layout(
    tasks: Iterable[Task],
    edges: Iterable[DependencyEdge],
    settings: Settings | None = None,
) -> GraphLayout:
    """
    Run builder, leveler, critical path finder and layout projector.

    Args:
        tasks: Task snapshots.
        edges: Dependency edge snapshots.
        settings: Optional settings override for layout spacing.

    Returns:
        GraphLayout for the rendering layer.

    Raises:
        GraphCycleDetectedError: If the graph has a cycle. No partial layout
            is produced.

    Example:
        >>> layout = compute_layout(tasks, edges)
        >>> layout.levels
        {'t1': 0, 't2': 1, 't3': 1}
        >>> layout.critical_path.task_ids
        ['t1', 't2']
    """
    graph = build_graph(tasks, edges)
    levels = TopologicalLeveler().assign_levels(graph)
    critical_path = CriticalPathFinder().find(graph)
    layout = LayoutProjector.from_settings(settings).project(graph, levels, critical_path)

    logger.info(
        f"Computed layout for {len(layout.nodes)} tasks, {len(layout.edges)} dependencies, "
        f"critical path length {critical_path.length}"
    )

    return layout


def compute_critical_path(
    tasks: Iterable[Task],
    edges: Iterable[DependencyEdge],
) -> CriticalPath:
    """
    Compute only the critical path.

    Args:
        tasks: Task snapshots.
        edges: Dependency edge snapshots.

    Returns:
        CriticalPath in dependency order.
    """
    return CriticalPathFinder().find(build_graph(tasks, edges))


__all__ = ["can_start", "compute_critical_path", "compute_layout"]
