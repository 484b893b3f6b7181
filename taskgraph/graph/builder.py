"""Graph builder - turns flat task/edge lists into adjacency maps."""

from collections.abc import Iterable

from loguru import logger

from taskgraph.graph.models import DependencyEdge, DependencyType, Task, TaskGraph


def build_graph(
    tasks: Iterable[Task],
    edges: Iterable[DependencyEdge],
) -> TaskGraph:
    """
    Build the adjacency structure for one computation pass.

    Edges are inverted so successor lists run from dependency to dependent.
    Edges with a missing endpoint are dropped with a warning, and repeated
    edges (same endpoints and type) are collapsed into the first one.

    Args:
        tasks: Task snapshots. Order is kept and drives layout ordering.
            A repeated ID keeps its first position but takes the last value.
        edges: Dependency edge snapshots.

    Returns:
        TaskGraph with combined and blocking-only adjacency.

    Example:
        >>> graph = build_graph(tasks, edges)
        >>> graph.successors["t1"]
        ['t2', 't3']
    """
    graph = TaskGraph()

    for task in tasks:
        if task.id in graph.tasks:
            logger.warning(
                f"Duplicate task {task.id} in snapshot, "
                "using the last value at the first position"
            )
        graph.tasks[task.id] = task
        graph.successors.setdefault(task.id, [])
        graph.blocking_successors.setdefault(task.id, [])
        graph.blocking_predecessors.setdefault(task.id, [])
        graph.in_degree.setdefault(task.id, 0)

    seen: set[tuple[str, str, DependencyType]] = set()

    for edge in edges:
        if not graph.has_task(edge.task_id) or not graph.has_task(edge.depends_on_task_id):
            graph.dropped_edges.append(edge)
            continue

        if edge.key in seen:
            logger.debug(f"Skipping duplicate dependency {edge.id}")
            continue
        seen.add(edge.key)

        graph.edges.append(edge)
        graph.successors[edge.depends_on_task_id].append(edge.task_id)
        graph.in_degree[edge.task_id] += 1

        if edge.type is DependencyType.BLOCKING:
            graph.blocking_successors[edge.depends_on_task_id].append(edge.task_id)
            graph.blocking_predecessors[edge.task_id].append(edge.depends_on_task_id)

    if graph.dropped_edges:
        dangling = ", ".join(
            f"{e.task_id}->{e.depends_on_task_id}" for e in graph.dropped_edges
        )
        logger.warning(
            f"Dropped {len(graph.dropped_edges)} dependencies with unknown tasks: {dangling}"
        )

    logger.debug(
        f"Built graph with {len(graph.tasks)} tasks and {len(graph.edges)} dependencies"
    )

    return graph
