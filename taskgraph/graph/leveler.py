"""Topological leveler - assigns depth levels and detects cycles.

Levels come from Kahn's algorithm with max-propagation, so a task with
several predecessors sits one level below the deepest of them. Tasks that
keep a positive in-degree after the queue drains are on, or behind, a
cycle; they are reported instead of being given a made-up level.
"""

from collections import deque
from collections.abc import Iterable, Mapping

from loguru import logger

from taskgraph.core.exceptions import GraphCycleDetectedError
from taskgraph.graph.models import TaskGraph


def kahn_levels(
    nodes: Iterable[str],
    successors: Mapping[str, list[str]],
    in_degree: Mapping[str, int],
) -> tuple[dict[str, int], set[str]]:
    """
    Run Kahn's algorithm with level propagation.

    Args:
        nodes: Node IDs in a stable order.
        successors: Node -> nodes that come after it.
        in_degree: Incoming edge count per node. Not modified.

    Returns:
        Tuple of (levels for every resolved node, unresolved node IDs).
    """
    nodes = list(nodes)
    remaining = {node: in_degree.get(node, 0) for node in nodes}
    levels: dict[str, int] = {}
    queue: deque[str] = deque()

    for node in nodes:
        if remaining[node] == 0:
            levels[node] = 0
            queue.append(node)

    while queue:
        current = queue.popleft()
        next_level = levels[current] + 1

        for successor in successors.get(current, []):
            levels[successor] = max(levels.get(successor, 0), next_level)
            remaining[successor] -= 1
            if remaining[successor] == 0:
                queue.append(successor)

    unresolved = {node for node, degree in remaining.items() if degree > 0}
    return {node: levels[node] for node in nodes if node not in unresolved}, unresolved


def find_cycle(
    nodes: Iterable[str],
    successors: Mapping[str, list[str]],
) -> list[str] | None:
    """
    Find one cycle among the given nodes using an iterative coloured DFS.

    Args:
        nodes: Candidate nodes (typically the leveler's unresolved set).
        successors: Node -> nodes that come after it.

    Returns:
        Cycle path with the first node repeated at the end, or None.

    Example:
        >>> find_cycle(["a", "b"], {"a": ["b"], "b": ["a"]})
        ['a', 'b', 'a']
    """
    WHITE, GRAY, BLACK = 0, 1, 2
    candidates = list(nodes)
    colors: dict[str, int] = {node: WHITE for node in candidates}

    for start in candidates:
        if colors[start] != WHITE:
            continue

        path: list[str] = [start]
        stack = [iter(successors.get(start, []))]
        colors[start] = GRAY

        while stack:
            advanced = False
            for neighbor in stack[-1]:
                if neighbor not in colors:
                    continue  # Outside the candidate set
                if colors[neighbor] == GRAY:
                    cycle_start = path.index(neighbor)
                    return path[cycle_start:] + [neighbor]
                if colors[neighbor] == WHITE:
                    colors[neighbor] = GRAY
                    path.append(neighbor)
                    stack.append(iter(successors.get(neighbor, [])))
                    advanced = True
                    break

            if not advanced:
                colors[path.pop()] = BLACK
                stack.pop()

    return None


class TopologicalLeveler:
    """
    Assign every task a level over the combined (all edge types) graph.

    Example:
        >>> leveler = TopologicalLeveler()
        >>> leveler.assign_levels(graph)
        {'t1': 0, 't2': 1, 't3': 1}
    """

    def assign_levels(self, graph: TaskGraph) -> dict[str, int]:
        """
        Compute levels for all tasks in the graph.

        Args:
            graph: Built task graph.

        Returns:
            Task ID -> level, in task input order.

        Raises:
            GraphCycleDetectedError: If any task is left unresolved.
        """
        levels, unresolved = kahn_levels(graph.task_ids, graph.successors, graph.in_degree)

        if unresolved:
            cycle = find_cycle(
                [t for t in graph.task_ids if t in unresolved],
                graph.successors,
            )
            logger.error(f"Cycle detected, unresolved tasks: {sorted(unresolved)}")
            raise GraphCycleDetectedError(unresolved, cycle)

        if levels:
            logger.debug(f"Assigned {len(levels)} tasks to {max(levels.values()) + 1} levels")

        return levels


def assign_levels(graph: TaskGraph) -> dict[str, int]:
    """
    Convenience function to level a graph.

    Args:
        graph: Built task graph.

    Returns:
        Task ID -> level.
    """
    return TopologicalLeveler().assign_levels(graph)
