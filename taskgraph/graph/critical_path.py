"""Critical path finder - the longest chain of blocking dependencies."""

from loguru import logger

from taskgraph.core.exceptions import GraphCycleDetectedError
from taskgraph.graph.leveler import find_cycle, kahn_levels
from taskgraph.graph.models import CriticalPath, TaskGraph


class CriticalPathFinder:
    """
    Find the longest blocking chain (by task count) in a task graph.

    Informational edges are ignored entirely. Roots are the tasks with no
    incoming blocking edge, which can differ from the level-0 tasks of the
    combined graph. A post-order DFS over an explicit stack records the
    longest chain starting at each task, so every task is settled once.
    When several chains share the maximum length, the first one in task
    and edge input order is returned.

    Example:
        >>> finder = CriticalPathFinder()
        >>> path = finder.find(graph)
        >>> path.task_ids
        ['a', 'b', 'c', 'd']
    """

    def blocking_roots(self, graph: TaskGraph) -> list[str]:
        """
        Get the roots of the blocking subgraph.

        Args:
            graph: Built task graph.

        Returns:
            Task IDs with no blocking dependency, in task input order.

        Raises:
            GraphCycleDetectedError: If the blocking subgraph has a cycle.
        """
        in_degree = {
            task_id: len(graph.blocking_predecessors.get(task_id, []))
            for task_id in graph.task_ids
        }
        levels, unresolved = kahn_levels(graph.task_ids, graph.blocking_successors, in_degree)

        if unresolved:
            cycle = find_cycle(
                [t for t in graph.task_ids if t in unresolved],
                graph.blocking_successors,
            )
            logger.error(f"Blocking cycle detected, unresolved tasks: {sorted(unresolved)}")
            raise GraphCycleDetectedError(unresolved, cycle)

        return [task_id for task_id, level in levels.items() if level == 0]

    def find(self, graph: TaskGraph) -> CriticalPath:
        """
        Compute the critical path.

        Args:
            graph: Built task graph.

        Returns:
            CriticalPath in dependency order. Empty when there are no
            blocking edges.

        Raises:
            GraphCycleDetectedError: If the blocking subgraph has a cycle.
        """
        if not graph.has_blocking_edges:
            logger.debug("No blocking dependencies, critical path is empty")
            return CriticalPath()

        successors = graph.blocking_successors
        roots = self.blocking_roots(graph)

        # Longest chain starting at each node, and the successor that continues it
        chain_length: dict[str, int] = {}
        next_hop: dict[str, str | None] = {}

        for root in roots:
            if root in chain_length:
                continue

            stack = [(root, iter(successors.get(root, [])))]

            while stack:
                node, children = stack[-1]
                child = next(children, None)

                if child is not None:
                    if child not in chain_length:
                        stack.append((child, iter(successors.get(child, []))))
                    continue

                # All successors settled, so this node's chain is final
                stack.pop()
                best_length, best_next = 1, None
                for successor in successors.get(node, []):
                    if chain_length[successor] + 1 > best_length:
                        best_length, best_next = chain_length[successor] + 1, successor
                chain_length[node] = best_length
                next_hop[node] = best_next

        best: list[str] = []
        start = max(roots, key=lambda r: chain_length[r], default=None)
        while start is not None:
            best.append(start)
            start = next_hop[start]

        logger.debug(f"Critical path has {len(best)} tasks: {' -> '.join(best)}")

        return CriticalPath(task_ids=best, length=len(best))


def find_critical_path(graph: TaskGraph) -> CriticalPath:
    """
    Convenience function to compute the critical path.

    Args:
        graph: Built task graph.

    Returns:
        CriticalPath in dependency order.
    """
    return CriticalPathFinder().find(graph)
