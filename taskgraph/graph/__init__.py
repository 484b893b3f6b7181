"""Task dependency graph engine.

This module provides the graph-structural pipeline:
- Graph building (tasks + edges -> adjacency)
- Topological leveling (adjacency -> levels, cycle detection)
- Eligibility (blocking predecessors -> can the task start?)
- Critical path (blocking subgraph -> longest chain)
- Layout projection (levels -> 2-D anchors)
"""

from taskgraph.graph.builder import build_graph
from taskgraph.graph.critical_path import CriticalPathFinder, find_critical_path
from taskgraph.graph.eligibility import EligibilityEvaluator, can_start
from taskgraph.graph.layout import LayoutProjector
from taskgraph.graph.leveler import TopologicalLeveler, assign_levels, find_cycle
from taskgraph.graph.models import (
    CriticalPath,
    DependencyEdge,
    DependencyType,
    Eligibility,
    GraphLayout,
    GraphSnapshot,
    LayoutEdge,
    LayoutNode,
    Task,
    TaskGraph,
    TaskPriority,
    TaskStatus,
)
from taskgraph.graph.pipeline import compute_critical_path, compute_layout
from taskgraph.graph.validator import DependencyValidator

__all__ = [
    # Models
    "CriticalPath",
    "DependencyEdge",
    "DependencyType",
    "Eligibility",
    "GraphLayout",
    "GraphSnapshot",
    "LayoutEdge",
    "LayoutNode",
    "Task",
    "TaskGraph",
    "TaskPriority",
    "TaskStatus",
    # Building and leveling
    "build_graph",
    "TopologicalLeveler",
    "assign_levels",
    "find_cycle",
    # Eligibility
    "EligibilityEvaluator",
    "can_start",
    # Critical path
    "CriticalPathFinder",
    "find_critical_path",
    "compute_critical_path",
    # Layout
    "LayoutProjector",
    "compute_layout",
    # Validation
    "DependencyValidator",
]
