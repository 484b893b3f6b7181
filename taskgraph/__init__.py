"""
Taskgraph - Task Dependency Graph Engine.

Levels, start eligibility and critical paths for task dependency graphs.
"""

__version__ = "0.1.0"
__author__ = "Taskgraph Team"

from taskgraph.core.service import TaskGraphService
from taskgraph.graph.pipeline import can_start, compute_layout

__all__ = ["TaskGraphService", "__version__", "can_start", "compute_layout"]
