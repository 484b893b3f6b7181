"""Core module - configuration, logging and exceptions."""

from taskgraph.core.config import Settings, get_settings
from taskgraph.core.exceptions import (
    DependencyRejectedError,
    GraphCycleDetectedError,
    TaskBlockedError,
    TaskGraphError,
    UnknownDependencyError,
    UnknownTaskError,
)

__all__ = [
    "DependencyRejectedError",
    "GraphCycleDetectedError",
    "Settings",
    "TaskBlockedError",
    "TaskGraphError",
    "UnknownDependencyError",
    "UnknownTaskError",
    "get_settings",
]
