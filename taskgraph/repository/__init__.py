"""Repositories - where task and dependency snapshots come from."""

from taskgraph.repository.base import (
    ChangeEvent,
    ChangeKind,
    ChangeListener,
    TaskRepository,
)
from taskgraph.repository.memory import InMemoryTaskRepository
from taskgraph.repository.sql import SqlTaskRepository

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "ChangeListener",
    "InMemoryTaskRepository",
    "SqlTaskRepository",
    "TaskRepository",
]
