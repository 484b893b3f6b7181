"""Persistence - SQLAlchemy models and async session management."""

from taskgraph.storage.database import (
    build_engine,
    close_db,
    create_session_maker,
    get_db_session,
    get_engine,
    health_check,
    init_db,
)
from taskgraph.storage.models import Base, DependencyRecord, TaskRecord

__all__ = [
    "Base",
    "DependencyRecord",
    "TaskRecord",
    "build_engine",
    "close_db",
    "create_session_maker",
    "get_db_session",
    "get_engine",
    "health_check",
    "init_db",
]
