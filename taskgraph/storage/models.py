"""SQLAlchemy ORM models for task and dependency persistence."""

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from taskgraph.graph.models import DependencyEdge, Task


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TaskRecord(Base):
    """Task row - the engine only reads id, title, status and priority."""

    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_created_at", "created_at"),)

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    title: Mapped[str] = mapped_column(String(500), default="")
    status: Mapped[str] = mapped_column(
        Enum("pending", "in_progress", "completed", name="task_status"),
        default="pending",
    )
    priority: Mapped[str] = mapped_column(
        Enum("high", "medium", "low", name="task_priority"),
        default="medium",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
    )

    def to_model(self) -> Task:
        """Convert to a Task snapshot."""
        return Task(id=self.id, title=self.title, status=self.status, priority=self.priority)

    def __repr__(self) -> str:
        return f"TaskRecord(id={self.id}, status={self.status})"


class DependencyRecord(Base):
    """Dependency row - ``task_id`` depends on ``depends_on_task_id``."""

    __tablename__ = "task_dependencies"
    __table_args__ = (
        UniqueConstraint(
            "task_id", "depends_on_task_id", "dependency_type",
            name="uq_task_dependencies_edge",
        ),
        Index("ix_task_dependencies_task_id", "task_id"),
        Index("ix_task_dependencies_depends_on", "depends_on_task_id"),
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        default=lambda: str(uuid4()),
    )
    task_id: Mapped[str] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )
    depends_on_task_id: Mapped[str] = mapped_column(
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )
    dependency_type: Mapped[str] = mapped_column(
        Enum("blocking", "informational", name="dependency_type"),
        default="blocking",
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
    )

    def to_model(self) -> DependencyEdge:
        """Convert to a DependencyEdge snapshot."""
        return DependencyEdge(
            id=self.id,
            task_id=self.task_id,
            depends_on_task_id=self.depends_on_task_id,
            type=self.dependency_type,
            created_by=self.created_by,
            created_at=self.created_at,
        )

    def __repr__(self) -> str:
        return (
            f"DependencyRecord(id={self.id}, {self.task_id} -> "
            f"{self.depends_on_task_id}, type={self.dependency_type})"
        )
