"""SQLAlchemy-backed repository for persistent deployments."""

from loguru import logger
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskgraph.core.exceptions import (
    DependencyRejectedError,
    DuplicateTaskError,
    UnknownDependencyError,
    UnknownTaskError,
)
from taskgraph.graph.models import (
    DependencyEdge,
    DependencyType,
    GraphSnapshot,
    Task,
    TaskStatus,
)
from taskgraph.repository.base import ChangeEvent, ChangeKind, TaskRepository
from taskgraph.storage.database import get_session_maker, session_scope
from taskgraph.storage.models import DependencyRecord, TaskRecord


async def _select_tasks(session: AsyncSession) -> list[Task]:
    result = await session.execute(
        select(TaskRecord).order_by(TaskRecord.created_at, TaskRecord.id)
    )
    return [record.to_model() for record in result.scalars().all()]


async def _select_dependencies(
    session: AsyncSession,
    task_id: str | None = None,
) -> list[DependencyEdge]:
    query = select(DependencyRecord).order_by(DependencyRecord.created_at, DependencyRecord.id)
    if task_id is not None:
        query = query.where(DependencyRecord.task_id == task_id)

    result = await session.execute(query)
    return [record.to_model() for record in result.scalars().all()]


class SqlTaskRepository(TaskRepository):
    """
    Read and write tasks and dependencies through an async session maker.

    Change notifications are delivered in-process, after the transaction
    has committed.

    Example:
        >>> repo = SqlTaskRepository()
        >>> tasks = await repo.list_tasks()
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession] | None = None) -> None:
        """
        Initialize the repository.

        Args:
            session_maker: Optional session maker. Uses the global one if not provided.
        """
        super().__init__()
        self._session_maker = session_maker or get_session_maker()

    async def snapshot(self) -> GraphSnapshot:
        """Read tasks and dependencies in one transaction."""
        async with session_scope(self._session_maker) as session:
            tasks = await _select_tasks(session)
            dependencies = await _select_dependencies(session)
        return GraphSnapshot(tasks=tasks, dependencies=dependencies)

    async def list_tasks(self) -> list[Task]:
        async with session_scope(self._session_maker) as session:
            return await _select_tasks(session)

    async def get_task(self, task_id: str) -> Task | None:
        async with session_scope(self._session_maker) as session:
            record = await session.get(TaskRecord, task_id)
            return record.to_model() if record else None

    async def list_dependencies(self, task_id: str | None = None) -> list[DependencyEdge]:
        async with session_scope(self._session_maker) as session:
            return await _select_dependencies(session, task_id)

    async def add_task(self, task: Task) -> Task:
        try:
            async with session_scope(self._session_maker) as session:
                if await session.get(TaskRecord, task.id) is not None:
                    raise DuplicateTaskError(task.id)

                session.add(
                    TaskRecord(
                        id=task.id,
                        title=task.title,
                        status=task.status.value,
                        priority=task.priority.value,
                    )
                )
        except IntegrityError as e:
            # Lost a race with another writer inserting the same id
            raise DuplicateTaskError(task.id) from e

        logger.debug(f"Task {task.id} stored")
        await self._notify(ChangeEvent(kind=ChangeKind.TASK_ADDED, task_ids=[task.id]))
        return task

    async def update_task_status(self, task_id: str, status: TaskStatus) -> Task:
        async with session_scope(self._session_maker) as session:
            record = await session.get(TaskRecord, task_id)
            if record is None:
                raise UnknownTaskError(task_id)
            record.status = status.value
            updated = record.to_model()

        logger.debug(f"Task {task_id} status -> {status.value}")
        await self._notify(ChangeEvent(kind=ChangeKind.TASK_UPDATED, task_ids=[task_id]))
        return updated

    async def remove_task(self, task_id: str) -> None:
        async with session_scope(self._session_maker) as session:
            record = await session.get(TaskRecord, task_id)
            if record is None:
                raise UnknownTaskError(task_id)

            # Explicit delete: SQLite ignores ON DELETE CASCADE without the pragma
            await session.execute(
                delete(DependencyRecord).where(
                    or_(
                        DependencyRecord.task_id == task_id,
                        DependencyRecord.depends_on_task_id == task_id,
                    )
                )
            )
            await session.delete(record)

        logger.debug(f"Task {task_id} removed")
        await self._notify(ChangeEvent(kind=ChangeKind.TASK_REMOVED, task_ids=[task_id]))

    async def add_dependency(
        self,
        task_id: str,
        depends_on_task_id: str,
        dependency_type: DependencyType = DependencyType.BLOCKING,
        created_by: str | None = None,
    ) -> DependencyEdge:
        try:
            async with session_scope(self._session_maker) as session:
                for tid in (task_id, depends_on_task_id):
                    if await session.get(TaskRecord, tid) is None:
                        raise UnknownTaskError(tid)

                record = DependencyRecord(
                    task_id=task_id,
                    depends_on_task_id=depends_on_task_id,
                    dependency_type=dependency_type.value,
                    created_by=created_by,
                )
                session.add(record)
                await session.flush()
                edge = record.to_model()
        except IntegrityError as e:
            raise DependencyRejectedError(
                "dependency already exists", task_id, depends_on_task_id
            ) from e

        logger.debug(f"Dependency {edge.id} stored: {task_id} -> {depends_on_task_id}")
        await self._notify(
            ChangeEvent(
                kind=ChangeKind.DEPENDENCY_ADDED,
                task_ids=[task_id, depends_on_task_id],
                edge_id=edge.id,
            )
        )
        return edge

    async def remove_dependency(self, edge_id: str) -> None:
        async with session_scope(self._session_maker) as session:
            record = await session.get(DependencyRecord, edge_id)
            if record is None:
                raise UnknownDependencyError(edge_id)
            touched = [record.task_id, record.depends_on_task_id]
            await session.delete(record)

        logger.debug(f"Dependency {edge_id} removed")
        await self._notify(
            ChangeEvent(
                kind=ChangeKind.DEPENDENCY_REMOVED,
                task_ids=touched,
                edge_id=edge_id,
            )
        )
