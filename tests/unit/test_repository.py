"""Unit tests for the task repositories."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio

from taskgraph.core.exceptions import (
    DependencyRejectedError,
    DuplicateTaskError,
    UnknownDependencyError,
    UnknownTaskError,
)
from taskgraph.graph.models import DependencyType, GraphSnapshot, Task, TaskStatus
from taskgraph.repository.base import ChangeEvent, ChangeKind, TaskRepository
from taskgraph.repository.memory import InMemoryTaskRepository
from taskgraph.repository.sql import SqlTaskRepository
from taskgraph.storage.database import build_engine, create_session_maker, init_db


@pytest.fixture
def memory_repository() -> InMemoryTaskRepository:
    """Empty in-memory repository."""
    return InMemoryTaskRepository()


@pytest_asyncio.fixture(params=["memory", "sql"])
async def repository(request: pytest.FixtureRequest) -> AsyncGenerator[TaskRepository, None]:
    """Run the shared contract tests against both repositories."""
    if request.param == "memory":
        yield InMemoryTaskRepository()
        return

    # SQL repository on an in-memory SQLite database
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)

    yield SqlTaskRepository(create_session_maker(engine))

    await engine.dispose()


async def _seed(repo: TaskRepository) -> None:
    for task_id in ("t1", "t2", "t3"):
        await repo.add_task(Task(id=task_id, title=f"Task {task_id}"))


@pytest.mark.unit
class TestRepositoryContract:
    """Behaviour shared by every TaskRepository."""

    @pytest.mark.asyncio
    async def test_tasks_listed_in_creation_order(self, repository: TaskRepository) -> None:
        """Test tasks come back in the order they were added."""
        await _seed(repository)

        tasks = await repository.list_tasks()

        assert [t.id for t in tasks] == ["t1", "t2", "t3"]
        assert tasks[0].title == "Task t1"

    @pytest.mark.asyncio
    async def test_duplicate_task_rejected(self, repository: TaskRepository) -> None:
        """Test re-adding an existing ID leaves the stored task untouched."""
        await _seed(repository)
        await repository.update_task_status("t1", TaskStatus.COMPLETED)

        with pytest.raises(DuplicateTaskError):
            await repository.add_task(Task(id="t1", title="Replacement"))

        stored = await repository.get_task("t1")
        assert stored.title == "Task t1"
        assert stored.is_completed
        assert len(await repository.list_tasks()) == 3

    @pytest.mark.asyncio
    async def test_get_task(self, repository: TaskRepository) -> None:
        """Test fetching one task."""
        await _seed(repository)

        assert (await repository.get_task("t2")).id == "t2"
        assert await repository.get_task("missing") is None

    @pytest.mark.asyncio
    async def test_add_and_filter_dependencies(self, repository: TaskRepository) -> None:
        """Test storing edges and listing them per dependent task."""
        await _seed(repository)

        edge = await repository.add_dependency("t2", "t1", created_by="user-1")
        await repository.add_dependency("t3", "t1", DependencyType.INFORMATIONAL)

        assert edge.type is DependencyType.BLOCKING
        assert edge.created_by == "user-1"
        assert edge.created_at is not None
        assert len(await repository.list_dependencies()) == 2

        only_t2 = await repository.list_dependencies("t2")
        assert [e.id for e in only_t2] == [edge.id]

    @pytest.mark.asyncio
    async def test_add_dependency_unknown_task(self, repository: TaskRepository) -> None:
        """Test both endpoints must exist."""
        await _seed(repository)

        with pytest.raises(UnknownTaskError):
            await repository.add_dependency("t2", "ghost")

    @pytest.mark.asyncio
    async def test_duplicate_dependency_rejected(self, repository: TaskRepository) -> None:
        """Test the same edge cannot be stored twice."""
        await _seed(repository)
        await repository.add_dependency("t2", "t1")

        with pytest.raises(DependencyRejectedError):
            await repository.add_dependency("t2", "t1")

        assert len(await repository.list_dependencies()) == 1

    @pytest.mark.asyncio
    async def test_update_status(self, repository: TaskRepository) -> None:
        """Test status changes are stored."""
        await _seed(repository)

        updated = await repository.update_task_status("t1", TaskStatus.COMPLETED)

        assert updated.status is TaskStatus.COMPLETED
        assert (await repository.get_task("t1")).is_completed

    @pytest.mark.asyncio
    async def test_update_status_unknown_task(self, repository: TaskRepository) -> None:
        """Test updating a missing task raises."""
        with pytest.raises(UnknownTaskError):
            await repository.update_task_status("missing", TaskStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_remove_task_removes_its_edges(self, repository: TaskRepository) -> None:
        """Test deleting a task deletes every edge touching it."""
        await _seed(repository)
        await repository.add_dependency("t2", "t1")
        kept = await repository.add_dependency("t3", "t2")

        await repository.remove_task("t1")

        assert [t.id for t in await repository.list_tasks()] == ["t2", "t3"]
        assert [e.id for e in await repository.list_dependencies()] == [kept.id]

    @pytest.mark.asyncio
    async def test_remove_dependency(self, repository: TaskRepository) -> None:
        """Test removing an edge, and removing it again."""
        await _seed(repository)
        edge = await repository.add_dependency("t2", "t1")

        await repository.remove_dependency(edge.id)

        assert await repository.list_dependencies() == []
        with pytest.raises(UnknownDependencyError):
            await repository.remove_dependency(edge.id)

    @pytest.mark.asyncio
    async def test_snapshot(self, repository: TaskRepository) -> None:
        """Test the snapshot holds both collections."""
        await _seed(repository)
        await repository.add_dependency("t2", "t1")

        snapshot = await repository.snapshot()

        assert len(snapshot.tasks) == 3
        assert len(snapshot.dependencies) == 1

    @pytest.mark.asyncio
    async def test_notifies_after_each_mutation(self, repository: TaskRepository) -> None:
        """Test listeners see every mutation in order."""
        events: list[ChangeEvent] = []

        async def listener(event: ChangeEvent) -> None:
            events.append(event)

        repository.subscribe(listener)
        await _seed(repository)
        edge = await repository.add_dependency("t2", "t1")
        await repository.update_task_status("t1", TaskStatus.COMPLETED)
        await repository.remove_dependency(edge.id)
        await repository.remove_task("t3")

        assert [e.kind for e in events] == [
            ChangeKind.TASK_ADDED,
            ChangeKind.TASK_ADDED,
            ChangeKind.TASK_ADDED,
            ChangeKind.DEPENDENCY_ADDED,
            ChangeKind.TASK_UPDATED,
            ChangeKind.DEPENDENCY_REMOVED,
            ChangeKind.TASK_REMOVED,
        ]
        assert events[3].edge_id == edge.id
        assert events[3].task_ids == ["t2", "t1"]


@pytest.mark.unit
class TestSubscriptions:
    """Tests for listener registration."""

    @pytest.mark.asyncio
    async def test_unsubscribe(self, memory_repository: InMemoryTaskRepository) -> None:
        """Test an unsubscribed listener is not called."""
        calls: list[ChangeEvent] = []

        async def listener(event: ChangeEvent) -> None:
            calls.append(event)

        unsubscribe = memory_repository.subscribe(listener)
        unsubscribe()
        unsubscribe()  # Second call is a no-op

        await memory_repository.add_task(Task(id="t1"))

        assert calls == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_others(
        self, memory_repository: InMemoryTaskRepository
    ) -> None:
        """Test one failing listener is logged and the rest still run."""
        calls: list[ChangeEvent] = []

        async def broken(event: ChangeEvent) -> None:
            raise RuntimeError("listener exploded")

        async def working(event: ChangeEvent) -> None:
            calls.append(event)

        memory_repository.subscribe(broken)
        memory_repository.subscribe(working)

        await memory_repository.add_task(Task(id="t1"))

        assert len(calls) == 1


@pytest.mark.unit
class TestInMemoryTaskRepository:
    """Tests specific to InMemoryTaskRepository."""

    @pytest.mark.asyncio
    async def test_from_snapshot(self, sample_tasks: list, sample_edges: list) -> None:
        """Test pre-loading a snapshot."""
        repo = InMemoryTaskRepository.from_snapshot(
            GraphSnapshot(tasks=sample_tasks, dependencies=sample_edges)
        )

        assert [t.id for t in await repo.list_tasks()] == ["T1", "T2", "T3"]
        assert [e.id for e in await repo.list_dependencies()] == ["e1", "e2"]

    @pytest.mark.asyncio
    async def test_both_types_on_one_pair_are_distinct(
        self, memory_repository: InMemoryTaskRepository
    ) -> None:
        """Test the repository keys edges by endpoints and type."""
        await _seed(memory_repository)

        await memory_repository.add_dependency("t2", "t1")
        await memory_repository.add_dependency("t2", "t1", DependencyType.INFORMATIONAL)

        assert len(await memory_repository.list_dependencies("t2")) == 2


@pytest.mark.unit
class TestSqlTaskRepository:
    """Tests specific to SqlTaskRepository."""

    @pytest.mark.asyncio
    async def test_snapshot_reads_in_one_session(self) -> None:
        """Test tasks and dependencies come from the same transaction."""
        engine = build_engine("sqlite+aiosqlite://")
        await init_db(engine)
        session_maker = create_session_maker(engine)
        opened: list[int] = []

        def counting_session_maker():
            opened.append(1)
            return session_maker()

        repo = SqlTaskRepository(session_maker)
        await _seed(repo)
        await repo.add_dependency("t2", "t1")

        counted = SqlTaskRepository(counting_session_maker)
        snapshot = await counted.snapshot()

        assert len(opened) == 1
        assert [t.id for t in snapshot.tasks] == ["t1", "t2", "t3"]
        assert len(snapshot.dependencies) == 1

        await engine.dispose()
