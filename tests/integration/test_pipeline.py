"""Integration tests for the recompute-on-change pipeline."""

import pytest

from taskgraph import TaskGraphService, can_start, compute_layout
from taskgraph.core.exceptions import DependencyRejectedError
from taskgraph.graph.models import (
    DependencyEdge,
    DependencyType,
    GraphLayout,
    Task,
    TaskStatus,
)
from taskgraph.repository.base import ChangeEvent
from taskgraph.repository.memory import InMemoryTaskRepository


@pytest.mark.integration
class TestEndToEndScenario:
    """T1/T2/T3: T2 blocked by T1, T3 references T1."""

    def test_levels_eligibility_and_critical_path(
        self, sample_tasks: list, sample_edges: list
    ) -> None:
        """Test every derived view for the reference scenario."""
        layout = compute_layout(sample_tasks, sample_edges)

        assert layout.levels == {"T1": 0, "T2": 1, "T3": 1}
        assert layout.critical_path.task_ids == ["T1", "T2"]
        assert layout.critical_path.length == 2

        for status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS):
            tasks = [
                t.model_copy(update={"status": status}) if t.id == "T1" else t
                for t in sample_tasks
            ]
            assert can_start("T2", tasks, sample_edges) is False
            assert can_start("T3", tasks, sample_edges) is True

        done = [
            t.model_copy(update={"status": TaskStatus.COMPLETED}) if t.id == "T1" else t
            for t in sample_tasks
        ]
        assert can_start("T2", done, sample_edges) is True
        assert can_start("T3", done, sample_edges) is True

    def test_informational_edges_are_inert(self, chain_tasks: list, chain_edges: list) -> None:
        """Test informational edges change neither eligibility nor the critical path."""
        extra = [
            DependencyEdge(
                task_id="D",
                depends_on_task_id="B",
                type=DependencyType.INFORMATIONAL,
            ),
        ]

        before = compute_layout(chain_tasks, chain_edges)
        after = compute_layout(chain_tasks, chain_edges + extra)

        assert before.critical_path == after.critical_path
        for task in chain_tasks:
            assert can_start(task.id, chain_tasks, chain_edges) == can_start(
                task.id, chain_tasks, chain_edges + extra
            )

    def test_idempotent(self, sample_tasks: list, sample_edges: list) -> None:
        """Test two passes over one snapshot agree."""
        first = compute_layout(sample_tasks, sample_edges)
        second = compute_layout(sample_tasks, sample_edges)

        assert first.levels == second.levels
        assert first.critical_path.length == second.critical_path.length


@pytest.mark.integration
class TestRecomputeOnChange:
    """A listener recomputes the layout on every notification."""

    @pytest.mark.asyncio
    async def test_listener_sees_latest_snapshot(self) -> None:
        """Test each notification yields a layout of the committed state."""
        service = TaskGraphService(InMemoryTaskRepository())
        layouts: list[GraphLayout] = []

        async def recompute(event: ChangeEvent) -> None:
            layouts.append(await service.compute_layout())

        service.subscribe(recompute)

        for task_id in ("plan", "build", "ship"):
            await service.add_task(Task(id=task_id, title=task_id.title()))
        await service.add_dependency("build", "plan")
        edge = await service.add_dependency("ship", "build")

        assert layouts[-1].levels == {"plan": 0, "build": 1, "ship": 2}
        assert layouts[-1].critical_path.task_ids == ["plan", "build", "ship"]

        with pytest.raises(DependencyRejectedError):
            await service.add_dependency("plan", "ship")
        assert len(layouts) == 5

        await service.remove_dependency(edge.id)

        assert len(layouts) == 6
        assert layouts[-1].levels == {"plan": 0, "build": 1, "ship": 0}
        assert layouts[-1].critical_path.task_ids == ["plan", "build"]

    @pytest.mark.asyncio
    async def test_status_changes_flow_through(self) -> None:
        """Test completing tasks in order walks the chain."""
        repo = InMemoryTaskRepository(tasks=[Task(id=t) for t in ("a", "b", "c")])
        service = TaskGraphService(repo)
        await service.add_dependency("b", "a")
        await service.add_dependency("c", "b")

        for task_id in ("a", "b", "c"):
            assert await service.can_start(task_id) is True
            await service.update_task_status(task_id, TaskStatus.IN_PROGRESS)
            await service.update_task_status(task_id, TaskStatus.COMPLETED)

        layout = await service.compute_layout()
        assert all(node.status is TaskStatus.COMPLETED for node in layout.nodes)
