"""Unit tests for the eligibility evaluator."""

import pytest

from taskgraph.core.exceptions import TaskBlockedError, UnknownTaskError
from taskgraph.graph.builder import build_graph
from taskgraph.graph.eligibility import EligibilityEvaluator, can_start
from taskgraph.graph.models import DependencyEdge, DependencyType, Task, TaskStatus


def _with_status(tasks: list[Task], task_id: str, status: TaskStatus) -> list[Task]:
    return [t.model_copy(update={"status": status}) if t.id == task_id else t for t in tasks]


@pytest.mark.unit
class TestEligibilityEvaluator:
    """Tests for EligibilityEvaluator."""

    def test_blocked_until_dependency_completed(
        self, sample_tasks: list, sample_edges: list
    ) -> None:
        """Test T2 waits for T1."""
        for status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS):
            tasks = _with_status(sample_tasks, "T1", status)
            assert can_start("T2", tasks, sample_edges) is False

        tasks = _with_status(sample_tasks, "T1", TaskStatus.COMPLETED)
        assert can_start("T2", tasks, sample_edges) is True

    def test_informational_never_blocks(self, sample_tasks: list, sample_edges: list) -> None:
        """Test T3 can always start."""
        for status in TaskStatus:
            tasks = _with_status(sample_tasks, "T1", status)
            assert can_start("T3", tasks, sample_edges) is True

    def test_no_dependencies_is_eligible(self, sample_tasks: list) -> None:
        """Test a task without blocking predecessors can start."""
        assert can_start("T1", sample_tasks, []) is True

    def test_unknown_task_raises(self, sample_tasks: list, sample_edges: list) -> None:
        """Test a direct query on a missing task fails explicitly."""
        with pytest.raises(UnknownTaskError) as exc_info:
            can_start("nope", sample_tasks, sample_edges)

        assert exc_info.value.task_id == "nope"

    def test_all_predecessors_must_be_completed(self) -> None:
        """Test one incomplete predecessor out of several blocks the task."""
        tasks = [
            Task(id="a", status=TaskStatus.COMPLETED),
            Task(id="b", status=TaskStatus.IN_PROGRESS),
            Task(id="c"),
        ]
        edges = [
            DependencyEdge(task_id="c", depends_on_task_id="a"),
            DependencyEdge(task_id="c", depends_on_task_id="b"),
        ]
        evaluator = EligibilityEvaluator(build_graph(tasks, edges))

        assert evaluator.blocking_dependencies("c") == ["a", "b"]
        assert evaluator.unmet_dependencies("c") == ["b"]
        assert evaluator.can_start("c") is False

    def test_reverting_a_dependency_only_affects_dependents(self) -> None:
        """Test un-completing a predecessor flips its dependent and nothing else."""
        tasks = [
            Task(id="a", status=TaskStatus.COMPLETED),
            Task(id="b"),
            Task(id="x", status=TaskStatus.COMPLETED),
            Task(id="y"),
        ]
        edges = [
            DependencyEdge(task_id="b", depends_on_task_id="a"),
            DependencyEdge(task_id="y", depends_on_task_id="x"),
        ]
        assert can_start("b", tasks, edges) is True

        reverted = _with_status(tasks, "a", TaskStatus.IN_PROGRESS)

        assert can_start("b", reverted, edges) is False
        assert can_start("y", reverted, edges) is True

    def test_evaluate_report(self, sample_tasks: list, sample_edges: list) -> None:
        """Test the full eligibility report."""
        report = EligibilityEvaluator(build_graph(sample_tasks, sample_edges)).evaluate("T2")

        assert report.task_id == "T2"
        assert report.can_start is False
        assert report.blocking_dependencies == ["T1"]
        assert report.unmet_dependencies == ["T1"]


@pytest.mark.unit
class TestTransitionGuard:
    """Tests for ensure_can_transition."""

    @pytest.fixture
    def evaluator(self, sample_tasks: list, sample_edges: list) -> EligibilityEvaluator:
        return EligibilityEvaluator(build_graph(sample_tasks, sample_edges))

    @pytest.mark.parametrize("status", [TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED])
    def test_blocked_task_cannot_move_forward(
        self, evaluator: EligibilityEvaluator, status: TaskStatus
    ) -> None:
        """Test moving a blocked task forward is refused."""
        with pytest.raises(TaskBlockedError) as exc_info:
            evaluator.ensure_can_transition("T2", status)

        assert exc_info.value.unmet == ["T1"]

    def test_pending_is_always_allowed(self, evaluator: EligibilityEvaluator) -> None:
        """Test moving back to pending never raises."""
        evaluator.ensure_can_transition("T2", TaskStatus.PENDING)

    def test_informational_dependent_may_start(self, evaluator: EligibilityEvaluator) -> None:
        """Test T3 may move to in_progress while T1 is pending."""
        evaluator.ensure_can_transition("T3", TaskStatus.IN_PROGRESS)

    def test_unknown_task(self, evaluator: EligibilityEvaluator) -> None:
        """Test the guard rejects unknown tasks."""
        with pytest.raises(UnknownTaskError):
            evaluator.ensure_can_transition("missing", TaskStatus.IN_PROGRESS)

    def test_informational_only_edges_are_inert(self) -> None:
        """Test informational edges alone never block."""
        tasks = [Task(id="a"), Task(id="b")]
        edges = [
            DependencyEdge(
                task_id="b",
                depends_on_task_id="a",
                type=DependencyType.INFORMATIONAL,
            ),
        ]
        evaluator = EligibilityEvaluator(build_graph(tasks, edges))

        evaluator.ensure_can_transition("b", TaskStatus.COMPLETED)
        assert evaluator.blocking_dependencies("b") == []
