"""Pytest configuration and shared fixtures."""

import json
import os
from pathlib import Path
from typing import Generator

import pytest

# Set test environment
os.environ.pop("DATABASE_URL", None)
os.environ["TASKGRAPH_LOG_DIR"] = ""
os.environ.setdefault("TASKGRAPH_LOG_LEVEL", "DEBUG")


@pytest.fixture
def mock_settings() -> Generator:
    """Reset the cached settings around a test that changes the environment."""
    from taskgraph.core.config import clear_settings_cache

    # Clear any cached settings
    clear_settings_cache()

    yield

    # Clear again after test
    clear_settings_cache()


@pytest.fixture
def sample_tasks() -> list:
    """Provide the T1/T2/T3 tasks, with T1 still pending."""
    from taskgraph.graph.models import Task, TaskPriority

    return [
        Task(id="T1", title="Book venue", priority=TaskPriority.HIGH),
        Task(id="T2", title="Send invitations"),
        Task(id="T3", title="Share reading list", priority=TaskPriority.LOW),
    ]


@pytest.fixture
def sample_edges() -> list:
    """T2 is blocked by T1, T3 references T1 for information only."""
    from taskgraph.graph.models import DependencyEdge, DependencyType

    return [
        DependencyEdge(id="e1", task_id="T2", depends_on_task_id="T1"),
        DependencyEdge(
            id="e2",
            task_id="T3",
            depends_on_task_id="T1",
            type=DependencyType.INFORMATIONAL,
        ),
    ]


@pytest.fixture
def chain_tasks() -> list:
    """Provide tasks A, B, C, D."""
    from taskgraph.graph.models import Task

    return [Task(id=task_id, title=f"Task {task_id}") for task_id in "ABCD"]


@pytest.fixture
def chain_edges() -> list:
    """Blocking chain A -> B -> C -> D (each depends on the previous one)."""
    from taskgraph.graph.models import DependencyEdge

    return [
        DependencyEdge(id="ab", task_id="B", depends_on_task_id="A"),
        DependencyEdge(id="bc", task_id="C", depends_on_task_id="B"),
        DependencyEdge(id="cd", task_id="D", depends_on_task_id="C"),
    ]


@pytest.fixture
def cycle_edges() -> list:
    """Blocking cycle A -> B -> C -> A."""
    from taskgraph.graph.models import DependencyEdge

    return [
        DependencyEdge(id="ab", task_id="B", depends_on_task_id="A"),
        DependencyEdge(id="bc", task_id="C", depends_on_task_id="B"),
        DependencyEdge(id="ca", task_id="A", depends_on_task_id="C"),
    ]


@pytest.fixture
def snapshot_file(tmp_path: Path, sample_tasks: list, sample_edges: list) -> Path:
    """Write the T1/T2/T3 snapshot to a JSON file."""
    path = tmp_path / "tasks.json"
    path.write_text(
        json.dumps(
            {
                "tasks": [t.model_dump(mode="json") for t in sample_tasks],
                "dependencies": [e.model_dump(mode="json") for e in sample_edges],
            }
        )
    )
    return path


# Markers
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
