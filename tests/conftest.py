from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from mape.plan.schema import Agent, Plan, Task  # noqa: E402
from mape.planning import create_plan_from_template, default_registry, dump_plan  # noqa: E402

TaskFactory = Callable[..., Task]


@pytest.fixture()
def make_task() -> TaskFactory:
    """Build a minimal task owned by ``lead`` with the given dependencies."""

    def _make(task_id: str, *dependencies: str, timeout: int | None = 300, owner: str = "lead") -> Task:
        return Task(
            id=task_id,
            name=f"Task {task_id}",
            owner=owner,
            dependencies=list(dependencies),
            timeout_seconds=timeout,
        )

    return _make


@pytest.fixture()
def diamond_tasks(make_task: TaskFactory) -> list[Task]:
    """Five tasks: t2,t4 <- t1; t3 <- t1,t2; t5 <- t1..t4."""

    return [
        make_task("t1"),
        make_task("t2", "t1"),
        make_task("t3", "t1", "t2"),
        make_task("t4", "t1"),
        make_task("t5", "t1", "t2", "t3", "t4"),
    ]


@pytest.fixture()
def build_plan() -> Callable[[Sequence[Task]], Plan]:
    """Wrap tasks into a plan with a single ``lead`` agent."""

    def _build(tasks: Sequence[Task]) -> Plan:
        return Plan(
            id="plan-test",
            name="Test plan",
            team_roster=[Agent(id="lead", role="Lead")],
            task_breakdown=list(tasks),
        )

    return _build


@pytest.fixture()
def default_plan() -> Plan:
    registry = default_registry()
    return create_plan_from_template(registry.require_template("general_project"))


@pytest.fixture()
def plan_file(tmp_path: Path, default_plan: Plan) -> Path:
    return dump_plan(default_plan, tmp_path / "plan.json")
