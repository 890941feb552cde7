"""Structural validation of execution plans.

``validate_plan`` runs the referential and acyclicity checks in a fixed order
and collects every failure as a readable string instead of raising, so a
caller sees all problems in one pass.  ``lint_plan`` reports softer findings
(duplicate ids, dangling backup agents, phases naming unknown tasks) that do
not make a plan invalid.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import List, Set, Tuple

from ..plan.schema import Plan
from .graph import detect_circular_dependencies

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ValidationResult:
    """Outcome of ``validate_plan``; ``valid`` holds iff ``errors`` is empty."""

    valid: bool
    errors: List[str] = field(default_factory=list)


def _agent_ids(plan: Plan) -> Set[str]:
    return {agent.id for agent in plan.team_roster}


def _task_ids(plan: Plan) -> Set[str]:
    return {task.id for task in plan.task_breakdown}


def _check_non_empty(plan: Plan) -> Iterable[str]:
    if not plan.team_roster:
        yield "Team roster must have at least one agent"
    if not plan.task_breakdown:
        yield "Task breakdown must have at least one task"


def _check_owners(plan: Plan) -> Iterable[str]:
    agent_ids = _agent_ids(plan)
    for task in plan.task_breakdown:
        if task.owner not in agent_ids:
            yield f'Task "{task.name}" ({task.id}) owner "{task.owner}" not found in team roster'


def _check_dependencies(plan: Plan) -> Iterable[str]:
    task_ids = _task_ids(plan)
    for task in plan.task_breakdown:
        for dependency in task.dependencies:
            if dependency not in task_ids:
                yield f'Task "{task.name}" ({task.id}) depends on non-existent task "{dependency}"'


def _check_cycles(plan: Plan) -> Iterable[str]:
    for cycle in detect_circular_dependencies(plan.task_breakdown):
        yield f"Circular dependency detected: {cycle}"


def _check_checkpoints(plan: Plan) -> Iterable[str]:
    task_ids = _task_ids(plan)
    for checkpoint in plan.orchestration_and_timeline.checkpoints:
        for task_id in checkpoint.tasks:
            if task_id not in task_ids:
                yield f'Checkpoint "{checkpoint.name}" references non-existent task "{task_id}"'


PlanCheck = Callable[[Plan], Iterable[str]]

STRUCTURAL_CHECKS: Tuple[PlanCheck, ...] = (
    _check_non_empty,
    _check_owners,
    _check_dependencies,
    _check_cycles,
    _check_checkpoints,
)


def validate_plan(plan: Plan) -> ValidationResult:
    """Check owners, dependencies, cycles and checkpoints; never raises."""
    errors: List[str] = []
    for check in STRUCTURAL_CHECKS:
        errors.extend(check(plan))
    LOGGER.debug("Validated plan %s: %d error(s)", plan.id, len(errors))
    return ValidationResult(valid=not errors, errors=errors)


# ------------------------------------------------------------------ lint
def _duplicates(values: Iterable[str]) -> List[str]:
    counts = Counter(values)
    return [value for value, count in counts.items() if count > 1]


def _lint_duplicate_ids(plan: Plan) -> Iterable[str]:
    for task_id in _duplicates(task.id for task in plan.task_breakdown):
        yield f'Task id "{task_id}" is used by more than one task'
    for agent_id in _duplicates(agent.id for agent in plan.team_roster):
        yield f'Agent id "{agent_id}" is used by more than one agent'


def _lint_backup_agents(plan: Plan) -> Iterable[str]:
    agent_ids = _agent_ids(plan)
    for agent in plan.team_roster:
        backup = agent.backup_agent
        if backup is None:
            continue
        if backup == agent.id:
            yield f'Agent "{agent.id}" lists itself as backup'
        elif backup not in agent_ids:
            yield f'Agent "{agent.id}" backup "{backup}" not found in team roster'


def _lint_phases(plan: Plan) -> Iterable[str]:
    phases = plan.orchestration_and_timeline.concurrency_plan.phases
    if not phases:
        return
    task_ids = _task_ids(plan)
    scheduled: Set[str] = set()
    for phase in phases:
        for task_id in phase.tasks:
            scheduled.add(task_id)
            if task_id not in task_ids:
                yield f'Phase "{phase.name}" references non-existent task "{task_id}"'
    for task in plan.task_breakdown:
        if task.id not in scheduled:
            yield f'Task "{task.id}" is not scheduled in any phase'


def _lint_input_sources(plan: Plan) -> Iterable[str]:
    task_ids = _task_ids(plan)
    for task in plan.task_breakdown:
        for task_input in task.inputs:
            if task_input.source != "external" and task_input.source not in task_ids:
                yield (
                    f'Task "{task.id}" input "{task_input.name}" comes from unknown source '
                    f'"{task_input.source}"'
                )


def _lint_data_flow(plan: Plan) -> Iterable[str]:
    agent_ids = _agent_ids(plan)
    checkpoint_ids = {checkpoint.id for checkpoint in plan.orchestration_and_timeline.checkpoints}
    flow = plan.dependencies_and_data_flow
    for artifact in flow.shared_artifacts:
        if artifact.owner not in agent_ids:
            yield f'Shared artifact "{artifact.name}" owner "{artifact.owner}" not found in team roster'
    for merge_point in flow.merge_points:
        if merge_point.checkpoint is not None and merge_point.checkpoint not in checkpoint_ids:
            yield f'Merge point "{merge_point.name}" references non-existent checkpoint "{merge_point.checkpoint}"'


LINT_CHECKS: Tuple[PlanCheck, ...] = (
    _lint_duplicate_ids,
    _lint_backup_agents,
    _lint_phases,
    _lint_input_sources,
    _lint_data_flow,
)


def lint_plan(plan: Plan) -> List[str]:
    """Return advisory findings that do not affect ``validate_plan``."""
    findings: List[str] = []
    for check in LINT_CHECKS:
        findings.extend(check(plan))
    return findings


__all__ = [
    "LINT_CHECKS",
    "STRUCTURAL_CHECKS",
    "ValidationResult",
    "lint_plan",
    "validate_plan",
]
