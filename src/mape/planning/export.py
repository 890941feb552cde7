"""Markdown rendering of execution plans for human review.

The report is a one-way projection; nothing parses it back into a plan.
"""

from __future__ import annotations

from typing import Dict, List

from ..plan.schema import Plan


def _role_lookup(plan: Plan) -> Dict[str, str]:
    roles: Dict[str, str] = {}
    for agent in plan.team_roster:
        roles.setdefault(agent.id, agent.role)
    return roles


def _render_goal(plan: Plan) -> List[str]:
    goal = plan.goal_and_success_criteria
    lines = ["## 1) Goal and Success Criteria", "", "### Deliverables", ""]
    for index, deliverable in enumerate(goal.deliverables, start=1):
        lines.append(f"{index}. **{deliverable.name}**: {deliverable.description}")
    lines.extend(["", "### Success Criteria", ""])
    lines.extend(f"- {criterion.description}" for criterion in goal.success_criteria)
    lines.extend(["", "### Constraints", ""])
    for constraint in goal.constraints:
        line = f"- **{constraint.type.value}**: {constraint.value}"
        if constraint.description:
            line += f" - {constraint.description}"
        lines.append(line)
    return lines


def _render_roster(plan: Plan, roles: Dict[str, str]) -> List[str]:
    lines = [
        "## 2) Team Roster",
        "",
        "| Role/Agent | Responsibilities | Backup |",
        "|------------|-----------------|--------|",
    ]
    for agent in plan.team_roster:
        backup = roles.get(agent.backup_agent or "", "N/A")
        lines.append(f"| {agent.role} | {', '.join(agent.responsibilities)} | {backup} |")
    return lines


def _render_tasks(plan: Plan, roles: Dict[str, str]) -> List[str]:
    lines = ["## 3) Task Breakdown", ""]
    for index, task in enumerate(plan.task_breakdown, start=1):
        lines.extend(
            [
                f"### Task {index}: {task.name}",
                "",
                f"- **Owner**: {roles.get(task.owner, task.owner)}",
                f"- **Goal**: {task.goal}",
                f"- **Inputs**: {', '.join(item.name for item in task.inputs) or 'None'}",
                f"- **Outputs**: {', '.join(item.name for item in task.outputs) or 'None'}",
                f"- **Dependencies**: {', '.join(task.dependencies) or 'None'}",
                "- **Acceptance Checks**:",
            ]
        )
        lines.extend(f"  - {check.description}" for check in task.acceptance_checks)
        if task.priority:
            lines.append(f"- **Priority**: {task.priority.value}")
        if task.risk:
            lines.append(f"- **Time/Complexity Risk**: {task.risk.value}")
        for fallback in task.fallback:
            lines.append(f"- **Fallback** ({fallback.condition}): {fallback.action}")
        lines.append("")
    return lines


def _render_data_flow(plan: Plan, roles: Dict[str, str]) -> List[str]:
    flow = plan.dependencies_and_data_flow
    lines = ["## 4) Dependencies & Data Flow", "", "### Dependency Graph", ""]
    for edge in flow.dependency_graph:
        lines.append(f"- **{edge.from_task}** → **{edge.to_task}**: {edge.artifact}")
    lines.extend(["", "### Shared Artifacts", ""])
    for artifact in flow.shared_artifacts:
        lines.append(f"- **{artifact.name}** (owner: {roles.get(artifact.owner, artifact.owner)})")
    lines.extend(["", "### Merge Points", ""])
    lines.extend(f"- **{point.name}**: {point.description}" for point in flow.merge_points)
    return lines


def _render_orchestration(plan: Plan) -> List[str]:
    orchestration = plan.orchestration_and_timeline
    concurrency = orchestration.concurrency_plan
    lines = [
        "## 5) Orchestration & Timeline",
        "",
        f"**Pattern**: {orchestration.pattern.value}  ",
        f"**Max Concurrency**: {concurrency.max_concurrency}",
    ]
    if orchestration.estimated_duration_seconds is not None:
        lines.append(f"**Estimated Duration**: {orchestration.estimated_duration_seconds} seconds")
    lines.extend(["", "### Execution Phases", ""])
    for index, phase in enumerate(concurrency.phases, start=1):
        mode = "parallel" if phase.parallelizable else "sequential"
        lines.append(f"{index}. **{phase.name}**: {', '.join(phase.tasks)} ({mode})")
    lines.extend(["", "### Checkpoints", ""])
    for checkpoint in orchestration.checkpoints:
        lines.extend([f"#### {checkpoint.name}", "", checkpoint.description, "", "Validation:"])
        lines.extend(f"- {criterion}" for criterion in checkpoint.validation_criteria)
        lines.append("")
    return lines


def _render_recovery(plan: Plan) -> List[str]:
    recovery = plan.risks_and_recovery
    retry = recovery.retry_strategy
    failover = recovery.failover_strategy
    lines = ["## 6) Risks & Recovery", "", "### Top Risks", ""]
    for index, risk in enumerate(recovery.risks, start=1):
        lines.append(
            f"{index}. **{risk.description}** "
            f"({risk.probability.value} probability, {risk.impact.value} impact)  "
        )
        lines.extend([f"   Mitigation: {risk.mitigation}", ""])
    lines.extend(
        [
            "### Retry Strategy",
            "",
            f"- **Max Attempts**: {retry.max_attempts}",
            f"- **Backoff**: {retry.backoff_seconds or 0} seconds",
            "- **Conditions**:",
        ]
    )
    lines.extend(f"  - {condition}" for condition in retry.conditions)
    lines.extend(["", "### Failover Strategy", "", "**Triggers**:"])
    lines.extend(f"- {trigger}" for trigger in failover.triggers)
    lines.extend(["", "**Actions**:"])
    lines.extend(f"- {action}" for action in failover.actions)
    lines.extend(["", "### Escalation Path", ""])
    for path in sorted(recovery.escalation_paths, key=lambda item: item.level):
        lines.append(f"{path.level}. **{path.description}**: {path.action}")
    return lines


def export_plan_to_markdown(plan: Plan) -> str:
    """Render ``plan`` as a Markdown report."""
    roles = _role_lookup(plan)
    created = plan.created_at.strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    lines = [
        f"# {plan.name}",
        "",
        plan.description,
        "",
        f"**Version:** {plan.version}  ",
        f"**Plan ID:** {plan.id}  ",
        f"**Created:** {created}",
        "",
    ]
    for section in (
        _render_goal(plan),
        _render_roster(plan, roles),
        _render_tasks(plan, roles),
        _render_data_flow(plan, roles),
        _render_orchestration(plan),
        _render_recovery(plan),
    ):
        lines.extend(section)
        lines.append("")
    return "\n".join(lines).rstrip() + "\n"


__all__ = ["export_plan_to_markdown"]
