"""Typed records describing multi-agent execution plans and their templates."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling.

    Fields are snake_case in Python and camelCase on the wire so plan files
    authored for the dashboard (``teamRoster``, ``timeoutSeconds``...) load as-is.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TaskPriority(str, Enum):
    """MoSCoW priority attached to a task."""

    MUST = "must"
    SHOULD = "should"
    COULD = "could"


class TaskRisk(str, Enum):
    """Qualitative time/complexity risk of a task."""

    LOW = "low"
    MEDIUM = "medium"
    MEDIUM_HIGH = "medium-high"
    HIGH = "high"


class TaskStatus(str, Enum):
    """Descriptive lifecycle state; the engine never transitions it."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    BLOCKED = "blocked"


class ExecutionPattern(str, Enum):
    """Orchestration pattern an executor is expected to follow."""

    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    HIERARCHICAL = "hierarchical"


class RiskProbability(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ConstraintType(str, Enum):
    AGENT_COUNT = "agent_count"
    PATTERN = "pattern"
    MAX_CONCURRENCY = "max_concurrency"
    TIMEOUT = "timeout"
    RETRY_COUNT = "retry_count"
    COMMUNICATION = "communication"


# --------------------------------------------------------------------- goals
class Deliverable(RecordModel):
    id: str
    name: str
    description: str = ""


class SuccessCriterion(RecordModel):
    id: str
    description: str
    measurable: bool = False


class Constraint(RecordModel):
    type: ConstraintType
    value: Union[int, str]
    description: Optional[str] = None


class GoalAndSuccessCriteria(RecordModel):
    """What the team must deliver and how success is judged."""

    deliverables: List[Deliverable] = Field(default_factory=list)
    success_criteria: List[SuccessCriterion] = Field(default_factory=list)
    constraints: List[Constraint] = Field(default_factory=list)


# --------------------------------------------------------------------- roster
class Agent(RecordModel):
    """Named member of the team roster that owns tasks."""

    id: str
    role: str
    responsibilities: List[str] = Field(default_factory=list)
    backup_agent: Optional[str] = None


# ---------------------------------------------------------------------- tasks
class TaskInput(RecordModel):
    """Named input consumed by a task; ``source`` is ``external`` or a task id."""

    name: str
    source: str = "external"
    required: bool = True


class TaskOutput(RecordModel):
    name: str
    description: str = ""
    format: Optional[str] = None


class AcceptanceCheck(RecordModel):
    """Check gating task completion; ``objective`` checks can be automated."""

    id: str
    description: str
    objective: bool = False


class FallbackProcedure(RecordModel):
    condition: str
    action: str


class Task(RecordModel):
    """Single unit of work owned by one agent."""

    id: str
    name: str
    owner: str
    goal: str = ""
    inputs: List[TaskInput] = Field(default_factory=list)
    outputs: List[TaskOutput] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    acceptance_checks: List[AcceptanceCheck] = Field(default_factory=list)
    priority: Optional[TaskPriority] = None
    risk: Optional[TaskRisk] = None
    fallback: List[FallbackProcedure] = Field(default_factory=list)
    status: Optional[TaskStatus] = None
    timeout_seconds: Optional[int] = Field(default=None, ge=0)
    retry_count: Optional[int] = Field(default=None, ge=0)


# ------------------------------------------------------------ data flow
class DependencyEdge(RecordModel):
    """Artifact flowing from one task into another (documentation only)."""

    from_task: str = Field(alias="from")
    to_task: str = Field(alias="to")
    artifact: str = ""


class SharedArtifact(RecordModel):
    id: str
    name: str
    owner: str
    consumers: List[str] = Field(default_factory=list)
    format: Optional[str] = None


class MergePoint(RecordModel):
    id: str
    name: str
    description: str = ""
    inputs: List[str] = Field(default_factory=list)
    checkpoint: Optional[str] = None


class DependenciesAndDataFlow(RecordModel):
    dependency_graph: List[DependencyEdge] = Field(default_factory=list)
    shared_artifacts: List[SharedArtifact] = Field(default_factory=list)
    merge_points: List[MergePoint] = Field(default_factory=list)


# -------------------------------------------------------- orchestration
class Checkpoint(RecordModel):
    """Review gate over a subset of tasks."""

    id: str
    name: str
    description: str = ""
    validation_criteria: List[str] = Field(default_factory=list)
    tasks: List[str] = Field(default_factory=list)


class ExecutionPhase(RecordModel):
    name: str
    tasks: List[str] = Field(default_factory=list)
    parallelizable: bool = False


class ConcurrencyPlan(RecordModel):
    max_concurrency: int = Field(default=1, ge=1)
    phases: List[ExecutionPhase] = Field(default_factory=list)


class OrchestrationAndTimeline(RecordModel):
    pattern: ExecutionPattern = ExecutionPattern.SEQUENTIAL
    concurrency_plan: ConcurrencyPlan = Field(default_factory=ConcurrencyPlan)
    checkpoints: List[Checkpoint] = Field(default_factory=list)
    estimated_duration_seconds: Optional[int] = None


# ---------------------------------------------------------------- recovery
class Risk(RecordModel):
    id: str
    description: str
    probability: RiskProbability
    impact: RiskImpact
    mitigation: str = ""


class RetryStrategy(RecordModel):
    max_attempts: int = Field(default=1, ge=0)
    backoff_seconds: Optional[int] = Field(default=None, ge=0)
    conditions: List[str] = Field(default_factory=list)


class FailoverStrategy(RecordModel):
    triggers: List[str] = Field(default_factory=list)
    actions: List[str] = Field(default_factory=list)


class EscalationPath(RecordModel):
    level: int
    description: str
    action: str


class RisksAndRecovery(RecordModel):
    """Descriptive recovery policy consumed by an external executor."""

    risks: List[Risk] = Field(default_factory=list)
    retry_strategy: RetryStrategy = Field(default_factory=RetryStrategy)
    failover_strategy: FailoverStrategy = Field(default_factory=FailoverStrategy)
    escalation_paths: List[EscalationPath] = Field(default_factory=list)


# -------------------------------------------------------------- aggregates
class PlanTemplate(RecordModel):
    """Reusable blueprint; a plan without identity or timestamps."""

    name: str
    description: str = ""
    version: str = "1.0.0"
    goal_and_success_criteria: GoalAndSuccessCriteria = Field(default_factory=GoalAndSuccessCriteria)
    team_roster: List[Agent] = Field(default_factory=list)
    task_breakdown: List[Task] = Field(default_factory=list)
    dependencies_and_data_flow: DependenciesAndDataFlow = Field(default_factory=DependenciesAndDataFlow)
    orchestration_and_timeline: OrchestrationAndTimeline = Field(default_factory=OrchestrationAndTimeline)
    risks_and_recovery: RisksAndRecovery = Field(default_factory=RisksAndRecovery)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Plan(PlanTemplate):
    """Concrete, instantiated execution plan."""

    id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class TemplateEntry(RecordModel):
    """Registry listing for a template."""

    name: str
    description: str = ""
    template: PlanTemplate
    category: str = "general"


__all__ = [
    "AcceptanceCheck",
    "Agent",
    "Checkpoint",
    "ConcurrencyPlan",
    "Constraint",
    "ConstraintType",
    "Deliverable",
    "DependenciesAndDataFlow",
    "DependencyEdge",
    "EscalationPath",
    "ExecutionPattern",
    "ExecutionPhase",
    "FailoverStrategy",
    "FallbackProcedure",
    "GoalAndSuccessCriteria",
    "MergePoint",
    "OrchestrationAndTimeline",
    "Plan",
    "PlanTemplate",
    "RecordModel",
    "RetryStrategy",
    "Risk",
    "RiskImpact",
    "RiskProbability",
    "RisksAndRecovery",
    "SharedArtifact",
    "SuccessCriterion",
    "Task",
    "TaskInput",
    "TaskOutput",
    "TaskPriority",
    "TaskRisk",
    "TaskStatus",
    "TemplateEntry",
    "utc_now",
]
