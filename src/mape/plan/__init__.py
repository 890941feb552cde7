"""Typed plan, task and template records."""

from .schema import (
    Agent,
    Checkpoint,
    EscalationPath,
    FailoverStrategy,
    Plan,
    PlanTemplate,
    RetryStrategy,
    Risk,
    Task,
    TemplateEntry,
)

__all__ = [
    "Agent",
    "Checkpoint",
    "EscalationPath",
    "FailoverStrategy",
    "Plan",
    "PlanTemplate",
    "RetryStrategy",
    "Risk",
    "Task",
    "TemplateEntry",
]
