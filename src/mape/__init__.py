"""Multi-agent execution plan engine.

Pure, synchronous analysis over in-memory plans: template instantiation,
structural validation, cycle detection, ready-frontier selection and
critical-path estimation.
"""

from .errors import ConfigError, PlanEngineError, PlanFileError, TemplateNotFoundError
from .plan.schema import Agent, Checkpoint, Plan, PlanTemplate, Task
from .planning import (
    CriticalPath,
    TemplateRegistry,
    ValidationResult,
    calculate_critical_path,
    create_plan_from_template,
    default_registry,
    detect_circular_dependencies,
    export_plan_to_markdown,
    get_executable_tasks,
    validate_plan,
)

__all__ = [
    "Agent",
    "Checkpoint",
    "ConfigError",
    "CriticalPath",
    "Plan",
    "PlanEngineError",
    "PlanFileError",
    "PlanTemplate",
    "Task",
    "TemplateNotFoundError",
    "TemplateRegistry",
    "ValidationResult",
    "calculate_critical_path",
    "create_plan_from_template",
    "default_registry",
    "detect_circular_dependencies",
    "export_plan_to_markdown",
    "get_executable_tasks",
    "validate_plan",
]
