"""Plan templates, validation and dependency-graph analysis."""

from .export import export_plan_to_markdown
from .files import dump_plan, load_plan, load_template_file, plan_to_dict
from .graph import (
    CriticalPath,
    WavePlan,
    calculate_critical_path,
    derive_dependency_edges,
    detect_circular_dependencies,
    find_dependency_cycles,
    get_executable_tasks,
    plan_execution_waves,
    topological_order,
)
from .templates import (
    DEFAULT_TEMPLATE_ID,
    TemplateRegistry,
    create_plan_from_template,
    default_registry,
)
from .validation import ValidationResult, lint_plan, validate_plan

__all__ = [
    "CriticalPath",
    "DEFAULT_TEMPLATE_ID",
    "TemplateRegistry",
    "ValidationResult",
    "WavePlan",
    "calculate_critical_path",
    "create_plan_from_template",
    "default_registry",
    "derive_dependency_edges",
    "detect_circular_dependencies",
    "dump_plan",
    "export_plan_to_markdown",
    "find_dependency_cycles",
    "get_executable_tasks",
    "lint_plan",
    "load_plan",
    "load_template_file",
    "plan_execution_waves",
    "plan_to_dict",
    "topological_order",
    "validate_plan",
]
