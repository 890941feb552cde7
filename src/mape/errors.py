"""Exceptions raised at the engine's file and lookup boundaries.

Plan analysis never raises for data-quality problems; these errors only cover
reading configuration, reading or writing plan files, and template lookups.
"""

from __future__ import annotations

from pathlib import Path

__all__ = [
    "ConfigError",
    "PlanEngineError",
    "PlanFileError",
    "TemplateNotFoundError",
]


class PlanEngineError(RuntimeError):
    """Base error raised by the plan engine."""


class ConfigError(PlanEngineError):
    """Raised when the engine configuration file cannot be used."""


class PlanFileError(PlanEngineError):
    """Raised when a plan or template file is missing, unparsable, or malformed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path.as_posix()}: {reason}")


class TemplateNotFoundError(PlanEngineError):
    """Raised when a template id is not registered."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Unknown template: {template_id}")
