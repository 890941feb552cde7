"""Reading and writing plan and template files (JSON or YAML by suffix)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Type, TypeVar

import yaml
from pydantic import ValidationError

from ..errors import PlanFileError
from ..plan.schema import Plan, PlanTemplate

_YAML_SUFFIXES = {".yaml", ".yml"}

ModelT = TypeVar("ModelT", Plan, PlanTemplate)


def _is_yaml(path: Path) -> bool:
    return path.suffix.lower() in _YAML_SUFFIXES


def _read_mapping(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise PlanFileError(path, "file not found")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        raise PlanFileError(path, f"unable to read: {error}") from error
    try:
        data = yaml.safe_load(text) if _is_yaml(path) else json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as error:
        raise PlanFileError(path, f"unable to parse: {error}") from error
    if not isinstance(data, dict):
        raise PlanFileError(path, "expected a mapping at the top level")
    return data


def _validate(path: Path, model: Type[ModelT], data: Dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as error:
        raise PlanFileError(path, f"{error.error_count()} schema error(s): {error}") from error


def load_plan(path: Path | str) -> Plan:
    """Load a plan file; accepts snake_case or camelCase keys."""
    resolved = Path(path)
    return _validate(resolved, Plan, _read_mapping(resolved))


def load_template_file(path: Path | str) -> PlanTemplate:
    """Load a template file.

    Plan files are accepted too: their identity and timestamps are dropped.
    """
    resolved = Path(path)
    data = _read_mapping(resolved)
    for key in ("id", "created_at", "createdAt", "updated_at", "updatedAt"):
        data.pop(key, None)
    return _validate(resolved, PlanTemplate, data)


def plan_to_dict(plan: PlanTemplate) -> Dict[str, Any]:
    """Serialise with camelCase keys and ISO-8601 timestamps, omitting unset optionals."""
    return plan.model_dump(mode="json", by_alias=True, exclude_none=True)


def dump_plan(plan: PlanTemplate, path: Path | str) -> Path:
    """Write ``plan`` to ``path`` as YAML or JSON depending on the suffix."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = plan_to_dict(plan)
    with target.open("w", encoding="utf-8") as handle:
        if _is_yaml(target):
            yaml.safe_dump(payload, handle, sort_keys=False, allow_unicode=True)
        else:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
            handle.write("\n")
    return target


__all__ = ["dump_plan", "load_plan", "load_template_file", "plan_to_dict"]
