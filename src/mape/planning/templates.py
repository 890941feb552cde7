"""Template registry and plan instantiation."""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic.alias_generators import to_camel

from ..errors import PlanFileError, TemplateNotFoundError
from ..plan.schema import Plan, PlanTemplate, TemplateEntry, utc_now
from ..utils import new_plan_id
from .files import load_template_file

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "general_project"


@dataclass(slots=True, frozen=True)
class BuiltinTemplate:
    """Template shipped as YAML inside the package."""

    template_id: str
    resource: str
    name: str
    description: str
    category: str


BUILTIN_TEMPLATES: Tuple[BuiltinTemplate, ...] = (
    BuiltinTemplate(
        template_id=DEFAULT_TEMPLATE_ID,
        resource="general_project.yaml",
        name="General Project Delivery",
        description="Default template for complex general project coordination",
        category="general",
    ),
)


def load_builtin_template(resource: str) -> PlanTemplate:
    """Parse a template bundled under ``mape/planning/builtin``."""
    source = resources.files("mape.planning").joinpath("builtin").joinpath(resource)
    data = yaml.safe_load(source.read_text(encoding="utf-8")) or {}
    return PlanTemplate.model_validate(data)


class TemplateRegistry:
    """In-memory catalogue of plan templates keyed by template id.

    Each registry owns its entries, so tests and tenants can hold independent
    catalogues side by side.
    """

    def __init__(self, entries: Optional[Mapping[str, TemplateEntry]] = None) -> None:
        self._entries: Dict[str, TemplateEntry] = dict(entries or {})

    def register(
        self,
        template_id: str,
        template: PlanTemplate,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        category: str = "general",
    ) -> TemplateEntry:
        """Add or replace the template stored under ``template_id``."""
        entry = TemplateEntry(
            name=name or template.name,
            description=template.description if description is None else description,
            template=template,
            category=category,
        )
        if template_id in self._entries:
            LOGGER.debug("Replacing registered template %s", template_id)
        self._entries[template_id] = entry
        return entry

    def get_template(self, template_id: str) -> Optional[PlanTemplate]:
        entry = self._entries.get(template_id)
        return entry.template if entry else None

    def require_template(self, template_id: str) -> PlanTemplate:
        """Return the template or raise ``TemplateNotFoundError``."""
        template = self.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def get_available_templates(self) -> Dict[str, TemplateEntry]:
        """Return a snapshot of every entry; mutating it leaves the registry untouched."""
        return dict(self._entries)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def default_registry(extra_paths: Iterable[Path | str] = ()) -> TemplateRegistry:
    """Build a fresh registry holding the built-in templates plus any template files.

    Extra files register under their file stem; unreadable files are logged
    and skipped so one bad file does not hide the rest of the catalogue.
    """
    registry = TemplateRegistry()
    for builtin in BUILTIN_TEMPLATES:
        registry.register(
            builtin.template_id,
            load_builtin_template(builtin.resource),
            name=builtin.name,
            description=builtin.description,
            category=builtin.category,
        )
    for raw_path in extra_paths:
        path = Path(raw_path)
        try:
            template = load_template_file(path)
        except PlanFileError as error:
            LOGGER.warning("Skipping template file %s: %s", path, error.reason)
            continue
        registry.register(path.stem, template, category="custom")
    return registry


def _field_name_lookup() -> Dict[str, str]:
    lookup: Dict[str, str] = {}
    for name in Plan.model_fields:
        lookup[name] = name
        lookup[to_camel(name)] = name
    return lookup


def create_plan_from_template(
    template: PlanTemplate,
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    now: Optional[datetime] = None,
) -> Plan:
    """Instantiate a new plan from ``template``.

    Every template field is deep-copied so the plan never shares lists with
    the registry. The plan receives a fresh id and ``created_at == updated_at``.
    ``overrides`` (snake_case or camelCase keys) replace whole top-level fields,
    identity and timestamps included; unknown keys are logged and ignored.
    Structural problems are carried over as-is; call ``validate_plan`` to find
    them. The one error raised here is pydantic's ``ValidationError`` for an
    override value of the wrong type.
    """
    timestamp = now or utc_now()
    payload: Dict[str, Any] = {
        name: copy.deepcopy(getattr(template, name)) for name in PlanTemplate.model_fields
    }
    payload["id"] = new_plan_id(template.name, now=timestamp)
    payload["created_at"] = timestamp
    payload["updated_at"] = timestamp

    if overrides:
        lookup = _field_name_lookup()
        for key, value in overrides.items():
            field_name = lookup.get(key)
            if field_name is None:
                LOGGER.warning("Ignoring unknown plan override %r", key)
                continue
            payload[field_name] = copy.deepcopy(value)

    plan = Plan.model_validate(payload)
    LOGGER.debug("Created plan %s from template %r", plan.id, template.name)
    return plan


__all__ = [
    "BUILTIN_TEMPLATES",
    "BuiltinTemplate",
    "DEFAULT_TEMPLATE_ID",
    "TemplateRegistry",
    "create_plan_from_template",
    "default_registry",
    "load_builtin_template",
]
