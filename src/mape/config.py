"""Engine configuration loaded from a YAML file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from .errors import ConfigError

DEFAULT_CONFIG_NAME = "mape.yaml"

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "EngineSection",
    "EngineSettings",
    "LoggingSection",
    "TemplatesSection",
    "load_settings",
]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class EngineSection(_Section):
    default_task_timeout: int = Field(default=300, ge=0)
    max_concurrency: Optional[int] = Field(default=None, ge=1)


class LoggingSection(_Section):
    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalised = value.strip().upper()
        if not isinstance(logging.getLevelName(normalised), int):
            raise ValueError(f"unknown logging level: {value}")
        return normalised


class TemplatesSection(_Section):
    paths: List[Path] = Field(default_factory=list)


class EngineSettings(_Section):
    """Typed view of ``mape.yaml``."""

    engine: EngineSection = Field(default_factory=EngineSection)
    logging: LoggingSection = Field(default_factory=LoggingSection)
    templates: TemplatesSection = Field(default_factory=TemplatesSection)
    _source: Optional[Path] = PrivateAttr(default=None)

    def resolve_template_paths(self) -> List[Path]:
        """Template paths, relative ones anchored at the config file's directory."""
        base = self._source.parent if self._source else Path.cwd()
        return [path if path.is_absolute() else (base / path) for path in self.templates.paths]


def load_settings(config_path: Path | str | None = None) -> EngineSettings:
    """Load settings from ``config_path``; defaults apply when the file is absent."""
    if config_path is None:
        return EngineSettings()
    path = Path(config_path)
    if not path.exists():
        return EngineSettings()

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except (OSError, UnicodeDecodeError) as error:
        raise ConfigError(f"Failed to read config {path}: {error}") from error
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config {path}: {error}") from error

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration must be a mapping at the top level: {path}")

    try:
        settings = EngineSettings.model_validate(data)
    except ValidationError as error:
        raise ConfigError(f"Invalid configuration in {path}: {error}") from error
    settings._source = path.resolve()
    return settings
