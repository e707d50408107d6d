"""Lint configuration loaded from a course's `.coursecheck.yaml`."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("coursecheck")

CONFIG_FILENAME = ".coursecheck.yaml"


class ConfigError(ValueError):
    """Raised for unreadable or invalid configuration."""


@dataclass(frozen=True)
class LintConfig:
    """Field names and rule switches for one course."""

    id_field: str = "id"
    name_field: str = "name"
    dependencies_field: str = "dependencies"
    tags_field: str = "tags"
    required_fields: tuple[str, ...] | None = None
    allowed_tags: frozenset[str] | None = None
    ignore: frozenset[str] = frozenset()
    warnings_as_errors: bool = False
    include: str = "**/*.md"
    exclude: tuple[str, ...] = ()

    @property
    def effective_required_fields(self) -> tuple[str, ...]:
        """Required fields, defaulting to the name and id fields."""
        if self.required_fields is None:
            return (self.name_field, self.id_field)
        return self.required_fields


_STRING_KEYS = {"id_field", "name_field", "dependencies_field", "tags_field", "include"}
_LIST_KEYS = {"required_fields", "allowed_tags", "ignore", "exclude"}


def config_from_dict(raw: dict[str, Any]) -> LintConfig:
    """Build a config from a parsed YAML mapping."""
    known = {item.name for item in fields(LintConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(unknown)}")

    values: dict[str, Any] = {}
    for key, value in raw.items():
        if key in _STRING_KEYS:
            if not isinstance(value, str) or not value.strip():
                raise ConfigError(f"Config key '{key}' must be a non-empty string.")
            values[key] = value.strip()
        elif key in _LIST_KEYS:
            items = _string_list(key, value)
            if key in {"allowed_tags", "ignore"}:
                values[key] = frozenset(items)
            else:
                values[key] = tuple(items)
        elif key == "warnings_as_errors":
            if not isinstance(value, bool):
                raise ConfigError("Config key 'warnings_as_errors' must be true or false.")
            values[key] = value
    return replace(LintConfig(), **values)


def load_config(path: Path | str | None = None, root: Path | str | None = None) -> LintConfig:
    """Load an explicit config file, or the course root's config file if present."""
    if path is not None:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"Config not found: {config_path}")
    elif root is not None and (Path(root) / CONFIG_FILENAME).is_file():
        config_path = Path(root) / CONFIG_FILENAME
    else:
        return LintConfig()

    logger.debug("Loading config from %s", config_path)
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8-sig"))
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if raw is None:
        return LintConfig()
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root in {config_path} must be a mapping.")
    return config_from_dict(raw)


def _string_list(key: str, value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) and item.strip() for item in value):
        raise ConfigError(f"Config key '{key}' must be a list of non-empty strings.")
    return [item.strip() for item in value]
