"""YAML loader and validation for run configuration files."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml
from jsonschema import Draft7Validator

from replaytest.core import ConfigurationError

from .models import REPORT_FORMATS, RunConfig

CONFIG_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "target": {"type": "string", "minLength": 1},
        "report": {"enum": list(REPORT_FORMATS)},
        "report_path": {"type": "string", "minLength": 1},
        "color": {"type": "boolean"},
        "breakpoints": {"type": "boolean"},
        "show_stack": {"type": "boolean"},
    },
}
_validator = Draft7Validator(CONFIG_SCHEMA)


def load_config(path: str) -> RunConfig:
    """Load and validate a run configuration file."""

    config_path = Path(path).expanduser().resolve()
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc
    return parse_config(raw, base=config_path.parent)


def parse_config(raw: Any, *, base: Path) -> RunConfig:
    if not isinstance(raw, Mapping):
        raise ConfigurationError("Config file must contain a mapping at the top level")
    errors = sorted(_validator.iter_errors(raw), key=lambda e: list(e.path))
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise ConfigurationError(f"Config schema validation failed: {messages}")
    report_path = raw.get("report_path")
    if report_path is not None:
        report_path = str((base / report_path).resolve())
    if raw.get("report") == "json" and report_path is None:
        raise ConfigurationError("report_path is required when report is 'json'")
    return RunConfig(
        target=_resolve_target(raw.get("target"), base),
        report=raw.get("report", "terminal"),
        report_path=report_path,
        color=raw.get("color", True),
        breakpoints=raw.get("breakpoints", True),
        show_stack=raw.get("show_stack", True),
    )


def _resolve_target(target: Any, base: Path) -> Any:
    if target is None:
        return None
    location, sep, attr = target.rpartition(":")
    if sep and location.endswith(".py") and not Path(location).is_absolute():
        return f"{(base / location).resolve()}:{attr}"
    return target
