from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .errors import ScriptError

CONFIG_SCHEMA = Path(__file__).resolve().parents[1] / "schemas" / "config.schema.json"


def load_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def load_yaml(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def validate_config(payload: dict[str, Any], schema_path: Path = CONFIG_SCHEMA) -> None:
    schema = load_json(schema_path)
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        where = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ScriptError(f"invalid config at {where}: {exc.message}", kind="config_error") from exc


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file and validate it against the packaged schema.

    An empty file yields an empty mapping.
    """
    if not path.is_file():
        raise ScriptError(f"config file does not exist: {path}", kind="config_error")
    try:
        data = load_yaml(path)
    except yaml.YAMLError as exc:
        raise ScriptError(f"unable to parse config file {path}: {exc}", kind="config_error") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ScriptError(f"{path}: root must be mapping", kind="config_error")
    validate_config(data)
    return data
