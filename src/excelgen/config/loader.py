from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from dotenv import load_dotenv
from jsonschema.exceptions import ValidationError

from ..models.header_column import CellType, HeaderColumn
from ..models.machine import DEFAULT_EDITOR_PATH, DEFAULT_RUNTIME_PATH, ExcelMachine

"""Machine file loader.

Responsibilities:
- Load a machine YAML file (one spreadsheet + worksheet import configuration)
- Validate it against the bundled JSON schema
- Apply global settings from the environment (.env is read via python-dotenv)
- Save the machine back after import / type edits
"""

SCHEMA_PATH = Path(__file__).with_name("machine_schema.json")

# グローバル設定 (環境変数) -> ExcelMachine フィールド
ENV_OVERRIDES = {
    "EXCELGEN_RUNTIME_PATH": "runtime_class_path",
    "EXCELGEN_EDITOR_PATH": "editor_class_path",
    "EXCELGEN_TEMPLATE_PATH": "template_path",
}


class ConfigError(Exception):
    pass


def _validate_machine_schema(data: dict[str, Any]) -> None:
    """Validate machine data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or
            the data fails schema validation.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"machine schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"machine validation failed: {e.message}") from e


def load_env_file(path: Path = Path(".env"), override: bool = False) -> None:
    """Load a .env file into the process environment if it exists."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def apply_global_settings(machine: ExcelMachine) -> ExcelMachine:
    """Override machine paths with non-empty EXCELGEN_* environment values."""
    changes = {}
    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            changes[field_name] = value
    return replace(machine, **changes) if changes else machine


def _parse_columns(raw: list[dict[str, Any]]) -> list[HeaderColumn]:
    columns: list[HeaderColumn] = []
    seen: set[str] = set()
    for item in raw:
        name = item["name"]
        if name in seen:
            raise ConfigError(f"duplicate header column: {name}")
        seen.add(name)
        try:
            cell_type = CellType.parse(item.get("type", CellType.UNDEFINED.value))
        except ValueError as e:
            raise ConfigError(f"column '{name}': {e}") from e
        columns.append(HeaderColumn(name=name, type=cell_type))
    return columns


def machine_from_dict(data: dict[str, Any]) -> ExcelMachine:
    _validate_machine_schema(data)
    return ExcelMachine(
        excel_file_path=data["excel_file_path"],
        spreadsheet_name=data.get("spreadsheet_name", ""),
        sheet_names=list(data.get("sheet_names", [])),
        current_sheet_index=data.get("current_sheet_index", 0),
        worksheet_name=data.get("worksheet_name", ""),
        header_row=data.get("header_row", 0),
        template_path=data.get("template_path", ""),
        runtime_class_path=data.get("runtime_class_path", DEFAULT_RUNTIME_PATH),
        editor_class_path=data.get("editor_class_path", DEFAULT_EDITOR_PATH),
        only_create_data_class=data.get("only_create_data_class", False),
        header_columns=_parse_columns(data.get("header_columns", [])),
    )


def machine_to_dict(machine: ExcelMachine) -> dict[str, Any]:
    return {
        "excel_file_path": machine.excel_file_path,
        "spreadsheet_name": machine.spreadsheet_name,
        "sheet_names": list(machine.sheet_names),
        "current_sheet_index": machine.current_sheet_index,
        "worksheet_name": machine.worksheet_name,
        "header_row": machine.header_row,
        "template_path": machine.template_path,
        "runtime_class_path": machine.runtime_class_path,
        "editor_class_path": machine.editor_class_path,
        "only_create_data_class": machine.only_create_data_class,
        "header_columns": [{"name": c.name, "type": c.type.value} for c in machine.header_columns],
    }


def load_machine(path: Path, use_env: bool = True) -> ExcelMachine:
    if not path.exists():
        raise ConfigError(f"machine file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"machine file must be a mapping: {path}")

    machine = machine_from_dict(data)
    if use_env:
        machine = apply_global_settings(machine)
    return machine


def save_machine(machine: ExcelMachine, path: Path) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        text = yaml.safe_dump(machine_to_dict(machine), sort_keys=False, allow_unicode=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to save machine file {path}: {e}") from e
    return path
