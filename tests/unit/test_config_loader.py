from __future__ import annotations
import os
from pathlib import Path

import pytest

from excelgen.config.loader import ConfigError, load_env_file, load_machine, save_machine
from excelgen.models.header_column import CellType, HeaderColumn


def test_load_machine_success(write_machine: Path):
    m = load_machine(write_machine)
    assert m.excel_file_path == "Assets/Data/Player.xlsx"
    assert m.worksheet_name == "Player"
    assert m.sheet_names == ["Player", "Item"]
    assert m.header_columns == [
        HeaderColumn("Name", CellType.STRING),
        HeaderColumn("Level", CellType.INT),
    ]
    assert m.header_row == 0
    assert m.only_create_data_class is False


def test_load_machine_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_machine(temp_workdir / "nope.yml")


def test_load_machine_invalid_yaml(temp_workdir: Path):
    p = temp_workdir / "bad.yml"
    p.write_text("excel_file_path: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_machine(p)


def test_load_machine_missing_required(write_machine: Path):
    text = write_machine.read_text(encoding="utf-8").replace("excel_file_path: Assets/Data/Player.xlsx\n", "")
    write_machine.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_machine(write_machine)
    assert "machine validation failed" in str(e.value) and "required property" in str(e.value)


def test_load_machine_extra_field(write_machine: Path):
    write_machine.write_text(write_machine.read_text(encoding="utf-8") + "extra_field: 1\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="machine validation failed"):
        load_machine(write_machine)


def test_load_machine_unknown_cell_type(write_machine: Path):
    text = write_machine.read_text(encoding="utf-8").replace("type: Int", "type: Decimal")
    write_machine.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="Level"):
        load_machine(write_machine)


def test_load_machine_duplicate_column(write_machine: Path):
    text = write_machine.read_text(encoding="utf-8").replace("name: Level", "name: Name")
    write_machine.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="duplicate header column"):
        load_machine(write_machine)


def test_env_overrides_paths(write_machine: Path, monkeypatch):
    monkeypatch.setenv("EXCELGEN_RUNTIME_PATH", "Game/Runtime")
    monkeypatch.setenv("EXCELGEN_EDITOR_PATH", "")
    m = load_machine(write_machine)
    assert m.runtime_class_path == "Game/Runtime"
    assert m.editor_class_path == "Assets/Script/Editor"
    assert load_machine(write_machine, use_env=False).runtime_class_path == "Assets/Script/Runtime"


def test_save_then_load_keeps_column_order(write_machine: Path, temp_workdir: Path):
    m = load_machine(write_machine)
    out = save_machine(m, temp_workdir / "out" / "copy.yml")
    again = load_machine(out)
    assert again == m
    text = out.read_text(encoding="utf-8")
    assert text.index("Name") < text.index("Level")


def test_env_file_overrides_paths(write_machine: Path, temp_workdir: Path):
    env = temp_workdir / ".env"
    env.write_text("EXCELGEN_RUNTIME_PATH=Game/Runtime\nEXCELGEN_TEMPLATE_PATH=Game/Templates\n", encoding="utf-8")
    load_env_file(env)
    m = load_machine(write_machine)
    assert m.runtime_class_path == "Game/Runtime"
    assert m.template_path == "Game/Templates"
    assert m.editor_class_path == "Assets/Script/Editor"


def test_env_file_keeps_existing_environment(write_machine: Path, temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("EXCELGEN_RUNTIME_PATH", "Shell/Runtime")
    env = temp_workdir / ".env"
    env.write_text("EXCELGEN_RUNTIME_PATH=Game/Runtime\n", encoding="utf-8")
    load_env_file(env)
    assert os.environ["EXCELGEN_RUNTIME_PATH"] == "Shell/Runtime"
    assert load_machine(write_machine).runtime_class_path == "Shell/Runtime"


def test_env_file_missing_is_ignored(write_machine: Path, temp_workdir: Path):
    load_env_file(temp_workdir / "missing.env")
    assert "EXCELGEN_RUNTIME_PATH" not in os.environ
    assert load_machine(write_machine).runtime_class_path == "Assets/Script/Runtime"
