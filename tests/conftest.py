# Shared pytest fixtures
from __future__ import annotations
import os
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from excelgen.config.loader import ENV_OVERRIDES
from excelgen.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "Assets" / "Data").mkdir(parents=True)
        (p / "templates").mkdir()
        monkeypatch.chdir(p)
        # グローバル設定の影響を受けないように
        for name in ENV_OVERRIDES:
            monkeypatch.delenv(name, raising=False)
        yield p
        # .env の読み込みは os.environ を直接書き換える
        for name in ENV_OVERRIDES:
            os.environ.pop(name, None)


def _make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Create a real .xlsx file; each sheet is a list of raw rows (no pandas header)."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def player_xlsx(temp_workdir: Path) -> Path:
    return _make_excel(
        temp_workdir / "Assets" / "Data" / "Player.xlsx",
        {
            "Player": [
                ["Name", "Level", "Score"],
                ["Alice", 3, 10.5],
                ["Bob", 5, 8.0],
            ],
            "Item": [
                ["Id", "Price"],
                [1, 100],
            ],
        },
    )


@pytest.fixture()
def sample_machine_yaml() -> str:
    return """excel_file_path: Assets/Data/Player.xlsx
spreadsheet_name: Player.xlsx
sheet_names: [Player, Item]
current_sheet_index: 0
worksheet_name: Player
runtime_class_path: Assets/Script/Runtime
editor_class_path: Assets/Script/Editor
only_create_data_class: false
header_columns:
  - name: Name
    type: String
  - name: Level
    type: Int
"""


@pytest.fixture()
def write_machine(temp_workdir: Path, sample_machine_yaml: str) -> Path:
    cfg = temp_workdir / "excelgen.yml"
    cfg.write_text(sample_machine_yaml, encoding="utf-8")
    return cfg
