from __future__ import annotations

from dataclasses import dataclass, field

from .header_column import CellType, HeaderColumn

"""ExcelMachine model: import configuration for one spreadsheet + worksheet.

The machine owns the schema (ordered header columns) between sessions. It is
loaded from and saved to a YAML file by config.loader; operations in
services.importer return updated copies instead of mutating it.
"""

__all__ = [
    "ExcelMachine",
]

DEFAULT_RUNTIME_PATH = "Assets/Script/Runtime"
DEFAULT_EDITOR_PATH = "Assets/Script/Editor"


@dataclass(frozen=True)
class ExcelMachine:
    """Per-worksheet import configuration and its stored schema."""
    excel_file_path: str = ""
    spreadsheet_name: str = ""
    sheet_names: list[str] = field(default_factory=list)
    current_sheet_index: int = 0
    worksheet_name: str = ""
    header_row: int = 0  # タイトル行 (0 始まり)
    template_path: str = ""
    runtime_class_path: str = DEFAULT_RUNTIME_PATH
    editor_class_path: str = DEFAULT_EDITOR_PATH
    only_create_data_class: bool = False
    header_columns: list[HeaderColumn] = field(default_factory=list)

    def __post_init__(self) -> None:
        # シート名一覧が既知でワークシート名未設定なら index から補完
        if not self.worksheet_name and self.sheet_names:
            if 0 <= self.current_sheet_index < len(self.sheet_names):
                object.__setattr__(self, "worksheet_name", self.sheet_names[self.current_sheet_index])

    def has_header_columns(self) -> bool:
        return len(self.header_columns) > 0

    def undefined_columns(self) -> list[str]:
        """Names of columns whose type is still undefined, in schema order."""
        return [c.name for c in self.header_columns if c.type is CellType.UNDEFINED]

    def column(self, name: str) -> HeaderColumn | None:
        for c in self.header_columns:
            if c.name == name:
                return c
        return None
