from __future__ import annotations

import logging
import warnings
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path

from ..excel.reader import SpreadsheetReadError, open_sheet_names, read_titles
from ..models.header_column import CellType, HeaderColumn
from ..models.machine import ExcelMachine
from .reconciler import EmptySheetWarning, reconcile

"""Import / Reimport of a worksheet's header row into a machine.

Host-side half of the schema workflow: validates the spreadsheet path,
reads the titles through the reader adapter and hands them to the
reconciler. The caller owns load/save of the machine around these calls.
"""

logger = logging.getLogger(__name__)

TitleReader = Callable[[Path, str, int], list[str]]


class MissingPathError(Exception):
    """Raised when no spreadsheet path has been specified."""


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one import: the updated machine and the empty-sheet flag."""
    machine: ExcelMachine
    empty_sheet: bool = False

    @property
    def columns(self) -> list[HeaderColumn]:
        return self.machine.header_columns


def _check_path(machine: ExcelMachine) -> Path:
    if not machine.excel_file_path:
        raise MissingPathError("You should specify spreadsheet file first!")
    path = Path(machine.excel_file_path)
    if not path.exists():
        raise FileNotFoundError(f"File at {path} does not exist.")
    return path


def import_sheet(
    machine: ExcelMachine,
    reimport: bool = False,
    reader: TitleReader = read_titles,
) -> ImportResult:
    """Read the worksheet titles and reconcile them into the machine schema.

    Args:
        machine: Current machine (not modified)
        reimport: Discard previously assigned types
        reader: Title reader, ``read_titles`` by default

    Returns:
        ImportResult with the updated machine. ``empty_sheet`` is set when
        the worksheet yielded no titles; the schema is then empty.

    Raises:
        MissingPathError: excel_file_path is empty
        FileNotFoundError: the spreadsheet file does not exist
        SpreadsheetReadError: the reader failed
    """
    path = _check_path(machine)
    sheet = machine.worksheet_name
    if not sheet:
        raise SpreadsheetReadError("no worksheet selected")

    titles = reader(path, sheet, machine.header_row)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", EmptySheetWarning)
        columns = reconcile(machine.header_columns, titles, force_reset=reimport)
    empty = any(issubclass(w.category, EmptySheetWarning) for w in caught)
    if empty:
        logger.warning(f"The WorkSheet [{sheet}] may be empty.")

    mode = "reimport" if reimport else "import"
    logger.info(f"{mode}: sheet={sheet} columns={len(columns)}")
    return ImportResult(replace(machine, header_columns=columns), empty_sheet=empty)


def select_spreadsheet(machine: ExcelMachine, path: str) -> ExcelMachine:
    """Point the machine at a spreadsheet file and record its sheet names.

    Raises:
        FileNotFoundError: the file does not exist
        SpreadsheetReadError: the file has no readable sheets
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File at {p} does not exist.")
    names = open_sheet_names(p)
    if not names:
        raise SpreadsheetReadError(
            "Failed to retrieve the specified excel file. "
            "If the excel file is opened, close it then reopen it again."
        )
    index = machine.current_sheet_index if machine.current_sheet_index < len(names) else 0
    return replace(
        machine,
        excel_file_path=str(path),
        spreadsheet_name=p.name,
        sheet_names=names,
        current_sheet_index=index,
        worksheet_name=names[index],
    )


def select_worksheet(machine: ExcelMachine, index: int) -> ExcelMachine:
    """Select the worksheet at ``index`` of the recorded sheet names."""
    if not machine.sheet_names:
        raise SpreadsheetReadError("no sheet names recorded; open a spreadsheet first")
    if not 0 <= index < len(machine.sheet_names):
        raise IndexError(f"sheet index {index} out of range 0..{len(machine.sheet_names) - 1}")
    return replace(machine, current_sheet_index=index, worksheet_name=machine.sheet_names[index])


def set_column_type(machine: ExcelMachine, name: str, cell_type: CellType) -> ExcelMachine:
    """Assign a cell type to one header column."""
    if machine.column(name) is None:
        raise KeyError(f"no header column named '{name}'")
    columns = [
        HeaderColumn(name=c.name, type=cell_type) if c.name == name else c
        for c in machine.header_columns
    ]
    return replace(machine, header_columns=columns)
