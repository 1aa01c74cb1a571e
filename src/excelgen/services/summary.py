from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ..models.machine import ExcelMachine

"""SUMMARY line rendering for the import and generate commands.

The functions return the line body; the ``SUMMARY`` label is added by the
log formatter (``logging.init.log_summary``). Full lines:
    SUMMARY worksheet={name} columns={n} undefined={u} empty={yes|no}
    SUMMARY worksheet={name} generated={n}
"""


def render_import_summary(machine: ExcelMachine, empty_sheet: bool = False) -> str:
    """Render the SUMMARY body after an import.

    Examples:
        >>> from excelgen.models import ExcelMachine, HeaderColumn
        >>> m = ExcelMachine(worksheet_name="Player", header_columns=[HeaderColumn("Name")])
        >>> render_import_summary(m)
        'worksheet=Player columns=1 undefined=1 empty=no'
    """
    return (
        f"worksheet={machine.worksheet_name} "
        f"columns={len(machine.header_columns)} "
        f"undefined={len(machine.undefined_columns())} "
        f"empty={'yes' if empty_sheet else 'no'}"
    )


def render_generate_summary(machine: ExcelMachine, paths: Sequence[Path]) -> str:
    return f"worksheet={machine.worksheet_name} generated={len(paths)}"
