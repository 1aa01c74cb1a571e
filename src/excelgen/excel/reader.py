from __future__ import annotations

from pathlib import Path

import pandas as pd

"""Spreadsheet reader adapter.

Only two questions are ever asked of a spreadsheet file: which sheets does
it have, and what are the column titles of one sheet. pandas (with openpyxl
for .xlsx) does the actual parsing.
"""

__all__ = [
    "SpreadsheetReadError",
    "SheetNotFoundError",
    "open_sheet_names",
    "read_titles",
]


class SpreadsheetReadError(Exception):
    """Raised when the spreadsheet file cannot be opened or parsed."""

class SheetNotFoundError(SpreadsheetReadError):
    """Raised when the requested worksheet does not exist in the file."""


def _open(path: Path) -> pd.ExcelFile:
    try:
        return pd.ExcelFile(path)
    except FileNotFoundError:
        raise
    except Exception as e:
        # ファイルが他プロセスで開かれている場合などもここに来る
        raise SpreadsheetReadError(f"failed to open spreadsheet {path}: {e}") from e


def open_sheet_names(path: Path) -> list[str]:
    """Return the sheet names of a spreadsheet file in workbook order."""
    with _open(Path(path)) as xls:
        return [str(name) for name in xls.sheet_names]


def read_titles(path: Path, sheet_name: str, header_row: int = 0) -> list[str]:
    """Read the column titles of one worksheet.

    Parameters
    ----------
    path: spreadsheet file path
    sheet_name: worksheet to read
    header_row: 0-based row index holding the titles

    Empty cells in the title row are skipped. A sheet that has no row at
    ``header_row`` yields an empty list.
    """
    with _open(Path(path)) as xls:
        names = [str(n) for n in xls.sheet_names]
        if sheet_name not in names:
            raise SheetNotFoundError(f"sheet '{sheet_name}' not found in {Path(path).name}: {names}")
        try:
            # ヘッダなしで生読み、タイトル行のみ必要
            df = xls.parse(sheet_name, header=None, nrows=header_row + 1)
        except Exception as e:
            raise SpreadsheetReadError(f"failed to read sheet '{sheet_name}': {e}") from e

    if df.shape[0] <= header_row:
        return []
    titles: list[str] = []
    for val in df.iloc[header_row].tolist():
        if pd.isna(val):
            continue
        text = str(val).strip()
        if text:
            titles.append(text)
    return titles
