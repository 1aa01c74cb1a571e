from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ..config.loader import ConfigError, load_env_file, load_machine, save_machine
from ..excel.reader import SpreadsheetReadError
from ..logging.init import log_summary, setup_logging
from ..models.header_column import CellType
from ..models.machine import ExcelMachine
from ..services.generator import GenerationError, generate_all
from ..services.importer import (
    MissingPathError,
    import_sheet,
    select_spreadsheet,
    select_worksheet,
    set_column_type,
)
from ..services.summary import render_generate_summary, render_import_summary

"""CLI entrypoint.

Each subcommand is one user action against a machine file:
- load the machine (creating an empty one for ``open``)
- run the action, surfacing any failure as an ERROR line
- save the machine when the action changed it
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_WARNING = 2

DEFAULT_MACHINE_FILE = "excelgen.yml"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="excelgen", description="Spreadsheet header import & C# script generator"
    )
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--machine", default=DEFAULT_MACHINE_FILE, help=f"Machine file (default: {DEFAULT_MACHINE_FILE})"
    )
    sub = p.add_subparsers(dest="command", required=True)

    op = sub.add_parser("open", help="Select a spreadsheet file and read its sheet names")
    op.add_argument("path", help="Spreadsheet file (.xlsx / .xls)")

    sel = sub.add_parser("select", help="Select the worksheet by index")
    sel.add_argument("index", type=int)

    sub.add_parser("import", help="Import header columns, keeping assigned types")
    sub.add_parser("reimport", help="Import header columns, discarding assigned types")

    st = sub.add_parser("set-type", help="Assign a cell type to a header column")
    st.add_argument("column")
    st.add_argument("type", help=", ".join(t.value for t in CellType))

    sub.add_parser("generate", help="Generate C# scripts from the header columns")
    sub.add_parser("show", help="Print the machine's worksheet and header columns")
    return p.parse_args(argv)


def _show(machine: ExcelMachine) -> None:
    logger = setup_logging()
    logger.info(f"file={machine.excel_file_path or '-'} worksheet={machine.worksheet_name or '-'}")
    for i, name in enumerate(machine.sheet_names):
        mark = "*" if i == machine.current_sheet_index else " "
        logger.info(f"  {mark}[{i}] {name}")
    for c in machine.header_columns:
        logger.info(f"  {c.name}: {c.type.value}")


def main(argv: list[str] | None = None) -> int:
    # NOTE: [] が与えられた場合に sys.argv[1:] を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    load_env_file(Path(".env"))
    machine_path = Path(args.machine)

    try:
        if args.command == "open" and not machine_path.exists():
            machine = ExcelMachine()
        else:
            machine = load_machine(machine_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    exit_code = EXIT_SUCCESS
    try:
        if args.command == "open":
            machine = select_spreadsheet(machine, args.path)
            logger.info(f"sheets: {', '.join(machine.sheet_names)}")
        elif args.command == "select":
            machine = select_worksheet(machine, args.index)
            logger.info(f"worksheet: {machine.worksheet_name}")
        elif args.command in ("import", "reimport"):
            result = import_sheet(machine, reimport=args.command == "reimport")
            machine = result.machine
            log_summary(render_import_summary(machine, result.empty_sheet))
            if result.empty_sheet:
                exit_code = EXIT_WARNING
        elif args.command == "set-type":
            machine = set_column_type(machine, args.column, CellType.parse(args.type))
            logger.info(f"{args.column}: {machine.column(args.column).type.value}")
        elif args.command == "generate":
            paths = generate_all(machine)
            for p in paths:
                logger.info(f"generated: {p}")
            log_summary(render_generate_summary(machine, paths))
            logger.info("Successfully generated!")
            return EXIT_SUCCESS
        elif args.command == "show":
            _show(machine)
            return EXIT_SUCCESS
    except MissingPathError as e:
        logger.error(str(e))
        return EXIT_FATAL
    except FileNotFoundError as e:
        logger.error(str(e))
        return EXIT_FATAL
    except SpreadsheetReadError as e:
        logger.error(f"spreadsheet: {e}")
        return EXIT_FATAL
    except GenerationError as e:
        logger.error(f"Failed to create a script from excel: {e}")
        return EXIT_FATAL
    except (KeyError, IndexError, ValueError) as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_FATAL

    try:
        save_machine(machine, machine_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
