"""Domain models for the spreadsheet -> C# script generator.

This package contains the value objects shared by the importer and the
script generator: typed header columns, the per-worksheet import
configuration and the script prescription.
"""

from .header_column import CellType, HeaderColumn
from .machine import ExcelMachine
from .script_prescription import ScriptPrescription

__all__ = [
    # Schema models
    "CellType",
    "HeaderColumn",
    # Import configuration
    "ExcelMachine",
    # Generation models
    "ScriptPrescription",
]
