"""excelgen: spreadsheet header reconciliation and C# script generation."""

__version__ = "0.1.0"
