"""Workbook readers for XML-based and legacy binary spreadsheets."""

from sheet_importer.readers.workbook_reader import (
    WorkbookHandle,
    WorkbookReader,
    WorksheetHandle,
    format_cell_value,
)

__all__ = ["WorkbookHandle", "WorkbookReader", "WorksheetHandle", "format_cell_value"]
