"""Workbook loading for the sheet importer.

This module opens spreadsheet files and exposes their worksheets through a
small handle interface used by the table extractor:

- Format detection from the file signature (XML-based ``.xlsx``/``.xlsm``
  and legacy binary ``.xls``)
- Loading via openpyxl (XML formats) or xlrd (binary format)
- Display formatting of raw cell values into text
"""

import time
import zipfile
from abc import ABC, abstractmethod
from datetime import date, datetime, time as dt_time
from pathlib import Path
from typing import Any, List, Union

import openpyxl
import xlrd
from openpyxl.utils import get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

from sheet_importer.models.data_models import SourceUnreadableError
from sheet_importer.utils.logger import get_processing_logger
from sheet_importer.utils.logging_decorators import operation_context

FORMAT_XLSX = "xlsx"
FORMAT_XLS = "xls"

# Zip container used by Office Open XML workbooks
ZIP_SIGNATURE = b"PK\x03\x04"

# OLE2 compound document used by BIFF workbooks
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


def format_cell_value(value: Any) -> str:
    """Render a raw cell value the way a spreadsheet would display it.

    Args:
        value: Raw value from the reader library

    Returns:
        Display text for the value
    """
    if value is None:
        return ""

    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"

    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)

    if isinstance(value, datetime):
        if value.time() == dt_time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M:%S")

    if isinstance(value, (date, dt_time)):
        return value.isoformat()

    return str(value)


class WorksheetHandle(ABC):
    """Read access to a single worksheet."""

    title: str = ""

    @abstractmethod
    def highest_row(self) -> int:
        """Highest populated row number (0 for an empty sheet)."""

    @abstractmethod
    def highest_column_label(self) -> str:
        """Label of the highest populated column ("" for an empty sheet)."""

    @abstractmethod
    def cell_value(self, column: int, row: int) -> str:
        """Display-formatted value of the cell at 1-based column and row."""


class OpenpyxlWorksheet(WorksheetHandle):
    """Worksheet handle backed by an openpyxl worksheet."""

    def __init__(self, worksheet):
        self._worksheet = worksheet
        self.title = worksheet.title

    def highest_row(self) -> int:
        return self._worksheet.max_row or 0

    def highest_column_label(self) -> str:
        max_column = self._worksheet.max_column or 0
        return get_column_letter(max_column) if max_column > 0 else ""

    def cell_value(self, column: int, row: int) -> str:
        return format_cell_value(self._worksheet.cell(row=row, column=column).value)


class XlrdWorksheet(WorksheetHandle):
    """Worksheet handle backed by an xlrd sheet."""

    def __init__(self, sheet, datemode: int):
        self._sheet = sheet
        self._datemode = datemode
        self.title = sheet.name

    def highest_row(self) -> int:
        return self._sheet.nrows

    def highest_column_label(self) -> str:
        return get_column_letter(self._sheet.ncols) if self._sheet.ncols > 0 else ""

    def cell_value(self, column: int, row: int) -> str:
        # xlrd rows are ragged; cells past a row's end are empty
        if row > self._sheet.nrows or column > self._sheet.row_len(row - 1):
            return ""

        cell = self._sheet.cell(row - 1, column - 1)

        if cell.ctype == xlrd.XL_CELL_DATE:
            return format_cell_value(xlrd.xldate_as_datetime(cell.value, self._datemode))
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return format_cell_value(bool(cell.value))
        if cell.ctype == xlrd.XL_CELL_ERROR:
            return xlrd.error_text_from_code.get(cell.value, "#N/A")
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return ""

        return format_cell_value(cell.value)


class WorkbookHandle:
    """An opened workbook exposing its worksheets in workbook order.

    Example:
        >>> with WorkbookReader().open("data.xlsx") as workbook:
        ...     first = workbook.worksheets[0]
    """

    def __init__(self, path: Path, file_format: str, worksheets: List[WorksheetHandle], book=None):
        self.path = path
        self.file_format = file_format
        self.worksheets = worksheets
        self._book = book

    @property
    def sheet_names(self) -> List[str]:
        """Worksheet titles in workbook order."""
        return [ws.title for ws in self.worksheets]

    def close(self) -> None:
        """Release the underlying reader resources."""
        if self._book is None:
            return

        if self.file_format == FORMAT_XLS:
            self._book.release_resources()
        else:
            self._book.close()
        self._book = None

    def __enter__(self) -> "WorkbookHandle":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class WorkbookReader:
    """Detects workbook formats and loads them into WorkbookHandles."""

    def __init__(self):
        self.logger = get_processing_logger(__name__)

    def detect_format(self, file_path: Union[str, Path]) -> str:
        """Identify the workbook format from the file signature.

        Args:
            file_path: Path to the workbook

        Returns:
            "xlsx" or "xls"

        Raises:
            SourceUnreadableError: If the file is missing or not a workbook
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise SourceUnreadableError("File not found", file_path)

        if not file_path.is_file():
            raise SourceUnreadableError("Path is not a file", file_path)

        try:
            with open(file_path, 'rb') as f:
                header = f.read(len(OLE2_SIGNATURE))
        except OSError as e:
            raise SourceUnreadableError(f"Cannot read file: {e}", file_path) from e

        if header.startswith(ZIP_SIGNATURE):
            return FORMAT_XLSX
        if header.startswith(OLE2_SIGNATURE):
            return FORMAT_XLS

        raise SourceUnreadableError("Unrecognized spreadsheet format", file_path)

    def open(self, file_path: Union[str, Path]) -> WorkbookHandle:
        """Detect the format of a workbook and load it.

        Args:
            file_path: Path to the workbook

        Returns:
            Loaded workbook handle; callers should close it when done

        Raises:
            SourceUnreadableError: If the workbook cannot be identified or loaded
        """
        file_path = Path(file_path)

        self.logger.log_stage("identifying", f"Identifying source: {file_path}")
        file_format = self.detect_format(file_path)

        self.logger.log_stage("loading", f"Loading {file_format} workbook...")
        start_time = time.time()

        with operation_context(
            "workbook_load",
            self.logger,
            file_path=str(file_path),
            file_format=file_format
        ) as metrics:
            if file_format == FORMAT_XLS:
                workbook = self._load_xls(file_path)
            else:
                workbook = self._load_xlsx(file_path)

            if metrics:
                metrics.add_metadata("worksheet_count", len(workbook.worksheets))

        elapsed = time.time() - start_time
        self.logger.log_stage(
            "loaded",
            f"Finished loading in {elapsed:.2f}s ({len(workbook.worksheets)} worksheets)"
        )
        return workbook

    def _load_xlsx(self, file_path: Path) -> WorkbookHandle:
        try:
            # file objects bypass openpyxl's extension check
            with open(file_path, 'rb') as f:
                book = openpyxl.load_workbook(f, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
            raise SourceUnreadableError(f"Cannot load workbook: {e}", file_path) from e

        worksheets: List[WorksheetHandle] = [OpenpyxlWorksheet(ws) for ws in book.worksheets]
        return WorkbookHandle(file_path, FORMAT_XLSX, worksheets, book)

    def _load_xls(self, file_path: Path) -> WorkbookHandle:
        try:
            book = xlrd.open_workbook(str(file_path))
        except Exception as e:
            raise SourceUnreadableError(f"Cannot load workbook: {e}", file_path) from e

        worksheets: List[WorksheetHandle] = [
            XlrdWorksheet(sheet, book.datemode) for sheet in book.sheets()
        ]
        return WorkbookHandle(file_path, FORMAT_XLS, worksheets, book)

