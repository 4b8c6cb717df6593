"""Worksheet to table conversion.

The extractor walks a worksheet row by row and column by column, trims every
cell to text and drops rows in which every cell is empty. Row numbers of the
kept rows are the original worksheet row numbers; nothing is renumbered.

Example:
    >>> extractor = TableExtractor()
    >>> table = extractor.extract(worksheet)
    >>> table
    {1: {1: 'Name', 2: 'Age'}, 3: {1: 'Alice', 2: '30'}}
"""

import time

from sheet_importer.converters.column_codec import to_number
from sheet_importer.models.data_models import ExtractionFailedError, Row, Table
from sheet_importer.readers.workbook_reader import WorkbookHandle, WorksheetHandle
from sheet_importer.utils.logger import get_processing_logger
from sheet_importer.utils.logging_decorators import operation_context


class TableExtractor:
    """Converts a worksheet into a row-major Table of trimmed strings."""

    def __init__(self):
        self.logger = get_processing_logger(__name__)

    def extract(self, sheet: WorksheetHandle) -> Table:
        """Convert a worksheet into a Table.

        Args:
            sheet: Worksheet to read

        Returns:
            Table keyed by original row number; blank rows are omitted

        Raises:
            ExtractionFailedError: If the worksheet bounds or a cell cannot be read
        """
        try:
            max_row = sheet.highest_row()
            max_col = to_number(sheet.highest_column_label())
        except Exception as e:
            raise ExtractionFailedError(f"Cannot read worksheet bounds: {e}") from e

        table: Table = {}
        if max_row <= 0:
            return table

        self.logger.log_stage("converting", "Start converting data...")
        start_time = time.time()

        with operation_context(
            "table_extraction",
            self.logger,
            worksheet=getattr(sheet, "title", ""),
            max_row=max_row,
            max_col=max_col
        ) as metrics:
            for row_number in range(1, max_row + 1):
                row = self._read_row(sheet, row_number, max_col)
                if row is not None:
                    table[row_number] = row

            if metrics:
                metrics.add_metadata("rows_kept", len(table))
                metrics.add_metadata("rows_skipped", max_row - len(table))

        elapsed = time.time() - start_time
        self.logger.log_stage(
            "converted",
            f"Converting data finished in {elapsed:.2f}s "
            f"({len(table)} of {max_row} rows kept)"
        )
        return table

    def extract_workbook(self, workbook: WorkbookHandle) -> Table:
        """Convert the first worksheet of a workbook; later sheets are ignored.

        Args:
            workbook: Opened workbook

        Returns:
            Table of the first worksheet, empty if the workbook has none
        """
        if not workbook.worksheets:
            self.logger.warning(f"Workbook has no worksheets: {workbook.path}")
            return {}

        if len(workbook.worksheets) > 1:
            self.logger.debug(
                f"Ignoring {len(workbook.worksheets) - 1} additional worksheets in {workbook.path}"
            )

        return self.extract(workbook.worksheets[0])

    def _read_row(self, sheet: WorksheetHandle, row_number: int, max_col: int):
        """Read one row, returning None when every cell is blank."""
        row: Row = {}
        is_blank = True

        for column in range(1, max_col + 1):
            try:
                raw = sheet.cell_value(column, row_number)
            except Exception as e:
                raise ExtractionFailedError(
                    f"Cannot read cell: {e}", row=row_number, column=column
                ) from e

            value = "" if raw is None else str(raw).strip()
            row[column] = value

            if value:
                is_blank = False

        return None if is_blank else row
