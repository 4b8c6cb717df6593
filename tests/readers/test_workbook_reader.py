"""Tests for workbook format detection and loading."""

from datetime import date, datetime, time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import xlrd

from sheet_importer.models.data_models import SourceUnreadableError
from sheet_importer.readers.workbook_reader import (
    OLE2_SIGNATURE,
    WorkbookReader,
    XlrdWorksheet,
    format_cell_value,
)


class TestFormatCellValue:
    """Test cases for display formatting of raw values."""

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        ("text", "text"),
        (" padded ", " padded "),
        (True, "TRUE"),
        (False, "FALSE"),
        (42, "42"),
        (42.0, "42"),
        (3.5, "3.5"),
        (0.1, "0.1"),
        (datetime(2003, 6, 21), "2003-06-21"),
        (datetime(2003, 6, 21, 14, 30, 5), "2003-06-21 14:30:05"),
        (date(2003, 6, 21), "2003-06-21"),
        (time(8, 15), "08:15:00"),
    ])
    def test_values(self, value, expected):
        """Test each supported raw value type."""
        assert format_cell_value(value) == expected


class TestDetectFormat:
    """Test cases for WorkbookReader.detect_format."""

    def test_xlsx(self, sample_workbook: Path):
        """Test an openpyxl-written file is detected as xlsx."""
        assert WorkbookReader().detect_format(sample_workbook) == "xlsx"

    def test_xls_signature(self, temp_dir: Path):
        """Test the OLE2 header is detected as xls."""
        path = temp_dir / "legacy.xls"
        path.write_bytes(OLE2_SIGNATURE + b"\x00" * 504)

        assert WorkbookReader().detect_format(path) == "xls"

    def test_signature_wins_over_extension(self, sample_workbook: Path, temp_dir: Path):
        """Test format comes from content, not from the file name."""
        renamed = temp_dir / "renamed.dat"
        renamed.write_bytes(sample_workbook.read_bytes())

        assert WorkbookReader().detect_format(renamed) == "xlsx"

    def test_missing_file(self, temp_dir: Path):
        """Test a missing path is unreadable."""
        with pytest.raises(SourceUnreadableError, match="not found"):
            WorkbookReader().detect_format(temp_dir / "missing.xlsx")

    def test_directory(self, temp_dir: Path):
        """Test a directory is unreadable."""
        with pytest.raises(SourceUnreadableError, match="not a file"):
            WorkbookReader().detect_format(temp_dir)

    def test_text_file(self, invalid_workbook: Path):
        """Test text content is an unrecognized format."""
        with pytest.raises(SourceUnreadableError, match="Unrecognized"):
            WorkbookReader().detect_format(invalid_workbook)

    def test_empty_file(self, temp_dir: Path):
        """Test an empty file is an unrecognized format."""
        path = temp_dir / "empty.xlsx"
        path.write_bytes(b"")

        with pytest.raises(SourceUnreadableError):
            WorkbookReader().detect_format(path)


class TestOpen:
    """Test cases for WorkbookReader.open."""

    def test_open_xlsx(self, sample_workbook: Path):
        """Test loading exposes worksheets in workbook order."""
        with WorkbookReader().open(sample_workbook) as workbook:
            assert workbook.file_format == "xlsx"
            assert workbook.sheet_names == ["People", "Ignored"]

            first = workbook.worksheets[0]
            assert first.highest_row() == 3
            assert first.highest_column_label() == "B"
            assert first.cell_value(1, 3) == " Alice "
            assert first.cell_value(2, 3) == "30"
            assert first.cell_value(2, 2) == ""

    def test_open_formats_dates(self, make_workbook):
        """Test date cells come back as ISO text."""
        path = make_workbook({"Dates": [[datetime(2003, 6, 21)]]})

        with WorkbookReader().open(path) as workbook:
            assert workbook.worksheets[0].cell_value(1, 1) == "2003-06-21"

    def test_corrupt_zip(self, temp_dir: Path):
        """Test a zip signature followed by garbage is unreadable."""
        path = temp_dir / "corrupt.xlsx"
        path.write_bytes(b"PK\x03\x04" + b"garbage" * 20)

        with pytest.raises(SourceUnreadableError):
            WorkbookReader().open(path)

    def test_corrupt_xls(self, temp_dir: Path):
        """Test an OLE2 header without a workbook stream is unreadable."""
        path = temp_dir / "corrupt.xls"
        path.write_bytes(OLE2_SIGNATURE + b"\x00" * 504)

        with patch(
            "sheet_importer.readers.workbook_reader.xlrd.open_workbook",
            side_effect=xlrd.XLRDError("Unsupported format, or corrupt file"),
        ):
            with pytest.raises(SourceUnreadableError, match="corrupt"):
                WorkbookReader().open(path)

    def test_open_xls_uses_xlrd(self, temp_dir: Path):
        """Test xls files are loaded through xlrd."""
        path = temp_dir / "legacy.xls"
        path.write_bytes(OLE2_SIGNATURE + b"\x00" * 504)

        sheet = MagicMock()
        sheet.name = "Legacy"
        book = MagicMock(datemode=0)
        book.sheets.return_value = [sheet]

        with patch("sheet_importer.readers.workbook_reader.xlrd.open_workbook", return_value=book):
            workbook = WorkbookReader().open(path)

        assert workbook.file_format == "xls"
        assert workbook.sheet_names == ["Legacy"]

        workbook.close()
        book.release_resources.assert_called_once()

    def test_open_ignores_extension(self, sample_workbook: Path, temp_dir: Path):
        """Test an xlsx workbook with another extension still loads."""
        renamed = temp_dir / "upload.tmp"
        renamed.write_bytes(sample_workbook.read_bytes())

        with WorkbookReader().open(renamed) as workbook:
            assert workbook.sheet_names == ["People", "Ignored"]

    def test_close_is_idempotent(self, sample_workbook: Path):
        """Test closing twice is harmless."""
        workbook = WorkbookReader().open(sample_workbook)
        workbook.close()
        workbook.close()


class TestXlrdWorksheet:
    """Test cases for the xlrd-backed worksheet handle."""

    def _sheet(self, cells):
        sheet = MagicMock()
        sheet.name = "Legacy"
        sheet.nrows = len(cells)
        sheet.ncols = max(len(row) for row in cells)
        sheet.row_len.side_effect = lambda index: len(cells[index])
        sheet.cell.side_effect = lambda row, col: cells[row][col]
        return XlrdWorksheet(sheet, datemode=0)

    def test_bounds(self):
        """Test bounds come from nrows and ncols."""
        worksheet = self._sheet([[xlrd.sheet.Cell(xlrd.XL_CELL_TEXT, "a")] * 28])

        assert worksheet.highest_row() == 1
        assert worksheet.highest_column_label() == "AB"

    def test_cell_types(self):
        """Test number, date, boolean, error and ragged cells."""
        worksheet = self._sheet([
            [
                xlrd.sheet.Cell(xlrd.XL_CELL_NUMBER, 7.0),
                xlrd.sheet.Cell(xlrd.XL_CELL_DATE, 37793.0),
                xlrd.sheet.Cell(xlrd.XL_CELL_BOOLEAN, 1),
                xlrd.sheet.Cell(xlrd.XL_CELL_ERROR, 0x07),
            ],
            [
                xlrd.sheet.Cell(xlrd.XL_CELL_EMPTY, ""),
            ],
        ])

        assert worksheet.cell_value(1, 1) == "7"
        assert worksheet.cell_value(2, 1) == "2003-06-21"
        assert worksheet.cell_value(3, 1) == "TRUE"
        assert worksheet.cell_value(4, 1) == "#DIV/0!"
        assert worksheet.cell_value(1, 2) == ""
        assert worksheet.cell_value(4, 2) == ""

    def test_empty_sheet(self):
        """Test an empty xlrd sheet reports no rows or columns."""
        sheet = MagicMock(nrows=0, ncols=0)
        worksheet = XlrdWorksheet(sheet, datemode=0)

        assert worksheet.highest_row() == 0
        assert worksheet.highest_column_label() == ""
