"""Pytest configuration and shared fixtures for sheet importer tests."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

import openpyxl
import pytest
import yaml

from sheet_importer.config.config_manager import config_manager
from sheet_importer.readers.workbook_reader import WorksheetHandle
from sheet_importer.utils.logger import logger_manager


class FakeWorksheet(WorksheetHandle):
    """In-memory worksheet for extractor tests.

    Cells are given as a dict keyed by (column, row); missing cells read as "".
    """

    def __init__(
        self,
        cells: Dict[tuple, object],
        max_row: int,
        max_column_label: str,
        title: str = "Sheet1",
        fail_at: Optional[tuple] = None
    ):
        self.cells = cells
        self.max_row = max_row
        self.max_column_label = max_column_label
        self.title = title
        self.fail_at = fail_at
        self.reads: List[tuple] = []

    def highest_row(self) -> int:
        return self.max_row

    def highest_column_label(self) -> str:
        return self.max_column_label

    def cell_value(self, column: int, row: int) -> str:
        self.reads.append((column, row))
        if self.fail_at == (column, row):
            raise RuntimeError("corrupt cell")
        return self.cells.get((column, row), "")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_sheet():
    """The FakeWorksheet class, for building in-memory worksheets."""
    return FakeWorksheet


@pytest.fixture(autouse=True)
def reset_logging_and_config():
    """Drop handlers and cached config added by a test."""
    yield
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logger_manager._configured = False
    config_manager.clear_cache()


@pytest.fixture
def make_workbook(temp_dir: Path):
    """Factory writing an .xlsx file from a list of rows per sheet."""
    def _make(sheets: Dict[str, List[list]], name: str = "data.xlsx") -> Path:
        workbook = openpyxl.Workbook()
        workbook.remove(workbook.active)
        for title, rows in sheets.items():
            worksheet = workbook.create_sheet(title)
            for row_index, row in enumerate(rows, 1):
                for column_index, value in enumerate(row, 1):
                    if value is not None:
                        worksheet.cell(row=row_index, column=column_index, value=value)
        path = temp_dir / name
        workbook.save(path)
        return path

    return _make


@pytest.fixture
def sample_workbook(make_workbook) -> Path:
    """Three-row, two-column workbook whose second row is blank."""
    return make_workbook({
        "People": [
            ["Name", "  Age "],
            ["   ", None],
            [" Alice ", 30],
        ],
        "Ignored": [
            ["should", "not appear"],
        ],
    })


@pytest.fixture
def invalid_workbook(temp_dir: Path) -> Path:
    """A file with a workbook extension but text content."""
    invalid_file = temp_dir / "invalid.xlsx"
    invalid_file.write_text("This is not a spreadsheet")
    return invalid_file


@pytest.fixture
def sample_config_dict() -> dict:
    """Sample configuration dictionary for testing."""
    return {
        "import": {
            "delete_after_finished": True,
            "output_format": "csv",
        },
        "logging": {
            "level": "DEBUG",
            "file": {
                "enabled": False,
            },
        },
    }


@pytest.fixture
def sample_config_file(temp_dir: Path, sample_config_dict: dict) -> Path:
    """Create a sample configuration file for testing."""
    config_file = temp_dir / "test_config.yaml"
    with open(config_file, 'w') as f:
        yaml.dump(sample_config_dict, f)
    return config_file


@pytest.fixture
def env_override():
    """Set SHEET_IMPORTER_* environment variables for a test."""
    class EnvOverride:
        def __init__(self):
            self.original_env = {}

        def set(self, key: str, value: str):
            if key not in self.original_env:
                self.original_env[key] = os.environ.get(key)
            os.environ[key] = value

        def clear(self):
            for key, value in self.original_env.items():
                if value is None:
                    os.environ.pop(key, None)
                else:
                    os.environ[key] = value

    override = EnvOverride()
    yield override
    override.clear()
