"""Sheet Importer.

Converts the first worksheet of a spreadsheet into a table of trimmed
strings keyed by row and column number, hands it to a transformer and
optionally removes the source file afterwards.
"""

__version__ = "1.0.0"

from sheet_importer.converters.column_codec import to_label, to_number
from sheet_importer.converters.date_normalizer import normalize
from sheet_importer.models.data_models import (
    ExtractionFailedError,
    ImportConfig,
    InvalidDateError,
    InvalidFormatError,
    Row,
    SheetImporterError,
    SourceUnreadableError,
    Table,
)
from sheet_importer.pipeline.import_pipeline import ImportPipeline, process
from sheet_importer.processors.table_extractor import TableExtractor
from sheet_importer.readers.workbook_reader import WorkbookReader

__all__ = [
    "ExtractionFailedError",
    "ImportConfig",
    "ImportPipeline",
    "InvalidDateError",
    "InvalidFormatError",
    "Row",
    "SheetImporterError",
    "SourceUnreadableError",
    "Table",
    "TableExtractor",
    "WorkbookReader",
    "normalize",
    "process",
    "to_label",
    "to_number",
]
