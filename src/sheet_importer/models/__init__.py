"""Data models and exceptions for the sheet importer."""

from sheet_importer.models.data_models import (
    Config,
    ConfigurationError,
    ExtractionFailedError,
    ImportConfig,
    ImportSettings,
    InvalidDateError,
    InvalidFormatError,
    LoggingConfig,
    Row,
    SheetImporterError,
    SourceUnreadableError,
    Table,
)

__all__ = [
    "Config",
    "ConfigurationError",
    "ExtractionFailedError",
    "ImportConfig",
    "ImportSettings",
    "InvalidDateError",
    "InvalidFormatError",
    "LoggingConfig",
    "Row",
    "SheetImporterError",
    "SourceUnreadableError",
    "Table",
]
