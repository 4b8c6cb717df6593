"""Core data models for the sheet importer.

This module contains the table type aliases, configuration dataclasses and
exception hierarchy used throughout the application.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional

# Column number (1-based) -> trimmed cell text
Row = Dict[int, str]

# Row number (1-based) -> Row; blank rows are absent, never renumbered
Table = Dict[int, Row]

Transformer = Callable[[Table], Any]


class SheetImporterError(Exception):
    """Base class for all sheet importer errors."""
    pass


class InvalidFormatError(SheetImporterError, ValueError):
    """Raised when a column label or column number is malformed."""
    pass


class InvalidDateError(SheetImporterError, ValueError):
    """Raised when a date string matches a known layout but is not a real date."""
    pass


class SourceUnreadableError(SheetImporterError):
    """Raised when a workbook cannot be located, identified or loaded.

    Attributes:
        message: Error message describing what went wrong
        file_path: Path to the workbook that could not be read
    """

    def __init__(self, message: str, file_path: Optional[Path] = None):
        super().__init__(message)
        self.message = message
        self.file_path = file_path

    def __str__(self) -> str:
        if self.file_path:
            return f"{self.message} (File: {self.file_path})"
        return self.message


class ExtractionFailedError(SheetImporterError):
    """Raised when reading cell data from a worksheet fails.

    Attributes:
        message: Error message describing what went wrong
        row: Row number being read when the failure happened
        column: Column number being read when the failure happened
    """

    def __init__(
        self,
        message: str,
        row: Optional[int] = None,
        column: Optional[int] = None
    ):
        super().__init__(message)
        self.message = message
        self.row = row
        self.column = column

    def __str__(self) -> str:
        if self.row is not None and self.column is not None:
            return f"{self.message} (row {self.row}, column {self.column})"
        return self.message


class ConfigurationError(SheetImporterError):
    """Raised when configuration loading or validation fails."""
    pass


@dataclass
class ImportConfig:
    """Settings for a single import run.

    Attributes:
        source: Path to the workbook to import
        transformer: Callable receiving the extracted Table
        delete_after_finished: Whether to delete the source after a successful run
        lift_resource_limits: Whether to raise soft memory/CPU limits while loading
    """
    source: Optional[Path] = None
    transformer: Optional[Transformer] = None
    delete_after_finished: bool = False
    lift_resource_limits: bool = False

    def __post_init__(self) -> None:
        """Normalize the source path after initialization."""
        if self.source is not None and not isinstance(self.source, Path):
            self.source = Path(self.source)

    def validate(self) -> None:
        """Check that the config can be processed.

        Raises:
            ValueError: If the source or transformer is missing
        """
        if self.source is None or not str(self.source).strip():
            raise ValueError("source must be set before processing")

        if self.transformer is None:
            raise ValueError("transformer must be set before processing")

        if not callable(self.transformer):
            raise TypeError("transformer must be callable")


@dataclass
class ImportSettings:
    """Defaults applied to import runs started from configuration.

    Attributes:
        delete_after_finished: Default for deleting sources after import
        lift_resource_limits: Default for lifting resource limits while loading
        output_format: Default CLI output format ("json" or "csv")
    """
    delete_after_finished: bool = False
    lift_resource_limits: bool = False
    output_format: str = "json"

    def __post_init__(self) -> None:
        """Validate import settings after initialization."""
        valid_formats = ["json", "csv"]
        if self.output_format.lower() not in valid_formats:
            raise ValueError(f"output_format must be one of {valid_formats}")

        self.output_format = self.output_format.lower()


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level
        format: Log message format string
        file_enabled: Whether to log to file
        file_path: Path for log file
        console_enabled: Whether to log to console
        structured_enabled: Whether to use structured JSON logging
    """
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_enabled: bool = False
    file_path: Path = Path("./logs/sheet_importer.log")
    console_enabled: bool = True
    structured_enabled: bool = False

    def __post_init__(self) -> None:
        """Validate logging configuration after initialization."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")

        self.level = self.level.upper()

        if not isinstance(self.file_path, Path):
            self.file_path = Path(self.file_path)

    @property
    def log_level(self) -> int:
        """Get numeric logging level."""
        return getattr(logging, self.level)


@dataclass
class Config:
    """Main configuration for the sheet importer.

    Attributes:
        logging: Logging configuration
        import_settings: Defaults for import runs
    """
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    import_settings: ImportSettings = field(default_factory=ImportSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a plain dictionary.

        Returns:
            Dictionary representation of the configuration
        """
        return {
            "logging": {
                "level": self.logging.level,
                "format": self.logging.format,
                "file_enabled": self.logging.file_enabled,
                "file_path": str(self.logging.file_path),
                "console_enabled": self.logging.console_enabled,
                "structured_enabled": self.logging.structured_enabled,
            },
            "import": {
                "delete_after_finished": self.import_settings.delete_after_finished,
                "lift_resource_limits": self.import_settings.lift_resource_limits,
                "output_format": self.import_settings.output_format,
            },
        }

