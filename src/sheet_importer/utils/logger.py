"""Logging utilities for the sheet importer.

This module provides logging setup with support for:
- Console and rotating file handlers
- Structured JSON logging
- Domain-specific logging methods for import stages
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from sheet_importer.models.data_models import LoggingConfig
from sheet_importer.utils.correlation import CorrelationContext


class JSONFormatter(logging.Formatter):
    """Formatter for structured JSON logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        correlation_id = CorrelationContext.get_correlation_id()
        if correlation_id:
            log_entry["correlation_id"] = correlation_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "structured"):
            log_entry["structured"] = record.structured

        for field in ["event_type", "file_path", "stage", "row_count",
                      "processing_time", "error_type"]:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ProcessingLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter adding import context to every record."""

    def __init__(self, logger: logging.Logger, extra: Optional[Dict[str, Any]] = None):
        super().__init__(logger, extra or {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        """Merge the adapter context into the record's extra fields."""
        if "extra" not in kwargs:
            kwargs["extra"] = {}

        kwargs["extra"].update(self.extra)
        return msg, kwargs

    def log_import_start(self, file_path: Union[str, Path]) -> None:
        """Log the start of an import.

        Args:
            file_path: Workbook being imported
        """
        extra = {
            "event_type": "import_start",
            "file_path": str(file_path),
        }
        self.info(f"Started importing: {file_path}", extra=extra)

    def log_import_complete(
        self,
        file_path: Union[str, Path],
        row_count: int,
        processing_time: float
    ) -> None:
        """Log the completion of an import.

        Args:
            file_path: Imported workbook
            row_count: Number of non-blank rows handed to the transformer
            processing_time: Total time in seconds
        """
        extra = {
            "event_type": "import_complete",
            "file_path": str(file_path),
            "row_count": row_count,
            "processing_time": processing_time,
        }
        self.info(
            f"Completed importing {file_path}: {row_count} rows in {processing_time:.2f}s",
            extra=extra
        )

    def log_stage(self, stage: str, message: str) -> None:
        """Log a named import stage.

        Args:
            stage: Stage identifier (e.g. "loading", "converting")
            message: Human readable status message
        """
        self.info(message, extra={"event_type": "import_stage", "stage": stage})

    def log_error(
        self,
        error_type: str,
        message: str,
        file_path: Optional[Union[str, Path]] = None,
        exc_info: bool = True
    ) -> None:
        """Log an import error with context.

        Args:
            error_type: Type of error
            message: Error message
            file_path: Optional workbook path where the error occurred
            exc_info: Whether to include exception information
        """
        extra: Dict[str, Any] = {
            "event_type": "import_error",
            "error_type": error_type,
        }

        if file_path:
            extra["file_path"] = str(file_path)

        self.error(message, extra=extra, exc_info=exc_info)


class LoggerManager:
    """Manages logger setup and configuration."""

    def __init__(self):
        self._configured = False
        self._loggers: Dict[str, logging.Logger] = {}
        self._adapters: Dict[str, ProcessingLoggerAdapter] = {}

    @property
    def is_configured(self) -> bool:
        """Whether setup_logging has been called."""
        return self._configured

    def setup_logging(self, config: LoggingConfig) -> None:
        """Set up logging configuration.

        Args:
            config: Logging configuration
        """
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        root_logger.setLevel(config.log_level)

        if config.console_enabled:
            self._setup_console_handler(config)

        if config.file_enabled:
            self._setup_file_handler(config)

        if config.structured_enabled:
            self._setup_structured_handler(config)

        self._configure_third_party_loggers()

        self._configured = True

        logger = self.get_logger(__name__)
        logger.debug(f"Logging configured at level {config.level}")

    def _setup_console_handler(self, config: LoggingConfig) -> None:
        # stderr keeps stdout free for exported tables
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.log_level)
        console_handler.setFormatter(
            logging.Formatter(fmt=config.format, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logging.getLogger().addHandler(console_handler)

    def _setup_file_handler(self, config: LoggingConfig) -> None:
        config.file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=config.file_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(config.log_level)
        file_handler.setFormatter(
            logging.Formatter(fmt=config.format, datefmt="%Y-%m-%d %H:%M:%S")
        )
        logging.getLogger().addHandler(file_handler)

    def _setup_structured_handler(self, config: LoggingConfig) -> None:
        structured_path = config.file_path.parent / "structured.json"
        structured_path.parent.mkdir(parents=True, exist_ok=True)

        structured_handler = logging.handlers.RotatingFileHandler(
            filename=structured_path,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        structured_handler.setLevel(config.log_level)
        structured_handler.setFormatter(JSONFormatter())
        logging.getLogger().addHandler(structured_handler)

    def _configure_third_party_loggers(self) -> None:
        logging.getLogger("openpyxl").setLevel(logging.WARNING)
        logging.getLogger("xlrd").setLevel(logging.WARNING)
        logging.getLogger("pandas").setLevel(logging.WARNING)

    def get_logger(self, name: str) -> logging.Logger:
        """Get logger instance by name."""
        if name not in self._loggers:
            self._loggers[name] = logging.getLogger(name)

        return self._loggers[name]

    def get_processing_logger(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None
    ) -> ProcessingLoggerAdapter:
        """Get processing logger adapter with context.

        Args:
            name: Logger name
            context: Additional context for all log records

        Returns:
            Processing logger adapter
        """
        cache_key = f"{name}:{hash(str(context))}"

        if cache_key not in self._adapters:
            base_logger = self.get_logger(name)
            self._adapters[cache_key] = ProcessingLoggerAdapter(base_logger, context)

        return self._adapters[cache_key]


logger_manager = LoggerManager()


def setup_logging(config: LoggingConfig) -> None:
    """Set up application logging."""
    logger_manager.setup_logging(config)


def get_processing_logger(
    name: str,
    context: Optional[Dict[str, Any]] = None
) -> ProcessingLoggerAdapter:
    """Get processing logger with context.

    Args:
        name: Logger name (typically __name__)
        context: Additional context for log records

    Returns:
        Processing logger adapter
    """
    return logger_manager.get_processing_logger(name, context)
