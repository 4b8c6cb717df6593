"""Import pipeline: workbook file -> Table -> transformer result.

The pipeline is configured fluently and then processed once:

    >>> result = (
    ...     ImportPipeline()
    ...     .source("people.xlsx")
    ...     .transformer(lambda table: len(table))
    ...     .delete_after_finished()
    ...     .process()
    ... )

Stages run in order with no retries and no rollback: open the workbook,
extract the first worksheet, run the transformer, then optionally delete
the source. Transformer exceptions reach the caller unchanged, and a failed
deletion is only logged.
"""

import time
from contextlib import nullcontext
from pathlib import Path
from typing import Callable, Optional, Union

from sheet_importer.models.data_models import ImportConfig, SheetImporterError, Table, Transformer
from sheet_importer.processors.table_extractor import TableExtractor
from sheet_importer.readers.workbook_reader import WorkbookReader
from sheet_importer.utils.correlation import CorrelationContext
from sheet_importer.utils.logger import get_processing_logger
from sheet_importer.utils.logging_decorators import operation_context
from sheet_importer.utils.resource_limits import lifted_resource_limits

StatusCallback = Callable[[str], None]


def _no_status(message: str) -> None:
    pass


class ImportPipeline:
    """Runs a single spreadsheet import.

    Args:
        reader: Workbook reader (defaults to WorkbookReader)
        extractor: Table extractor (defaults to TableExtractor)
        status_callback: Receives human readable stage messages
    """

    def __init__(
        self,
        reader: Optional[WorkbookReader] = None,
        extractor: Optional[TableExtractor] = None,
        status_callback: Optional[StatusCallback] = None
    ):
        self.reader = reader or WorkbookReader()
        self.extractor = extractor or TableExtractor()
        self.status_callback = status_callback or _no_status
        self.config = ImportConfig()
        self.logger = get_processing_logger(__name__)

    def source(self, path: Union[str, Path]) -> "ImportPipeline":
        """Set the workbook to import."""
        self.config.source = Path(path)
        return self

    def transformer(self, transformer: Transformer) -> "ImportPipeline":
        """Set the callable that receives the extracted Table."""
        if not callable(transformer):
            raise TypeError("transformer must be callable")
        self.config.transformer = transformer
        return self

    def delete_after_finished(self, delete: bool = True) -> "ImportPipeline":
        """Delete the source workbook once the transformer has run."""
        self.config.delete_after_finished = delete
        return self

    def lift_resource_limits(self, lift: bool = True) -> "ImportPipeline":
        """Raise soft memory/CPU limits while the workbook is loading."""
        self.config.lift_resource_limits = lift
        return self

    def process(self, config: Optional[ImportConfig] = None):
        """Run the import.

        Args:
            config: Settings to use instead of the fluently built ones

        Returns:
            Whatever the transformer returns

        Raises:
            ValueError: If no source or transformer is configured
            SourceUnreadableError: If the workbook cannot be opened
            ExtractionFailedError: If cell data cannot be read
        """
        if config is None:
            config = self.config
        config.validate()

        with CorrelationContext():
            self.logger.log_import_start(config.source)
            start_time = time.time()

            try:
                table = self.load_table(config)
            except SheetImporterError as e:
                self.logger.log_error(
                    type(e).__name__, f"Import failed: {e}", config.source, exc_info=False
                )
                raise

            self._notify(f"Converted {len(table)} rows")

            result = config.transformer(table)

            if config.delete_after_finished:
                self._delete_source(config.source)

            self.logger.log_import_complete(config.source, len(table), time.time() - start_time)
            return result

    def load_table(self, config: ImportConfig) -> Table:
        """Open the source workbook and extract its first worksheet."""
        limits = lifted_resource_limits() if config.lift_resource_limits else nullcontext()

        self._notify("Identifying source")
        with limits:
            workbook = self.reader.open(config.source)

            with workbook:
                self._notify("Converting data")
                return self.extractor.extract_workbook(workbook)

    def _delete_source(self, source: Path) -> None:
        if not source.exists():
            self.logger.debug(f"Source already gone, nothing to delete: {source}")
            return

        with operation_context("source_cleanup", self.logger, file_path=str(source)):
            try:
                source.unlink()
            except OSError as e:
                self.logger.warning(f"Could not delete source {source}: {e}")
                self._notify(f"Could not delete source {source}")
                return

        self.logger.log_stage("cleanup", f"Deleted source {source}")
        self._notify(f"Deleted source {source}")

    def _notify(self, message: str) -> None:
        self.status_callback(message)


def process(config: ImportConfig, status_callback: Optional[StatusCallback] = None):
    """Run an import described by an ImportConfig.

    Args:
        config: Source, transformer and cleanup settings
        status_callback: Optional receiver for stage messages

    Returns:
        Whatever the transformer returns
    """
    return ImportPipeline(status_callback=status_callback).process(config)
