"""Logging context manager for import stages.

``operation_context`` wraps a block of work (loading a workbook, extracting
a sheet, deleting a source) with start/success/error records and metrics.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional, Union

from .correlation import CorrelationContext
from .metrics import OperationMetrics, create_operation_metrics, get_metrics_collector


@contextmanager
def operation_context(
    operation_name: str,
    logger: Optional[Union[logging.Logger, logging.LoggerAdapter]] = None,
    collect_metrics: bool = True,
    **metadata: Any
) -> Generator[Optional[OperationMetrics], None, None]:
    """Context manager for operation tracking with logging and metrics.

    Args:
        operation_name: Name of the operation
        logger: Logger to use (defaults to this module's logger)
        collect_metrics: Whether to collect metrics
        **metadata: Additional metadata to include

    Yields:
        OperationMetrics instance for the operation, or None without metrics
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    correlation_id = CorrelationContext.ensure_correlation_id()

    metrics = None
    if collect_metrics:
        metrics = create_operation_metrics(operation_name, correlation_id)
        for key, value in metadata.items():
            metrics.add_metadata(key, value)

    start_data = {
        "operation": operation_name,
        "status": "START",
        **metadata
    }
    logger.debug("Operation context started", extra={"structured": start_data})

    try:
        yield metrics
    except Exception as e:
        if metrics:
            metrics.complete(success=False, error_type=type(e).__name__)
            get_metrics_collector().record_operation(metrics)

        error_data = {
            "operation": operation_name,
            "status": "ERROR",
            "error_type": type(e).__name__,
            "error_message": str(e)
        }
        if metrics:
            error_data["duration_ms"] = metrics.duration_ms

        logger.debug("Operation context failed", extra={"structured": error_data})
        raise

    if metrics:
        metrics.complete(success=True)
        get_metrics_collector().record_operation(metrics)

    success_data: Dict[str, Any] = {
        "operation": operation_name,
        "status": "SUCCESS"
    }
    if metrics:
        success_data["duration_ms"] = metrics.duration_ms

    logger.debug("Operation context completed successfully", extra={"structured": success_data})
