"""Operation metrics tracking for import stages.

Each stage of an import (loading, extraction, transform, cleanup) is
recorded as an OperationMetrics entry in a process-wide collector.
"""

import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Deque, Dict, Optional


@dataclass
class OperationMetrics:
    """Tracks metrics for a single operation."""

    operation_name: str
    correlation_id: str
    start_time: float
    end_time: Optional[float] = None
    duration_ms: Optional[float] = None
    success: Optional[bool] = None
    error_type: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def complete(self, success: bool, error_type: Optional[str] = None) -> None:
        """Mark operation as complete and calculate duration.

        Args:
            success: Whether the operation succeeded
            error_type: Type of error if operation failed
        """
        self.end_time = time.time()
        self.duration_ms = (self.end_time - self.start_time) * 1000
        self.success = success
        self.error_type = error_type

    def add_metadata(self, key: str, value: Any) -> None:
        """Add metadata to the operation."""
        self.metadata[key] = value


# Oldest entries are dropped first so long-running callers stay bounded
DEFAULT_MAX_ENTRIES = 1000


class MetricsCollector:
    """Collects and aggregates the most recent operation metrics."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.metrics: Deque[OperationMetrics] = deque(maxlen=max_entries)
        self._lock = Lock()

    def record_operation(self, metrics: OperationMetrics) -> None:
        """Record completed operation metrics."""
        with self._lock:
            self.metrics.append(metrics)

    def get_metrics_summary(self, operation_name: Optional[str] = None) -> Dict[str, Any]:
        """Get summary statistics for operations.

        Args:
            operation_name: Optional filter by operation name

        Returns:
            Summary statistics dictionary
        """
        with self._lock:
            filtered_metrics = list(self.metrics)
            if operation_name:
                filtered_metrics = [m for m in self.metrics if m.operation_name == operation_name]

        if not filtered_metrics:
            return {"total_operations": 0}

        completed_metrics = [m for m in filtered_metrics if m.success is not None]
        successful_metrics = [m for m in completed_metrics if m.success]
        failed_metrics = [m for m in completed_metrics if not m.success]

        durations = [m.duration_ms for m in completed_metrics if m.duration_ms is not None]

        summary = {
            "total_operations": len(filtered_metrics),
            "completed_operations": len(completed_metrics),
            "successful_operations": len(successful_metrics),
            "failed_operations": len(failed_metrics),
            "success_rate": len(successful_metrics) / len(completed_metrics) if completed_metrics else 0,
        }

        if durations:
            summary.update({
                "avg_duration_ms": sum(durations) / len(durations),
                "min_duration_ms": min(durations),
                "max_duration_ms": max(durations),
                "total_duration_ms": sum(durations)
            })

        if failed_metrics:
            error_counts: Dict[str, int] = {}
            for metrics in failed_metrics:
                error_type = metrics.error_type or "Unknown"
                error_counts[error_type] = error_counts.get(error_type, 0) + 1
            summary["error_breakdown"] = error_counts

        return summary

    def clear_metrics(self) -> None:
        """Clear all collected metrics."""
        with self._lock:
            self.metrics.clear()


_global_metrics_collector = MetricsCollector()


def get_metrics_collector() -> MetricsCollector:
    """Get the global metrics collector instance."""
    return _global_metrics_collector


def create_operation_metrics(operation_name: str, correlation_id: str) -> OperationMetrics:
    """Create new operation metrics instance.

    Args:
        operation_name: Name of the operation being tracked
        correlation_id: Correlation ID for the operation

    Returns:
        New OperationMetrics instance
    """
    return OperationMetrics(
        operation_name=operation_name,
        correlation_id=correlation_id,
        start_time=time.time()
    )
