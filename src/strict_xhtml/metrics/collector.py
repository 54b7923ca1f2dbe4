"""Thread-safe aggregation of conversion statistics."""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from strict_xhtml.shared import ChangeKind, ErrorKind, get_logger


@dataclass(frozen=True)
class ConversionStatistics:
    """Point-in-time copy of the collected counters.

    ``average_duration_seconds`` is averaged over successful conversions,
    the only ones that report a duration.
    """

    total_conversions: int = 0
    successful_conversions: int = 0
    failed_conversions: int = 0
    average_duration_seconds: float = 0.0
    total_bytes_processed: int = 0
    total_bytes_output: int = 0
    changes_applied: Dict[ChangeKind, int] = field(default_factory=dict)
    errors_by_kind: Dict[ErrorKind, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if self.total_conversions == 0:
            return 0.0
        return self.successful_conversions / self.total_conversions

    def to_dict(self) -> Dict[str, Any]:
        """Convert statistics to a JSON-friendly dictionary."""
        return {
            "total_conversions": self.total_conversions,
            "successful_conversions": self.successful_conversions,
            "failed_conversions": self.failed_conversions,
            "success_rate": self.success_rate,
            "average_duration_ms": self.average_duration_seconds * 1000,
            "total_bytes_processed": self.total_bytes_processed,
            "total_bytes_output": self.total_bytes_output,
            "changes_applied": {
                kind.name: count for kind, count in self.changes_applied.items()
            },
            "errors_by_kind": {
                kind.name: count for kind, count in self.errors_by_kind.items()
            },
        }


class MetricsCollector(ABC):
    """Interface the converter reports conversion outcomes to.

    Implementations must be safe to call concurrently from several
    conversions sharing one collector.
    """

    @abstractmethod
    def record_success(self, duration: float, input_size: int, output_size: int) -> None:
        """Record a conversion that reached Done.

        Args:
            duration: Wall-clock duration in seconds
            input_size: Input size in bytes
            output_size: Output size in bytes
        """
        pass

    @abstractmethod
    def record_failure(self, kind: ErrorKind) -> None:
        """Record an aborted conversion."""
        pass

    @abstractmethod
    def record_change(self, kind: ChangeKind) -> None:
        """Record one applied change."""
        pass

    @abstractmethod
    def snapshot(self) -> ConversionStatistics:
        """Return a point-in-time copy of the statistics."""
        pass

    @abstractmethod
    def reset(self) -> None:
        """Zero every counter."""
        pass


class ConversionMetrics(MetricsCollector):
    """Default in-memory collector.

    Counters are split into four groups, each behind its own lock: outcomes
    (with the duration sum), byte volumes, change tallies and error tallies.
    Recording into one group never waits on another. The total is derived
    from the outcome counters, so ``total == successful + failed`` holds in
    every snapshot; agreement across groups is not guaranteed while
    conversions are still being recorded.

    Examples:
        >>> metrics = ConversionMetrics()
        >>> metrics.record_success(0.5, 100, 120)
        >>> metrics.record_failure(ErrorKind.TIMEOUT)
        >>> metrics.snapshot().total_conversions
        2
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "metrics")

        self._outcome_lock = threading.Lock()
        self._successful = 0
        self._failed = 0
        self._total_duration = 0.0

        self._bytes_lock = threading.Lock()
        self._bytes_processed = 0
        self._bytes_output = 0

        self._changes_lock = threading.Lock()
        self._changes: Dict[ChangeKind, int] = {}

        self._errors_lock = threading.Lock()
        self._errors: Dict[ErrorKind, int] = {}

    def record_success(self, duration: float, input_size: int, output_size: int) -> None:
        with self._outcome_lock:
            self._successful += 1
            self._total_duration += duration
        with self._bytes_lock:
            self._bytes_processed += input_size
            self._bytes_output += output_size

    def record_failure(self, kind: ErrorKind) -> None:
        with self._outcome_lock:
            self._failed += 1
        with self._errors_lock:
            self._errors[kind] = self._errors.get(kind, 0) + 1

    def record_change(self, kind: ChangeKind) -> None:
        with self._changes_lock:
            self._changes[kind] = self._changes.get(kind, 0) + 1

    def snapshot(self) -> ConversionStatistics:
        with self._outcome_lock:
            successful = self._successful
            failed = self._failed
            total_duration = self._total_duration
        with self._bytes_lock:
            bytes_processed = self._bytes_processed
            bytes_output = self._bytes_output
        with self._changes_lock:
            changes = dict(self._changes)
        with self._errors_lock:
            errors = dict(self._errors)

        return ConversionStatistics(
            total_conversions=successful + failed,
            successful_conversions=successful,
            failed_conversions=failed,
            average_duration_seconds=total_duration / successful if successful else 0.0,
            total_bytes_processed=bytes_processed,
            total_bytes_output=bytes_output,
            changes_applied=changes,
            errors_by_kind=errors,
        )

    def reset(self) -> None:
        with self._outcome_lock:
            self._successful = 0
            self._failed = 0
            self._total_duration = 0.0
        with self._bytes_lock:
            self._bytes_processed = 0
            self._bytes_output = 0
        with self._changes_lock:
            self._changes = {}
        with self._errors_lock:
            self._errors = {}

        self.logger.info("Conversion metrics reset")


class NoOpMetrics(MetricsCollector):
    """Collector that records nothing; used when metrics are disabled."""

    def record_success(self, duration: float, input_size: int, output_size: int) -> None:
        pass

    def record_failure(self, kind: ErrorKind) -> None:
        pass

    def record_change(self, kind: ChangeKind) -> None:
        pass

    def snapshot(self) -> ConversionStatistics:
        return ConversionStatistics()

    def reset(self) -> None:
        pass
