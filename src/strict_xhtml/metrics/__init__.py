"""Conversion metrics collection.

Key Components:
    MetricsCollector: Recording interface the converter reports to
    ConversionMetrics: Lock-protected in-memory collector
    NoOpMetrics: Collector used when metrics are disabled
    ConversionStatistics: Immutable snapshot of collected counters
"""

from .collector import (
    ConversionMetrics,
    ConversionStatistics,
    MetricsCollector,
    NoOpMetrics,
)

__all__ = [
    "ConversionMetrics",
    "ConversionStatistics",
    "MetricsCollector",
    "NoOpMetrics",
]
