"""Time-series metric samples and aggregates."""

from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.models import (
    MetricAggregate,
    MetricQuery,
    MetricSample,
    PerformanceSummary,
    TimeSeriesPoint,
    TrendDirection,
    TrendResult,
)
from cfc_monitoring.metrics.repository import MetricRepository
from cfc_monitoring.metrics.resources import ResourceSampler, ResourceSnapshot

__all__ = [
    "MetricAggregate",
    "MetricQuery",
    "MetricRepository",
    "MetricSample",
    "MetricsAggregator",
    "PerformanceSummary",
    "ResourceSampler",
    "ResourceSnapshot",
    "TimeSeriesPoint",
    "TrendDirection",
    "TrendResult",
]
