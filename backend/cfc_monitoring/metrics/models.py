"""Metric value objects."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class MetricSample:
    """One time-series point to append."""

    service: str
    name: str
    value: float
    unit: str = ""
    timestamp: datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)


@dataclass
class MetricQuery:
    """Filter for listing samples. None means no constraint."""

    service: str | None = None
    name: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricAggregate:
    """Summary statistics of one metric name over a window."""

    name: str
    avg: float
    min: float
    max: float
    count: int


@dataclass(frozen=True)
class TimeSeriesPoint:
    """Average of the samples falling in one bucket."""

    timestamp: datetime
    value: float
    count: int


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


@dataclass(frozen=True)
class TrendResult:
    """Comparison of the second half of a window against the first half.

    Attributes:
        direction: up or down when the change exceeds the threshold
        change_percent: Percent change of the second-half mean
        first_mean: Mean of samples in the first half
        second_mean: Mean of samples in the second half
        samples: Samples considered
    """

    direction: TrendDirection
    change_percent: float
    first_mean: float
    second_mean: float
    samples: int


@dataclass(frozen=True)
class PerformanceSummary:
    """Response time distribution and error rate over a window.

    Attributes:
        avg_response_time_ms: Mean of response_time samples
        p95_response_time_ms: 95th percentile of response_time samples
        p99_response_time_ms: 99th percentile of response_time samples
        throughput: Number of response_time samples in the window
        error_rate: Percent of error_count samples that recorded an error
        window_seconds: Length of the window
    """

    avg_response_time_ms: float
    p95_response_time_ms: float
    p99_response_time_ms: float
    throughput: int
    error_rate: float
    window_seconds: int
