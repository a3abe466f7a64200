"""Metrics aggregator: append samples and compute rolling aggregates.

Samples are immutable. Every aggregate is computed from the stored points
on request; nothing is folded destructively.
"""

import logging
import math
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone

from cfc_monitoring.db.types import as_utc, utcnow
from cfc_monitoring.errors import ValidationError
from cfc_monitoring.metrics.math_utils import mean, percent_change, percentile
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
from cfc_monitoring.models.metric import MetricName, MetricSampleRecord

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
TREND_STABLE_PERCENT = 5.0


def _check_range(start: datetime | None, end: datetime | None) -> None:
    if start is not None and end is not None and as_utc(end) < as_utc(start):
        raise ValidationError("end must not be before start", field="end")


def _check_window(window: timedelta) -> None:
    if window.total_seconds() <= 0:
        raise ValidationError("window must be positive", field="window")


class MetricsAggregator:
    """Time-series store front end with rolling aggregates."""

    def __init__(
        self,
        repository: MetricRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._repo = repository
        self._clock = clock

    def _to_record(self, sample: MetricSample) -> MetricSampleRecord:
        if not sample.service or not sample.service.strip():
            raise ValidationError("Metric service is required", field="service")
        if not sample.name or not sample.name.strip():
            raise ValidationError("Metric name is required", field="name")
        if isinstance(sample.value, bool) or not isinstance(sample.value, (int, float)):
            raise ValidationError("Metric value must be a number", field="value")
        if not math.isfinite(sample.value):
            raise ValidationError("Metric value must be finite", field="value")

        return MetricSampleRecord(
            service=sample.service,
            name=sample.name,
            value=float(sample.value),
            unit=sample.unit or "",
            timestamp=sample.timestamp or self._clock(),
            tags=dict(sample.tags),
        )

    async def record(self, sample: MetricSample) -> MetricSampleRecord:
        """Append one sample.

        Raises:
            ValidationError: On empty service/name or a non-finite value
        """
        records = await self._repo.append([self._to_record(sample)])
        return records[0]

    async def record_batch(self, samples: Sequence[MetricSample]) -> int:
        """Append samples in one transaction. All are validated first.

        Returns:
            Number of samples stored
        """
        records = [self._to_record(sample) for sample in samples]
        if not records:
            return 0
        await self._repo.append(records)
        return len(records)

    async def query(
        self,
        filters: MetricQuery,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[MetricSampleRecord], int]:
        """List samples newest first. Page is 1-based.

        Returns:
            Tuple of (samples on the page, total matching)
        """
        _check_range(filters.start, filters.end)
        if page < 1:
            raise ValidationError("page must be >= 1", field="page")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be within 1..{MAX_PAGE_SIZE}", field="limit")
        return await self._repo.find_all(filters, page=page, limit=limit)

    async def aggregate(
        self,
        service: str | None = None,
        name: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[MetricAggregate]:
        """avg/min/max/count grouped by metric name."""
        _check_range(start, end)
        return await self._repo.aggregate(
            MetricQuery(service=service, name=name, start=start, end=end)
        )

    async def _window_values(
        self, service: str | None, name: str, window: timedelta
    ) -> list[tuple[datetime, float]]:
        _check_window(window)
        if not name:
            raise ValidationError("Metric name is required", field="name")
        end = self._clock()
        return await self._repo.values(service, name, end - window, end)

    async def percentile(
        self,
        service: str | None,
        name: str,
        window: timedelta,
        p: float,
    ) -> float:
        """p-th percentile of a metric over the trailing window.

        Returns 0.0 when the window holds no samples.
        """
        if not 0 <= p <= 100:
            raise ValidationError("p must be within [0, 100]", field="p")
        points = await self._window_values(service, name, window)
        return percentile([value for _, value in points], p)

    async def trend(
        self,
        service: str | None,
        name: str,
        window: timedelta,
    ) -> TrendResult:
        """Compare the second half of the trailing window with the first half.

        A change within +/-5% is stable. Either half being empty is stable
        with zero change. From a zero first-half mean the change is reported
        as 0.0 and the direction follows the sign of the second-half mean.
        """
        points = await self._window_values(service, name, window)
        midpoint = self._clock() - window / 2
        first = [value for ts, value in points if ts < midpoint]
        second = [value for ts, value in points if ts >= midpoint]

        first_mean = mean(first)
        second_mean = mean(second)
        change = percent_change(first_mean, second_mean) if first and second else 0.0

        if first and second and first_mean == 0 and second_mean != 0:
            # No relative change from a zero base, so only the sign counts
            direction = TrendDirection.UP if second_mean > 0 else TrendDirection.DOWN
        elif change > TREND_STABLE_PERCENT:
            direction = TrendDirection.UP
        elif change < -TREND_STABLE_PERCENT:
            direction = TrendDirection.DOWN
        else:
            direction = TrendDirection.STABLE

        return TrendResult(
            direction=direction,
            change_percent=change,
            first_mean=first_mean,
            second_mean=second_mean,
            samples=len(points),
        )

    async def time_series(
        self,
        service: str | None,
        name: str,
        start: datetime,
        end: datetime,
        interval: timedelta = timedelta(hours=1),
    ) -> list[TimeSeriesPoint]:
        """Bucket averages, oldest bucket first. Empty buckets are omitted.

        Buckets are aligned to multiples of interval since the Unix epoch.
        """
        _check_range(start, end)
        if interval.total_seconds() <= 0:
            raise ValidationError("interval must be positive", field="interval")

        points = await self._repo.values(service, name, start, end)
        step = interval.total_seconds()
        buckets: dict[float, list[float]] = {}
        for ts, value in points:
            epoch = as_utc(ts).timestamp()
            buckets.setdefault(epoch - epoch % step, []).append(value)

        return [
            TimeSeriesPoint(
                timestamp=datetime.fromtimestamp(bucket, tz=timezone.utc),
                value=mean(values),
                count=len(values),
            )
            for bucket, values in sorted(buckets.items())
        ]

    async def performance(
        self,
        window: timedelta = timedelta(hours=1),
        service: str | None = None,
    ) -> PerformanceSummary:
        """Response time distribution, throughput and error rate."""
        latencies = [
            value
            for _, value in await self._window_values(
                service, MetricName.RESPONSE_TIME.value, window
            )
        ]
        errors = [
            value
            for _, value in await self._window_values(
                service, MetricName.ERROR_COUNT.value, window
            )
        ]

        error_rate = 0.0
        if errors:
            error_rate = sum(1 for value in errors if value > 0) / len(errors) * 100

        return PerformanceSummary(
            avg_response_time_ms=mean(latencies),
            p95_response_time_ms=percentile(latencies, 95),
            p99_response_time_ms=percentile(latencies, 99),
            throughput=len(latencies),
            error_rate=error_rate,
            window_seconds=int(window.total_seconds()),
        )

    async def purge_older_than(self, age: timedelta) -> int:
        """Drop samples older than age. Returns number removed."""
        _check_window(age)
        removed = await self._repo.delete_older_than(self._clock() - age)
        if removed:
            logger.info("Purged %d metric samples older than %s", removed, age)
        return removed
