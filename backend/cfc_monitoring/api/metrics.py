# backend/cfc_monitoring/api/metrics.py
"""Metric endpoints: samples, aggregates and host resources."""

from dataclasses import asdict
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query

from cfc_monitoring.api.deps import get_metrics, get_resources
from cfc_monitoring.api.envelope import ApiResponse, ok
from cfc_monitoring.api.schemas import MetricBatchRequest, MetricCreateRequest, MetricResponse
from cfc_monitoring.errors import ValidationError
from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.models import MetricQuery, MetricSample
from cfc_monitoring.metrics.resources import ResourceSampler

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


def _parse_tags(tags: list[str]) -> dict[str, str]:
    """Parse repeated ``tag=key:value`` query parameters."""
    parsed = {}
    for tag in tags:
        key, sep, value = tag.partition(":")
        if not sep or not key:
            raise ValidationError(f"Tag '{tag}' must look like key:value", field="tag")
        parsed[key] = value
    return parsed


def _to_sample(body: MetricCreateRequest) -> MetricSample:
    return MetricSample(
        service=body.service,
        name=body.name,
        value=body.value,
        unit=body.unit,
        timestamp=body.timestamp,
        tags=body.tags,
    )


@router.get("", response_model=ApiResponse)
async def list_metrics(
    service: str | None = Query(default=None),
    name: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    tag: list[str] | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    """List samples newest first."""
    samples, total = await metrics.query(
        MetricQuery(
            service=service,
            name=name,
            start=start_date,
            end=end_date,
            tags=_parse_tags(tag or []),
        ),
        page=page,
        limit=limit,
    )
    return ok(
        {
            "metrics": [MetricResponse.from_record(sample) for sample in samples],
            "total": total,
            "page": page,
            "limit": limit,
        },
        "Metrics retrieved successfully",
    )


@router.post("", response_model=ApiResponse, status_code=201)
async def create_metric(
    body: MetricCreateRequest,
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    record = await metrics.record(_to_sample(body))
    return ok(MetricResponse.from_record(record), "Metric recorded")


@router.post("/batch", response_model=ApiResponse, status_code=201)
async def create_metrics_batch(
    body: MetricBatchRequest,
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    count = await metrics.record_batch([_to_sample(item) for item in body.metrics])
    return ok({"count": count}, f"{count} metrics recorded")


@router.get("/aggregate", response_model=ApiResponse)
async def aggregate_metrics(
    service: str | None = Query(default=None),
    name: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    aggregates = await metrics.aggregate(service, name, start_date, end_date)
    return ok([asdict(item) for item in aggregates], "Aggregated metrics retrieved")


@router.get("/percentile", response_model=ApiResponse)
async def metric_percentile(
    name: str = Query(min_length=1),
    service: str | None = Query(default=None),
    p: float = Query(default=95.0, ge=0, le=100),
    window_minutes: int = Query(default=60, ge=1),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    value = await metrics.percentile(service, name, timedelta(minutes=window_minutes), p)
    return ok(
        {
            "service": service,
            "name": name,
            "p": p,
            "window_minutes": window_minutes,
            "value": value,
        },
        f"p{p:g} of {name}",
    )


@router.get("/trend", response_model=ApiResponse)
async def metric_trend(
    name: str = Query(min_length=1),
    service: str | None = Query(default=None),
    window_minutes: int = Query(default=120, ge=2),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    trend = await metrics.trend(service, name, timedelta(minutes=window_minutes))
    return ok(asdict(trend), f"Trend of {name} is {trend.direction.value}")


@router.get("/timeseries", response_model=ApiResponse)
async def metric_time_series(
    name: str = Query(min_length=1),
    start_date: datetime = Query(),
    end_date: datetime = Query(),
    service: str | None = Query(default=None),
    interval_minutes: int = Query(default=60, ge=1),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    points = await metrics.time_series(
        service, name, start_date, end_date, timedelta(minutes=interval_minutes)
    )
    return ok([asdict(point) for point in points], "Time series retrieved")


@router.get("/performance", response_model=ApiResponse)
async def performance_metrics(
    service: str | None = Query(default=None),
    window_minutes: int = Query(default=60, ge=1),
    metrics: MetricsAggregator = Depends(get_metrics),
) -> ApiResponse:
    summary = await metrics.performance(timedelta(minutes=window_minutes), service=service)
    return ok(asdict(summary), "Performance metrics retrieved")


@router.get("/system", response_model=ApiResponse)
async def system_resources(resources: ResourceSampler = Depends(get_resources)) -> ApiResponse:
    return ok(asdict(resources.sample()), "System resource metrics")
