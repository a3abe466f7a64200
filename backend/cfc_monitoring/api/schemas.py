# backend/cfc_monitoring/api/schemas.py
"""Request and response schemas for the monitoring API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from cfc_monitoring.alerts.models import AlertMetadata
from cfc_monitoring.health.models import ProbeResult
from cfc_monitoring.models.alert import AlertRecord, AlertSeverity, AlertStatus
from cfc_monitoring.models.metric import MetricSampleRecord
from cfc_monitoring.models.service import Environment, ServiceRecord, ServiceStatus, ServiceType
from cfc_monitoring.registry.models import ServiceMetadata


# Alerts
class AlertResponse(BaseModel):
    """Response model for a single alert."""

    id: str
    title: str
    description: str
    severity: AlertSeverity
    status: AlertStatus
    service: str
    source: str
    metadata: dict[str, Any]
    escalation_level: int
    acknowledged_by: str | None
    acknowledged_at: datetime | None
    resolved_by: str | None
    resolved_at: datetime | None
    muted_by: str | None
    muted_until: datetime | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: AlertRecord) -> "AlertResponse":
        return cls(
            id=record.id,
            title=record.title,
            description=record.description,
            severity=record.alert_severity,
            status=record.alert_status,
            service=record.service,
            source=record.source,
            metadata=AlertMetadata.from_dict(record.alert_metadata).to_dict(),
            escalation_level=record.escalation_level,
            acknowledged_by=record.acknowledged_by,
            acknowledged_at=record.acknowledged_at,
            resolved_by=record.resolved_by,
            resolved_at=record.resolved_at,
            muted_by=record.muted_by,
            muted_until=record.muted_until,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class AlertListResponse(BaseModel):
    """Response model for paginated alert list."""

    alerts: list[AlertResponse]
    total: int
    page: int
    limit: int
    pages: int


class AlertCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    severity: AlertSeverity
    service: str = Field(min_length=1, max_length=100)
    source: str | None = None
    metadata: dict[str, Any] | None = None


class ActorRequest(BaseModel):
    actor: str = Field(default="system", min_length=1, max_length=100)


class MuteRequest(ActorRequest):
    until: datetime | None = None


class BulkRequest(ActorRequest):
    # Shape is checked by the lifecycle manager so malformed lists map to 400
    alert_ids: Any = None


class BulkResponse(BaseModel):
    count: int
    requested: int


# Services
class ServiceMetricsResponse(BaseModel):
    response_time_ms: float
    error_rate: float
    uptime: float
    last_updated: datetime | None


class ServiceResponse(BaseModel):
    """Response model for a registered service."""

    id: str
    name: str
    display_name: str | None
    description: str | None
    url: str
    health_check_endpoint: str | None
    type: str
    category: str
    environment: str
    tags: list[str]
    critical: bool
    timeout_seconds: float
    retry_attempts: int
    check_interval_seconds: int
    is_monitored: bool
    alert_on_failure: bool
    alert_threshold: int
    status: ServiceStatus
    metrics: ServiceMetricsResponse
    last_health_check: datetime | None
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ServiceRecord) -> "ServiceResponse":
        return cls(
            id=record.id,
            name=record.name,
            display_name=record.display_name,
            description=record.description,
            url=record.url,
            health_check_endpoint=record.health_check_endpoint,
            type=record.type,
            category=record.category,
            environment=record.environment,
            tags=list(record.tags or []),
            critical=record.critical,
            timeout_seconds=record.timeout_seconds,
            retry_attempts=record.retry_attempts,
            check_interval_seconds=record.check_interval_seconds,
            is_monitored=record.is_monitored,
            alert_on_failure=record.alert_on_failure,
            alert_threshold=record.alert_threshold,
            status=record.service_status,
            metrics=ServiceMetricsResponse(
                response_time_ms=record.response_time_ms,
                error_rate=record.error_rate,
                uptime=record.uptime,
                last_updated=record.metrics_updated_at,
            ),
            last_health_check=record.last_health_check,
            metadata=ServiceMetadata.from_dict(record.service_metadata).to_dict(),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class ServiceCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    url: str = Field(min_length=1, max_length=500)
    health_check_endpoint: str | None = None
    display_name: str | None = None
    description: str | None = None
    type: ServiceType = ServiceType.API
    category: str = "api"
    environment: Environment = Environment.DEVELOPMENT
    tags: list[str] = Field(default_factory=list)
    critical: bool = False
    timeout_seconds: float = Field(default=10.0, gt=0)
    retry_attempts: int = Field(default=2, ge=0, le=10)
    check_interval_seconds: int = Field(default=300, ge=1)
    is_monitored: bool = True
    alert_on_failure: bool = True
    alert_threshold: int = Field(default=3, ge=1)
    metadata: dict[str, Any] | None = None


class ServiceUpdateRequest(BaseModel):
    """Configuration changes. Only fields present in the body are applied."""

    display_name: str | None = None
    description: str | None = None
    url: str | None = None
    health_check_endpoint: str | None = None
    type: ServiceType | None = None
    category: str | None = None
    environment: Environment | None = None
    tags: list[str] | None = None
    critical: bool | None = None
    timeout_seconds: float | None = Field(default=None, gt=0)
    retry_attempts: int | None = Field(default=None, ge=0, le=10)
    check_interval_seconds: int | None = Field(default=None, ge=1)
    is_monitored: bool | None = None
    alert_on_failure: bool | None = None
    alert_threshold: int | None = Field(default=None, ge=1)
    metadata: dict[str, Any] | None = None


class StatusOverrideRequest(BaseModel):
    status: ServiceStatus


class ProbeResultResponse(BaseModel):
    service: str
    status: ServiceStatus
    latency_ms: float
    status_code: int | None
    error: str | None
    attempts: int
    checked_at: datetime

    @classmethod
    def from_result(cls, result: ProbeResult) -> "ProbeResultResponse":
        return cls(
            service=result.service,
            status=result.status,
            latency_ms=result.latency_ms,
            status_code=result.status_code,
            error=result.error,
            attempts=result.attempts,
            checked_at=result.checked_at,
        )


# Metrics
class MetricResponse(BaseModel):
    id: int
    service: str
    name: str
    value: float
    unit: str
    timestamp: datetime
    tags: dict[str, str]

    @classmethod
    def from_record(cls, record: MetricSampleRecord) -> "MetricResponse":
        return cls(
            id=record.id,
            service=record.service,
            name=record.name,
            value=record.value,
            unit=record.unit,
            timestamp=record.timestamp,
            tags=dict(record.tags or {}),
        )


class MetricCreateRequest(BaseModel):
    service: str = Field(min_length=1, max_length=100)
    name: str = Field(min_length=1, max_length=100)
    value: float
    unit: str = ""
    timestamp: datetime | None = None
    tags: dict[str, str] = Field(default_factory=dict)


class MetricBatchRequest(BaseModel):
    metrics: list[MetricCreateRequest]
