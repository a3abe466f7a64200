"""Service model: a monitored target in the registry."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cfc_monitoring.db.database import Base
from cfc_monitoring.db.types import UTCDateTime, utcnow


class ServiceStatus(str, Enum):
    """Health verdict of a monitored service.

    The literal values are persisted and must stay stable.
    """

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
    STOPPED = "stopped"
    UNKNOWN = "unknown"


class ServiceType(str, Enum):
    """Declared category of a monitored service."""

    API = "api"
    DATABASE = "database"
    CACHE = "cache"
    MESSAGE_QUEUE = "message_queue"
    EXTERNAL = "external"
    INTERNAL = "internal"
    MONITORING = "monitoring"
    AUTH = "auth"
    FILE_STORAGE = "file_storage"
    GATEWAY = "gateway"


class Environment(str, Enum):
    """Deployment environment of a monitored service."""

    PRODUCTION = "production"
    STAGING = "staging"
    DEVELOPMENT = "development"
    TESTING = "testing"


class ServiceRecord(Base):
    """A monitored target.

    Status and the rolling metrics columns are written only by the health
    prober or an explicit administrative override.
    """

    __tablename__ = "services"
    __table_args__ = (
        Index("idx_services_status", "status"),
        Index("idx_services_environment", "environment"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    url: Mapped[str] = mapped_column(String(500))
    health_check_endpoint: Mapped[str | None] = mapped_column(String(200), nullable=True)
    type: Mapped[str] = mapped_column(String(30), default=ServiceType.API.value)
    category: Mapped[str] = mapped_column(String(50), default="api")
    environment: Mapped[str] = mapped_column(String(20), default=Environment.DEVELOPMENT.value)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list)

    # Probe configuration
    critical: Mapped[bool] = mapped_column(Boolean, default=False)
    timeout_seconds: Mapped[float] = mapped_column(Float, default=10.0)
    retry_attempts: Mapped[int] = mapped_column(Integer, default=2)
    check_interval_seconds: Mapped[int] = mapped_column(Integer, default=300)
    is_monitored: Mapped[bool] = mapped_column(Boolean, default=True)
    alert_on_failure: Mapped[bool] = mapped_column(Boolean, default=True)
    alert_threshold: Mapped[int] = mapped_column(Integer, default=3)

    # Mutable health state
    status: Mapped[str] = mapped_column(String(20), default=ServiceStatus.UNKNOWN.value)
    response_time_ms: Mapped[float] = mapped_column(Float, default=0.0)
    error_rate: Mapped[float] = mapped_column(Float, default=0.0)
    uptime: Mapped[float] = mapped_column(Float, default=100.0)
    metrics_updated_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    last_health_check: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    degraded_streak: Mapped[int] = mapped_column(Integer, default=0)

    service_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    @property
    def service_status(self) -> ServiceStatus:
        return ServiceStatus(self.status)

    @property
    def probe_url(self) -> str:
        """Full URL the prober should call."""
        if not self.health_check_endpoint:
            return self.url
        return self.url.rstrip("/") + "/" + self.health_check_endpoint.lstrip("/")
