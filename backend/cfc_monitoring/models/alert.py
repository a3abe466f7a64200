"""Alert model: a detected anomaly requiring human attention."""

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cfc_monitoring.db.database import Base
from cfc_monitoring.db.types import UTCDateTime, utcnow


class AlertSeverity(str, Enum):
    """Alert severity. Persisted literal values."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class AlertStatus(str, Enum):
    """Alert lifecycle state. Persisted literal values.

    open -> acknowledged -> resolved; open <-> muted; resolved is terminal.
    """

    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    MUTED = "muted"


class AlertRecord(Base):
    """Persisted alert row."""

    __tablename__ = "alerts"
    __table_args__ = (
        Index("idx_alerts_service_status", "service", "status"),
        Index("idx_alerts_severity_created", "severity", "created_at"),
        Index("idx_alerts_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str] = mapped_column(Text, default="")
    severity: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20), default=AlertStatus.OPEN.value)
    service: Mapped[str] = mapped_column(String(100))
    source: Mapped[str] = mapped_column(String(100), default="monitoring-service")
    alert_metadata: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, default=dict)

    escalation_level: Mapped[int] = mapped_column(Integer, default=0)

    acknowledged_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    acknowledged_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    muted_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    muted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    muted_until: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow)

    @property
    def alert_status(self) -> AlertStatus:
        return AlertStatus(self.status)

    @property
    def alert_severity(self) -> AlertSeverity:
        return AlertSeverity(self.severity)
