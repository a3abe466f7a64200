"""Metric sample model: append-only time-series point."""

from datetime import datetime
from enum import Enum
from sqlalchemy import JSON, BigInteger, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cfc_monitoring.db.database import Base
from cfc_monitoring.db.types import UTCDateTime


class MetricName(str, Enum):
    """Well-known metric names."""

    RESPONSE_TIME = "response_time"
    REQUEST_COUNT = "request_count"
    ERROR_COUNT = "error_count"
    CPU_USAGE = "cpu_usage"
    MEMORY_USAGE = "memory_usage"
    DISK_USAGE = "disk_usage"
    UPTIME = "uptime"
    THROUGHPUT = "throughput"
    LATENCY = "latency"


class MetricSampleRecord(Base):
    """Immutable metric sample. Rows are never updated."""

    __tablename__ = "metric_samples"
    __table_args__ = (Index("idx_metric_samples_series", "service", "name", "timestamp"),)

    # SQLite only autoincrements INTEGER primary keys
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"), primary_key=True, autoincrement=True
    )
    service: Mapped[str] = mapped_column(String(100), index=True)
    name: Mapped[str] = mapped_column(String(100), index=True)
    value: Mapped[float] = mapped_column(Float)
    unit: Mapped[str] = mapped_column(String(20))
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, index=True)
    tags: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)
