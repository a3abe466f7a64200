"""Alert value objects: typed metadata, filters, pages and statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cfc_monitoring.models.alert import AlertRecord, AlertSeverity, AlertStatus

_KNOWN_METADATA = (
    "current_value",
    "threshold",
    "response_time_ms",
    "error_rate",
    "uptime",
    "status_code",
    "previous_status",
)


@dataclass
class AlertMetadata:
    """Metrics snapshot attached to an alert.

    Well-known fields are typed. Anything else goes to ``extra``.
    """

    current_value: float | None = None
    threshold: float | None = None
    response_time_ms: float | None = None
    error_rate: float | None = None
    uptime: float | None = None
    status_code: int | None = None
    previous_status: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize, omitting unset well-known fields."""
        data: dict[str, Any] = {
            key: getattr(self, key) for key in _KNOWN_METADATA if getattr(self, key) is not None
        }
        if self.extra:
            data["extra"] = dict(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AlertMetadata":
        if not data:
            return cls()
        extra = dict(data.get("extra") or {})
        extra.update(
            {k: v for k, v in data.items() if k not in _KNOWN_METADATA and k != "extra"}
        )
        return cls(**{key: data.get(key) for key in _KNOWN_METADATA}, extra=extra)


@dataclass
class AlertFilter:
    """Filter for listing alerts. None means no constraint.

    ``search`` is a case-insensitive substring match over title,
    description and service.
    """

    severity: AlertSeverity | None = None
    status: AlertStatus | None = None
    service: str | None = None
    source: str | None = None
    search: str | None = None
    start: datetime | None = None
    end: datetime | None = None


@dataclass
class AlertPage:
    """One page of alerts, newest first."""

    items: list[AlertRecord]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return (self.total + self.limit - 1) // self.limit


@dataclass(frozen=True)
class AlertCounts:
    """Alert counts by lifecycle status."""

    open: int = 0
    acknowledged: int = 0
    muted: int = 0
    resolved: int = 0

    @property
    def total(self) -> int:
        return self.open + self.acknowledged + self.muted + self.resolved

    @property
    def active(self) -> int:
        """Alerts not yet resolved."""
        return self.open + self.acknowledged + self.muted


@dataclass(frozen=True)
class AlertStats:
    """Totals by status, severity and service."""

    total: int
    by_status: dict[str, int]
    by_severity: dict[str, int]
    by_service: dict[str, int]
