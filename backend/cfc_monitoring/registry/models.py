"""Service registry value objects."""

from dataclasses import dataclass, field
from typing import Any

from cfc_monitoring.models.service import Environment, ServiceStatus, ServiceType


@dataclass
class ServiceMetadata:
    """Typed service metadata with a small set of well-known fields.

    Anything else goes to ``extra`` so callers can extend it without
    losing the known fields' types.
    """

    owner: str | None = None
    department: str | None = None
    sla: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "department": self.department,
            "sla": self.sla,
            "extra": dict(self.extra),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "ServiceMetadata":
        if not data:
            return cls()
        known = {"owner", "department", "sla", "extra"}
        extra = dict(data.get("extra") or {})
        # Unknown top-level keys from older rows are folded into extra
        extra.update({k: v for k, v in data.items() if k not in known})
        return cls(
            owner=data.get("owner"),
            department=data.get("department"),
            sla=data.get("sla"),
            extra=extra,
        )


@dataclass
class ServiceDefinition:
    """Input for registering a monitored service."""

    name: str
    url: str
    health_check_endpoint: str | None = None
    display_name: str | None = None
    description: str | None = None
    type: ServiceType = ServiceType.API
    category: str = "api"
    environment: Environment = Environment.DEVELOPMENT
    tags: list[str] = field(default_factory=list)
    critical: bool = False
    timeout_seconds: float = 10.0
    retry_attempts: int = 2
    check_interval_seconds: int = 300
    is_monitored: bool = True
    alert_on_failure: bool = True
    alert_threshold: int = 3
    metadata: ServiceMetadata = field(default_factory=ServiceMetadata)


@dataclass
class ServiceFilter:
    """Filter for listing services. None means no constraint."""

    status: ServiceStatus | None = None
    environment: Environment | None = None
    type: ServiceType | None = None
    critical: bool | None = None
    monitored: bool | None = None
    search: str | None = None


@dataclass(frozen=True)
class ServiceSummary:
    """Aggregate view over the whole registry."""

    total: int
    by_status: dict[str, int]
    critical_total: int
    average_uptime: float
    average_response_time_ms: float
