"""Health probing models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from cfc_monitoring.models.service import ServiceStatus


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of probing a single service.

    Attributes:
        service: Name of the probed service
        status: Verdict (healthy, degraded or unhealthy)
        latency_ms: Elapsed time of the final attempt
        checked_at: When the final attempt completed
        attempts: Number of requests made, retries included
        status_code: HTTP status of the final attempt, None on error
        error: Error text of the final attempt, None if a response arrived
    """

    service: str
    status: ServiceStatus
    latency_ms: float
    checked_at: datetime
    attempts: int = 1
    status_code: int | None = None
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == ServiceStatus.HEALTHY


class TransitionKind(str, Enum):
    """Why a probe produced a transition event."""

    BECAME_UNHEALTHY = "became_unhealthy"
    SUSTAINED_DEGRADED = "sustained_degraded"
    RECOVERED = "recovered"


@dataclass(frozen=True)
class ServiceTransition:
    """Status change of a service worth telling subscribers about.

    Attributes:
        kind: Which rule fired
        service: Service name
        previous: Status before the probe
        current: Status after the probe
        degraded_streak: Consecutive degraded probes including this one
        critical: Whether the service is flagged critical
        alert_on_failure: Whether the service wants alerts
        result: The probe that caused the transition
        response_time_ms: Rolling latency after the probe
        error_rate: Rolling error rate after the probe
        uptime: Rolling uptime after the probe
    """

    kind: TransitionKind
    service: str
    previous: ServiceStatus
    current: ServiceStatus
    degraded_streak: int
    critical: bool
    alert_on_failure: bool
    result: ProbeResult
    response_time_ms: float = 0.0
    error_rate: float = 0.0
    uptime: float = 100.0
