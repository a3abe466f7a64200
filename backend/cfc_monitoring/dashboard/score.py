"""Composite system health score.

    score = 100
            - 10 per service not healthy
            - 5 per open alert
            - 10 per resource (cpu, memory, disk) above 90%

The score is not clamped; a negative score is a valid signal of severe
degradation. Classification: >= 90 healthy, >= 70 degraded, else unhealthy.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from cfc_monitoring.alerts.models import AlertCounts
from cfc_monitoring.metrics.resources import ResourceSnapshot
from cfc_monitoring.models.service import ServiceStatus


class SystemHealthStatus(str, Enum):
    """Overall system verdict."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class ScoreThresholds:
    """Penalties and classification cut-offs."""

    base_score: int = 100
    service_penalty: int = 10
    open_alert_penalty: int = 5
    resource_penalty: int = 10
    resource_threshold_percent: float = 90.0
    healthy_min: int = 90
    degraded_min: int = 70


@dataclass(frozen=True)
class ScoreFactor:
    """One penalty applied to the score.

    Attributes:
        name: unhealthy_services, open_alerts, cpu, memory or disk
        penalty: Points subtracted
        detail: Human-readable reason
    """

    name: str
    penalty: int
    detail: str


@dataclass(frozen=True)
class SystemStatusSnapshot:
    """Derived system status. Never persisted."""

    status: SystemHealthStatus
    score: int
    factors: tuple[ScoreFactor, ...]


def classify_score(score: int, thresholds: ScoreThresholds | None = None) -> SystemHealthStatus:
    thresholds = thresholds or ScoreThresholds()
    if score >= thresholds.healthy_min:
        return SystemHealthStatus.HEALTHY
    if score >= thresholds.degraded_min:
        return SystemHealthStatus.DEGRADED
    return SystemHealthStatus.UNHEALTHY


def compute_system_status(
    service_statuses: Iterable[ServiceStatus],
    alerts: AlertCounts,
    resources: ResourceSnapshot,
    thresholds: ScoreThresholds | None = None,
) -> SystemStatusSnapshot:
    """Combine service health, open alerts and resource usage into one verdict.

    Pure and deterministic: the inputs are snapshots taken by the caller.

    Args:
        service_statuses: Status of every registered service
        alerts: Alert counts by status
        resources: Host resource usage
        thresholds: Penalties and cut-offs, defaults to ScoreThresholds()

    Returns:
        SystemStatusSnapshot with the factors that lowered the score
    """
    thresholds = thresholds or ScoreThresholds()
    factors: list[ScoreFactor] = []

    not_healthy = sum(1 for status in service_statuses if status != ServiceStatus.HEALTHY)
    if not_healthy:
        factors.append(
            ScoreFactor(
                name="unhealthy_services",
                penalty=not_healthy * thresholds.service_penalty,
                detail=f"{not_healthy} service(s) not healthy",
            )
        )

    if alerts.open:
        factors.append(
            ScoreFactor(
                name="open_alerts",
                penalty=alerts.open * thresholds.open_alert_penalty,
                detail=f"{alerts.open} open alert(s)",
            )
        )

    for name, value in (
        ("cpu", resources.cpu_percent),
        ("memory", resources.memory_percent),
        ("disk", resources.disk_percent),
    ):
        if value > thresholds.resource_threshold_percent:
            factors.append(
                ScoreFactor(
                    name=name,
                    penalty=thresholds.resource_penalty,
                    detail=f"{name} usage {value:.1f}% above "
                    f"{thresholds.resource_threshold_percent:.0f}%",
                )
            )

    score = thresholds.base_score - sum(factor.penalty for factor in factors)
    return SystemStatusSnapshot(
        status=classify_score(score, thresholds),
        score=score,
        factors=tuple(factors),
    )
