"""Read-only composition of registry, alerts and metrics for the dashboard."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from cfc_monitoring.alerts.models import AlertCounts, AlertStats
from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.dashboard.score import (
    ScoreThresholds,
    SystemStatusSnapshot,
    compute_system_status,
)
from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.models import PerformanceSummary
from cfc_monitoring.metrics.resources import ResourceSampler, ResourceSnapshot
from cfc_monitoring.models.alert import AlertRecord
from cfc_monitoring.models.service import ServiceRecord, ServiceStatus
from cfc_monitoring.registry.service import ServiceRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SystemStatusView:
    """System status plus the inputs it was computed from."""

    snapshot: SystemStatusSnapshot
    services: list[ServiceRecord]
    alerts: AlertCounts
    resources: ResourceSnapshot

    @property
    def healthy_services(self) -> int:
        return sum(1 for s in self.services if s.service_status == ServiceStatus.HEALTHY)


@dataclass(frozen=True)
class DashboardData:
    status: SystemStatusView
    alert_stats: AlertStats
    recent_alerts: list[AlertRecord]
    performance: PerformanceSummary


class DashboardService:
    """Thin facade over the monitoring components. Performs no writes."""

    def __init__(
        self,
        registry: ServiceRegistry,
        alerts: AlertLifecycleManager,
        metrics: MetricsAggregator,
        resources: ResourceSampler,
        thresholds: ScoreThresholds | None = None,
    ) -> None:
        self._registry = registry
        self._alerts = alerts
        self._metrics = metrics
        self._resources = resources
        self._thresholds = thresholds or ScoreThresholds()

    async def system_status(self) -> SystemStatusView:
        """Take snapshots of every input, then score them."""
        services = await self._registry.list_services()
        counts = await self._alerts.counts()
        resources = self._resources.sample()

        snapshot = compute_system_status(
            tuple(service.service_status for service in services),
            counts,
            resources,
            self._thresholds,
        )
        logger.debug("System status %s (score %d)", snapshot.status.value, snapshot.score)
        return SystemStatusView(
            snapshot=snapshot,
            services=services,
            alerts=counts,
            resources=resources,
        )

    async def dashboard(self, recent_limit: int = 10) -> DashboardData:
        status = await self.system_status()
        return DashboardData(
            status=status,
            alert_stats=await self._alerts.stats(),
            recent_alerts=await self._alerts.recent(recent_limit),
            performance=await self._metrics.performance(timedelta(hours=1)),
        )
