"""Component wiring. Every component is built once and passed explicitly."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

import httpx
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from cfc_monitoring.alerts.escalation import EscalationJob, EscalationPolicy
from cfc_monitoring.alerts.repository import AlertRepository
from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.config import Settings
from cfc_monitoring.dashboard.score import ScoreThresholds
from cfc_monitoring.dashboard.service import DashboardService
from cfc_monitoring.db.database import build_engine, build_session_factory, create_tables
from cfc_monitoring.db.types import utcnow
from cfc_monitoring.health.events import TransitionBus
from cfc_monitoring.health.handlers import TransitionAlertHandler
from cfc_monitoring.health.monitor import HealthMonitor
from cfc_monitoring.health.prober import HealthProber
from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.repository import MetricRepository
from cfc_monitoring.metrics.resources import ResourceSampler
from cfc_monitoring.registry.repository import ServiceRepository
from cfc_monitoring.registry.rolling import RollingMetricsPolicy
from cfc_monitoring.registry.service import ServiceRegistry
from cfc_monitoring.scheduler import MonitoringScheduler

logger = logging.getLogger(__name__)


@dataclass
class MonitoringContainer:
    """All long-lived monitoring components."""

    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    registry: ServiceRegistry
    prober: HealthProber
    bus: TransitionBus
    monitor: HealthMonitor
    alerts: AlertLifecycleManager
    escalation: EscalationJob
    metrics: MetricsAggregator
    resources: ResourceSampler
    dashboard: DashboardService
    scheduler: MonitoringScheduler

    async def startup(self, start_scheduler: bool | None = None) -> None:
        """Create tables, seed default services and start background jobs.

        Args:
            start_scheduler: Overrides settings.probe_scheduler_enabled
        """
        await create_tables(self.engine)
        await self.registry.seed_defaults(self.settings)

        if start_scheduler is None:
            start_scheduler = self.settings.probe_scheduler_enabled
        if start_scheduler:
            self.scheduler.start()

    async def shutdown(self) -> None:
        self.scheduler.shutdown()
        await self.prober.aclose()
        await self.engine.dispose()
        logger.info("Monitoring components stopped")


def build_container(
    settings: Settings,
    http_client: httpx.AsyncClient | None = None,
    clock: Callable[[], datetime] = utcnow,
    resources: ResourceSampler | None = None,
) -> MonitoringContainer:
    """Construct every component from settings.

    Args:
        settings: Application settings
        http_client: Probe client, a default one is created if omitted
        clock: Time source shared by the alert manager, prober and metrics
        resources: Host resource sampler, a psutil-backed one if omitted
    """
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    registry = ServiceRegistry(
        ServiceRepository(session_factory),
        policy=RollingMetricsPolicy(
            alpha=settings.latency_ema_alpha,
            error_rate_step=settings.error_rate_step,
            uptime_success_step=settings.uptime_success_step,
            uptime_failure_step=settings.uptime_failure_step,
        ),
    )
    alerts = AlertLifecycleManager(
        AlertRepository(session_factory),
        max_escalation_level=settings.max_escalation_level,
        default_mute=timedelta(hours=settings.default_mute_hours),
        clock=clock,
    )
    metrics = MetricsAggregator(MetricRepository(session_factory), clock=clock)
    resources = resources or ResourceSampler(disk_path=settings.disk_path, clock=clock)

    prober = HealthProber(client=http_client, concurrency=settings.probe_concurrency, clock=clock)
    bus = TransitionBus()
    bus.subscribe(TransitionAlertHandler(alerts))
    monitor = HealthMonitor(registry, prober, bus, metrics=metrics)

    escalation = EscalationJob(alerts, EscalationPolicy(settings.escalation_rules))
    scheduler = MonitoringScheduler(
        monitor,
        probe_interval_seconds=settings.probe_interval_seconds,
        escalation=escalation if settings.escalation_enabled else None,
        escalation_interval_seconds=settings.escalation_check_interval_seconds,
    )

    dashboard = DashboardService(
        registry,
        alerts,
        metrics,
        resources,
        thresholds=ScoreThresholds(
            resource_threshold_percent=settings.resource_threshold_percent
        ),
    )

    return MonitoringContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        registry=registry,
        prober=prober,
        bus=bus,
        monitor=monitor,
        alerts=alerts,
        escalation=escalation,
        metrics=metrics,
        resources=resources,
        dashboard=dashboard,
        scheduler=scheduler,
    )
