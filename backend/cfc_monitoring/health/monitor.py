"""Probe cycle: probe monitored services and record the outcome.

Each result is written to the registry as soon as its probe finishes.
Metric samples are appended and transitions published afterwards, so a
storage fault for one service never blocks the others.
"""

import asyncio
import logging
from dataclasses import dataclass

from cfc_monitoring.errors import MonitoringError
from cfc_monitoring.health.events import TransitionBus
from cfc_monitoring.health.models import ProbeResult, ServiceTransition, TransitionKind
from cfc_monitoring.health.prober import HealthProber
from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.models import MetricSample
from cfc_monitoring.models.metric import MetricName
from cfc_monitoring.models.service import ServiceRecord, ServiceStatus
from cfc_monitoring.registry.service import ServiceRegistry

logger = logging.getLogger(__name__)


def detect_transition(
    previous: ServiceStatus,
    record: ServiceRecord,
    result: ProbeResult,
) -> ServiceTransition | None:
    """Decide whether a probe changed the service in a way worth publishing.

    Args:
        previous: Status before the probe was applied
        record: Service row after the probe was applied
        result: The probe outcome

    Returns:
        ServiceTransition, or None when nothing notable happened
    """
    current = result.status
    kind = None

    if current == ServiceStatus.UNHEALTHY and previous != ServiceStatus.UNHEALTHY:
        kind = TransitionKind.BECAME_UNHEALTHY
    elif current == ServiceStatus.DEGRADED and record.degraded_streak == max(
        record.alert_threshold, 1
    ):
        # Fires once per streak, when it reaches the threshold
        kind = TransitionKind.SUSTAINED_DEGRADED
    elif current == ServiceStatus.HEALTHY and previous in (
        ServiceStatus.UNHEALTHY,
        ServiceStatus.DEGRADED,
    ):
        kind = TransitionKind.RECOVERED

    if kind is None:
        return None

    return ServiceTransition(
        kind=kind,
        service=record.name,
        previous=previous,
        current=current,
        degraded_streak=record.degraded_streak,
        critical=record.critical,
        alert_on_failure=record.alert_on_failure,
        result=result,
        response_time_ms=record.response_time_ms,
        error_rate=record.error_rate,
        uptime=record.uptime,
    )


@dataclass
class CycleReport:
    """Summary of one probe cycle."""

    probed: int = 0
    healthy: int = 0
    degraded: int = 0
    unhealthy: int = 0
    transitions: int = 0
    write_failures: int = 0


class HealthMonitor:
    """Runs probe cycles over the monitored services."""

    def __init__(
        self,
        registry: ServiceRegistry,
        prober: HealthProber,
        bus: TransitionBus,
        metrics: MetricsAggregator | None = None,
    ) -> None:
        self._registry = registry
        self._prober = prober
        self._bus = bus
        self._metrics = metrics
        # Probes run concurrently, registry writes one at a time
        self._write_lock = asyncio.Lock()

    async def run_cycle(self) -> CycleReport:
        """Probe every monitored service once.

        Returns:
            CycleReport with verdict and transition counts
        """
        services = await self._registry.monitored()
        report = CycleReport()
        pending: list[ServiceTransition] = []

        async def on_result(result: ProbeResult) -> None:
            try:
                transition = await self._apply(result)
            except MonitoringError as e:
                report.write_failures += 1
                logger.error("Failed to record probe for %s: %s", result.service, e)
                return
            if transition is not None:
                pending.append(transition)

        results = await self._prober.probe_all(services, on_result=on_result)

        for result in results:
            report.probed += 1
            if result.status == ServiceStatus.HEALTHY:
                report.healthy += 1
            elif result.status == ServiceStatus.DEGRADED:
                report.degraded += 1
            else:
                report.unhealthy += 1

        if self._metrics is not None and results:
            await self._record_samples(results)

        await self._publish(pending)
        report.transitions = len(pending)

        logger.debug(
            "Probe cycle done: %d probed, %d healthy, %d degraded, %d unhealthy",
            report.probed,
            report.healthy,
            report.degraded,
            report.unhealthy,
        )
        return report

    async def check(self, name: str) -> ProbeResult:
        """Probe one service now and record the outcome like a cycle would.

        Raises:
            NotFoundError: If the service is not registered
        """
        service = await self._registry.get(name)
        result = await self._prober.probe(service)
        transition = await self._apply(result)
        if self._metrics is not None:
            await self._record_samples([result])
        await self._publish([transition] if transition is not None else [])
        return result

    async def _apply(self, result: ProbeResult) -> ServiceTransition | None:
        async with self._write_lock:
            previous, record = await self._registry.apply_probe(
                result.service, result.status, result.latency_ms, result.checked_at
            )
        return detect_transition(previous, record, result)

    async def _publish(self, transitions: list[ServiceTransition]) -> None:
        for transition in transitions:
            log = logger.info if transition.kind == TransitionKind.RECOVERED else logger.warning
            log(
                "Service %s %s: %s -> %s",
                transition.service,
                transition.kind.value,
                transition.previous.value,
                transition.current.value,
            )
            await self._bus.publish(transition)

    async def _record_samples(self, results: list[ProbeResult]) -> None:
        samples = []
        for result in results:
            samples.append(
                MetricSample(
                    service=result.service,
                    name=MetricName.RESPONSE_TIME.value,
                    value=result.latency_ms,
                    unit="ms",
                    timestamp=result.checked_at,
                )
            )
            samples.append(
                MetricSample(
                    service=result.service,
                    name=MetricName.ERROR_COUNT.value,
                    value=0.0 if result.succeeded else 1.0,
                    unit="count",
                    timestamp=result.checked_at,
                )
            )
        try:
            await self._metrics.record_batch(samples)
        except MonitoringError as e:
            logger.error("Failed to record probe metrics: %s", e)
