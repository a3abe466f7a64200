"""Default transition subscriber: turn service failures into alerts."""

import logging

from cfc_monitoring.alerts.models import AlertMetadata
from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.health.models import ServiceTransition, TransitionKind
from cfc_monitoring.models.alert import AlertSeverity

logger = logging.getLogger(__name__)

ALERT_SOURCE = "health-prober"


def severity_for(transition: ServiceTransition) -> AlertSeverity | None:
    """Alert severity for a transition, None when no alert is warranted."""
    if transition.kind == TransitionKind.BECAME_UNHEALTHY:
        return AlertSeverity.CRITICAL if transition.critical else AlertSeverity.HIGH
    if transition.kind == TransitionKind.SUSTAINED_DEGRADED:
        return AlertSeverity.MEDIUM
    return None


class TransitionAlertHandler:
    """Asks the lifecycle manager for an alert on failure transitions.

    Recoveries are only logged. Services with alert_on_failure disabled
    never get alerts.
    """

    def __init__(self, manager: AlertLifecycleManager) -> None:
        self._manager = manager

    async def __call__(self, transition: ServiceTransition) -> None:
        if transition.kind == TransitionKind.RECOVERED:
            logger.info(
                "Service %s recovered from %s", transition.service, transition.previous.value
            )
            return
        if not transition.alert_on_failure:
            return

        severity = severity_for(transition)
        if severity is None:
            return

        result = transition.result
        if transition.kind == TransitionKind.BECAME_UNHEALTHY:
            title = f"Service {transition.service} is unhealthy"
            detail = result.error or f"HTTP {result.status_code}"
            description = (
                f"Health check failed after {result.attempts} attempt(s): {detail}. "
                f"Previous status: {transition.previous.value}."
            )
        else:
            title = f"Service {transition.service} is degraded"
            description = (
                f"{transition.degraded_streak} consecutive degraded health checks "
                f"(last HTTP {result.status_code})."
            )

        metadata = AlertMetadata(
            current_value=result.latency_ms,
            response_time_ms=transition.response_time_ms,
            error_rate=transition.error_rate,
            uptime=transition.uptime,
            status_code=result.status_code,
            previous_status=transition.previous.value,
            extra={"kind": transition.kind.value, "attempts": result.attempts},
        )
        if result.error:
            metadata.extra["error"] = result.error

        await self._manager.create(
            title=title,
            description=description,
            severity=severity,
            service=transition.service,
            source=ALERT_SOURCE,
            metadata=metadata,
        )
