"""Health probing of registered services."""

from cfc_monitoring.health.events import TransitionBus, TransitionHandler
from cfc_monitoring.health.handlers import TransitionAlertHandler
from cfc_monitoring.health.models import ProbeResult, ServiceTransition, TransitionKind
from cfc_monitoring.health.monitor import CycleReport, HealthMonitor, detect_transition
from cfc_monitoring.health.prober import HealthProber, classify_status_code

__all__ = [
    "CycleReport",
    "HealthMonitor",
    "HealthProber",
    "ProbeResult",
    "ServiceTransition",
    "TransitionAlertHandler",
    "TransitionBus",
    "TransitionHandler",
    "TransitionKind",
    "classify_status_code",
    "detect_transition",
]
