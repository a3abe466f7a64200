"""Alert lifecycle: creation, transitions, escalation and statistics."""

from cfc_monitoring.alerts.escalation import EscalationJob, EscalationPolicy
from cfc_monitoring.alerts.models import (
    AlertCounts,
    AlertFilter,
    AlertMetadata,
    AlertPage,
    AlertStats,
)
from cfc_monitoring.alerts.repository import AlertRepository
from cfc_monitoring.alerts.service import AlertLifecycleManager

__all__ = [
    "AlertCounts",
    "AlertFilter",
    "AlertLifecycleManager",
    "AlertMetadata",
    "AlertPage",
    "AlertRepository",
    "AlertStats",
    "EscalationJob",
    "EscalationPolicy",
]
