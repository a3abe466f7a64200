from cfc_monitoring.models.alert import AlertRecord, AlertSeverity, AlertStatus
from cfc_monitoring.models.metric import MetricName, MetricSampleRecord
from cfc_monitoring.models.service import (
    Environment,
    ServiceRecord,
    ServiceStatus,
    ServiceType,
)

__all__ = [
    "AlertRecord",
    "AlertSeverity",
    "AlertStatus",
    "Environment",
    "MetricName",
    "MetricSampleRecord",
    "ServiceRecord",
    "ServiceStatus",
    "ServiceType",
]
