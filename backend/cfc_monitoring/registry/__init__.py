"""Registry of monitored services."""

from cfc_monitoring.registry.catalog import default_catalog, environment_from_url
from cfc_monitoring.registry.models import (
    ServiceDefinition,
    ServiceFilter,
    ServiceMetadata,
    ServiceSummary,
)
from cfc_monitoring.registry.repository import ServiceRepository
from cfc_monitoring.registry.rolling import (
    RollingMetrics,
    RollingMetricsPolicy,
    update_rolling_metrics,
)
from cfc_monitoring.registry.service import ServiceRegistry

__all__ = [
    "RollingMetrics",
    "RollingMetricsPolicy",
    "ServiceDefinition",
    "ServiceFilter",
    "ServiceMetadata",
    "ServiceRegistry",
    "ServiceRepository",
    "ServiceSummary",
    "default_catalog",
    "environment_from_url",
    "update_rolling_metrics",
]
