# backend/cfc_monitoring/api/deps.py
"""FastAPI dependencies resolving components from the app container."""

from fastapi import Request

from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.container import MonitoringContainer
from cfc_monitoring.dashboard.service import DashboardService
from cfc_monitoring.health.monitor import HealthMonitor
from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.resources import ResourceSampler
from cfc_monitoring.registry.service import ServiceRegistry


def get_container(request: Request) -> MonitoringContainer:
    return request.app.state.container


def get_alert_manager(request: Request) -> AlertLifecycleManager:
    return get_container(request).alerts


def get_registry(request: Request) -> ServiceRegistry:
    return get_container(request).registry


def get_monitor(request: Request) -> HealthMonitor:
    return get_container(request).monitor


def get_metrics(request: Request) -> MetricsAggregator:
    return get_container(request).metrics


def get_resources(request: Request) -> ResourceSampler:
    return get_container(request).resources


def get_dashboard(request: Request) -> DashboardService:
    return get_container(request).dashboard
