"""Composite system status and dashboard read model."""

from cfc_monitoring.dashboard.score import (
    ScoreFactor,
    ScoreThresholds,
    SystemHealthStatus,
    SystemStatusSnapshot,
    classify_score,
    compute_system_status,
)
from cfc_monitoring.dashboard.service import DashboardData, DashboardService, SystemStatusView

__all__ = [
    "DashboardData",
    "DashboardService",
    "ScoreFactor",
    "ScoreThresholds",
    "SystemHealthStatus",
    "SystemStatusSnapshot",
    "SystemStatusView",
    "classify_score",
    "compute_system_status",
]
