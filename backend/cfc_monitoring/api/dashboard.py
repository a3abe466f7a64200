# backend/cfc_monitoring/api/dashboard.py
"""Dashboard endpoints: composite system status and overview."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, Query

from cfc_monitoring.api.deps import get_dashboard
from cfc_monitoring.api.envelope import ApiResponse, ok
from cfc_monitoring.api.schemas import AlertResponse, ServiceResponse
from cfc_monitoring.dashboard.service import DashboardService, SystemStatusView

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _status_payload(view: SystemStatusView) -> dict[str, Any]:
    snapshot = view.snapshot
    return {
        "overall_status": snapshot.status.value,
        "overall_score": snapshot.score,
        "factors": [asdict(factor) for factor in snapshot.factors],
        "healthy_services": view.healthy_services,
        "total_services": len(view.services),
        "active_alerts": view.alerts.active,
        "open_alerts": view.alerts.open,
        "system_resources": asdict(view.resources),
    }


@router.get("", response_model=ApiResponse)
async def dashboard_overview(
    recent_limit: int = Query(default=10, ge=1, le=100),
    dashboard: DashboardService = Depends(get_dashboard),
) -> ApiResponse:
    data = await dashboard.dashboard(recent_limit=recent_limit)
    return ok(
        {
            "system_status": _status_payload(data.status),
            "services": [ServiceResponse.from_record(s) for s in data.status.services],
            "alert_stats": asdict(data.alert_stats),
            "recent_alerts": [AlertResponse.from_record(a) for a in data.recent_alerts],
            "performance": asdict(data.performance),
        },
        "Dashboard data retrieved successfully",
    )


@router.get("/status", response_model=ApiResponse)
async def system_status(dashboard: DashboardService = Depends(get_dashboard)) -> ApiResponse:
    view = await dashboard.system_status()
    return ok(_status_payload(view), "System status retrieved successfully")


@router.get("/services", response_model=ApiResponse)
async def services_health(dashboard: DashboardService = Depends(get_dashboard)) -> ApiResponse:
    view = await dashboard.system_status()
    return ok(
        [
            {
                "service": service.name,
                "status": service.status,
                "response_time_ms": service.response_time_ms,
                "uptime": service.uptime,
                "last_check": service.last_health_check,
            }
            for service in view.services
        ],
        "Services health retrieved successfully",
    )
