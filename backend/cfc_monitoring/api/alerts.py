# backend/cfc_monitoring/api/alerts.py
"""Alert endpoints: query, lifecycle transitions and bulk operations."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from cfc_monitoring.alerts.models import AlertFilter, AlertMetadata
from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.api.deps import get_alert_manager
from cfc_monitoring.api.envelope import ApiResponse, ok
from cfc_monitoring.api.schemas import (
    ActorRequest,
    AlertCreateRequest,
    AlertListResponse,
    AlertResponse,
    BulkRequest,
    BulkResponse,
    MuteRequest,
)
from cfc_monitoring.models.alert import AlertSeverity, AlertStatus

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("", response_model=ApiResponse)
async def list_alerts(
    severity: AlertSeverity | None = Query(default=None),
    status: AlertStatus | None = Query(default=None),
    service: str | None = Query(default=None),
    source: str | None = Query(default=None),
    search: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    """List alerts, most recent first.

    Args:
        severity: Filter by severity
        status: Filter by lifecycle status
        service: Filter by owning service
        source: Filter by detector
        search: Case-insensitive match over title, description and service
        start_date: Created at or after
        end_date: Created at or before
        page: 1-based page number
        limit: Page size (default 10, max 100)
    """
    result = await manager.list_alerts(
        AlertFilter(
            severity=severity,
            status=status,
            service=service,
            source=source,
            search=search,
            start=start_date,
            end=end_date,
        ),
        page=page,
        limit=limit,
    )
    return ok(
        AlertListResponse(
            alerts=[AlertResponse.from_record(alert) for alert in result.items],
            total=result.total,
            page=result.page,
            limit=result.limit,
            pages=result.pages,
        ),
        "Alerts retrieved successfully",
    )


@router.get("/stats", response_model=ApiResponse)
async def alert_stats(manager: AlertLifecycleManager = Depends(get_alert_manager)) -> ApiResponse:
    stats = await manager.stats()
    return ok(
        {
            "total": stats.total,
            "by_status": stats.by_status,
            "by_severity": stats.by_severity,
            "by_service": stats.by_service,
        },
        "Alert statistics retrieved successfully",
    )


@router.get("/recent", response_model=ApiResponse)
async def recent_alerts(
    limit: int = Query(default=20, ge=1, le=100),
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alerts = await manager.recent(limit)
    return ok([AlertResponse.from_record(alert) for alert in alerts], "Recent alerts retrieved")


@router.post("", response_model=ApiResponse, status_code=201)
async def create_alert(
    body: AlertCreateRequest,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.create(
        title=body.title,
        description=body.description,
        severity=body.severity,
        service=body.service,
        source=body.source,
        metadata=AlertMetadata.from_dict(body.metadata),
    )
    return ok(AlertResponse.from_record(alert), "Alert created successfully")


@router.post("/bulk/resolve", response_model=ApiResponse)
async def bulk_resolve(
    body: BulkRequest,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    """Resolve every eligible alert. Ineligible ids are skipped, not errors."""
    count = await manager.bulk_resolve(body.alert_ids, body.actor)
    return ok(
        BulkResponse(count=count, requested=len(body.alert_ids)),
        f"{count} alerts resolved",
    )


@router.post("/bulk/acknowledge", response_model=ApiResponse)
async def bulk_acknowledge(
    body: BulkRequest,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    count = await manager.bulk_acknowledge(body.alert_ids, body.actor)
    return ok(
        BulkResponse(count=count, requested=len(body.alert_ids)),
        f"{count} alerts acknowledged",
    )


@router.get("/{alert_id}", response_model=ApiResponse)
async def get_alert(
    alert_id: str,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.get(alert_id)
    return ok(AlertResponse.from_record(alert), "Alert retrieved successfully")


@router.post("/{alert_id}/acknowledge", response_model=ApiResponse)
async def acknowledge_alert(
    alert_id: str,
    body: ActorRequest,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.acknowledge(alert_id, body.actor)
    return ok(AlertResponse.from_record(alert), "Alert acknowledged")


@router.post("/{alert_id}/resolve", response_model=ApiResponse)
async def resolve_alert(
    alert_id: str,
    body: ActorRequest,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.resolve(alert_id, body.actor)
    return ok(AlertResponse.from_record(alert), "Alert resolved")


@router.post("/{alert_id}/mute", response_model=ApiResponse)
async def mute_alert(
    alert_id: str,
    body: MuteRequest,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.mute(alert_id, body.actor, until=body.until)
    return ok(AlertResponse.from_record(alert), "Alert muted")


@router.post("/{alert_id}/unmute", response_model=ApiResponse)
async def unmute_alert(
    alert_id: str,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.unmute(alert_id)
    return ok(AlertResponse.from_record(alert), "Alert unmuted")


@router.post("/{alert_id}/escalate", response_model=ApiResponse)
async def escalate_alert(
    alert_id: str,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    alert = await manager.escalate(alert_id)
    return ok(
        AlertResponse.from_record(alert), f"Alert at escalation level {alert.escalation_level}"
    )


@router.delete("/{alert_id}", response_model=ApiResponse)
async def delete_alert(
    alert_id: str,
    manager: AlertLifecycleManager = Depends(get_alert_manager),
) -> ApiResponse:
    await manager.delete(alert_id)
    return ok({"id": alert_id}, "Alert deleted")
