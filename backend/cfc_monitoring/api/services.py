# backend/cfc_monitoring/api/services.py
"""Service registry endpoints and on-demand health checks."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from cfc_monitoring.api.deps import get_monitor, get_registry
from cfc_monitoring.api.envelope import ApiResponse, ok
from cfc_monitoring.api.schemas import (
    ProbeResultResponse,
    ServiceCreateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
    StatusOverrideRequest,
)
from cfc_monitoring.health.monitor import HealthMonitor
from cfc_monitoring.models.service import Environment, ServiceStatus, ServiceType
from cfc_monitoring.registry.models import ServiceDefinition, ServiceFilter, ServiceMetadata
from cfc_monitoring.registry.service import ServiceRegistry

router = APIRouter(prefix="/api/services", tags=["services"])


@router.get("", response_model=ApiResponse)
async def list_services(
    status: ServiceStatus | None = Query(default=None),
    environment: Environment | None = Query(default=None),
    type: ServiceType | None = Query(default=None),
    critical: bool | None = Query(default=None),
    monitored: bool | None = Query(default=None),
    search: str | None = Query(default=None),
    registry: ServiceRegistry = Depends(get_registry),
) -> ApiResponse:
    services = await registry.list_services(
        ServiceFilter(
            status=status,
            environment=environment,
            type=type,
            critical=critical,
            monitored=monitored,
            search=search,
        )
    )
    return ok(
        [ServiceResponse.from_record(service) for service in services],
        "Services retrieved successfully",
    )


@router.get("/summary", response_model=ApiResponse)
async def services_summary(registry: ServiceRegistry = Depends(get_registry)) -> ApiResponse:
    summary = await registry.summary()
    return ok(asdict(summary), "Service summary retrieved successfully")


@router.post("", response_model=ApiResponse, status_code=201)
async def register_service(
    body: ServiceCreateRequest,
    registry: ServiceRegistry = Depends(get_registry),
) -> ApiResponse:
    fields = body.model_dump(exclude={"metadata"})
    record = await registry.register(
        ServiceDefinition(**fields, metadata=ServiceMetadata.from_dict(body.metadata))
    )
    return ok(ServiceResponse.from_record(record), "Service registered successfully")


@router.post("/check", response_model=ApiResponse)
async def check_all_services(monitor: HealthMonitor = Depends(get_monitor)) -> ApiResponse:
    """Run one probe cycle over every monitored service now."""
    report = await monitor.run_cycle()
    return ok(asdict(report), f"Checked {report.probed} services")


@router.get("/{name}", response_model=ApiResponse)
async def get_service(name: str, registry: ServiceRegistry = Depends(get_registry)) -> ApiResponse:
    record = await registry.get(name)
    return ok(ServiceResponse.from_record(record), "Service retrieved successfully")


@router.patch("/{name}", response_model=ApiResponse)
async def update_service(
    name: str,
    body: ServiceUpdateRequest,
    registry: ServiceRegistry = Depends(get_registry),
) -> ApiResponse:
    record = await registry.update(name, body.model_dump(exclude_unset=True))
    return ok(ServiceResponse.from_record(record), "Service updated successfully")


@router.put("/{name}/status", response_model=ApiResponse)
async def override_service_status(
    name: str,
    body: StatusOverrideRequest,
    registry: ServiceRegistry = Depends(get_registry),
) -> ApiResponse:
    record = await registry.override_status(name, body.status)
    return ok(ServiceResponse.from_record(record), f"Service status set to {body.status.value}")


@router.post("/{name}/check", response_model=ApiResponse)
async def check_service(name: str, monitor: HealthMonitor = Depends(get_monitor)) -> ApiResponse:
    result = await monitor.check(name)
    return ok(ProbeResultResponse.from_result(result), f"Service {name} is {result.status.value}")
