"""Repository for monitored services.

Status and rolling metrics for one service are always written in a single
transaction. Writes from different services never share a transaction;
concurrent probes of the same service resolve as last-writer-wins.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from cfc_monitoring.db.repository import BaseRepository
from cfc_monitoring.db.types import utcnow
from cfc_monitoring.errors import NotFoundError, ValidationError
from cfc_monitoring.models.service import ServiceRecord, ServiceStatus
from cfc_monitoring.registry.models import ServiceDefinition, ServiceFilter, ServiceSummary
from cfc_monitoring.registry.rolling import (
    RollingMetrics,
    RollingMetricsPolicy,
    update_rolling_metrics,
)


# Columns an update may touch. Status and metrics are excluded.
CONFIG_FIELDS: frozenset[str] = frozenset(
    {
        "display_name",
        "description",
        "url",
        "health_check_endpoint",
        "type",
        "category",
        "environment",
        "tags",
        "critical",
        "timeout_seconds",
        "retry_attempts",
        "check_interval_seconds",
        "is_monitored",
        "alert_on_failure",
        "alert_threshold",
        "service_metadata",
    }
)


class ServiceRepository(BaseRepository):
    """Repository for service registry database operations."""

    async def create(self, definition: ServiceDefinition) -> ServiceRecord:
        """Insert a new service.

        Raises:
            ValidationError: If a service with the same name exists
        """
        now = utcnow()
        record = ServiceRecord(
            id=str(uuid4()),
            name=definition.name,
            display_name=definition.display_name,
            description=definition.description,
            url=definition.url,
            health_check_endpoint=definition.health_check_endpoint,
            type=definition.type.value,
            category=definition.category,
            environment=definition.environment.value,
            tags=list(definition.tags),
            critical=definition.critical,
            timeout_seconds=definition.timeout_seconds,
            retry_attempts=definition.retry_attempts,
            check_interval_seconds=definition.check_interval_seconds,
            is_monitored=definition.is_monitored,
            alert_on_failure=definition.alert_on_failure,
            alert_threshold=definition.alert_threshold,
            status=ServiceStatus.UNKNOWN.value,
            response_time_ms=0.0,
            error_rate=0.0,
            uptime=100.0,
            degraded_streak=0,
            service_metadata=definition.metadata.to_dict(),
            created_at=now,
            updated_at=now,
        )
        async with self.session("create_service") as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ValidationError(
                    f"Service '{definition.name}' already registered", field="name"
                ) from e
            await session.refresh(record)
        return record

    async def get_by_name(self, name: str) -> ServiceRecord | None:
        async with self.session("get_service") as session:
            result = await session.execute(select(ServiceRecord).where(ServiceRecord.name == name))
            return result.scalar_one_or_none()

    async def get_by_id(self, service_id: str) -> ServiceRecord | None:
        async with self.session("get_service") as session:
            result = await session.execute(
                select(ServiceRecord).where(ServiceRecord.id == service_id)
            )
            return result.scalar_one_or_none()

    async def find_all(self, filters: ServiceFilter | None = None) -> list[ServiceRecord]:
        """List services matching the filter, ordered by name."""
        filters = filters or ServiceFilter()
        query = select(ServiceRecord)

        if filters.status is not None:
            query = query.where(ServiceRecord.status == filters.status.value)
        if filters.environment is not None:
            query = query.where(ServiceRecord.environment == filters.environment.value)
        if filters.type is not None:
            query = query.where(ServiceRecord.type == filters.type.value)
        if filters.critical is not None:
            query = query.where(ServiceRecord.critical == filters.critical)
        if filters.monitored is not None:
            query = query.where(ServiceRecord.is_monitored == filters.monitored)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.where(
                or_(
                    ServiceRecord.name.ilike(pattern),
                    ServiceRecord.display_name.ilike(pattern),
                    ServiceRecord.description.ilike(pattern),
                )
            )

        async with self.session("list_services") as session:
            result = await session.execute(query.order_by(ServiceRecord.name))
            return list(result.scalars().all())

    async def update_config(self, name: str, changes: dict[str, Any]) -> ServiceRecord:
        """Update configuration columns of a service.

        Raises:
            ValidationError: If changes touch status, metrics or unknown fields
            NotFoundError: If the service does not exist
        """
        unknown = set(changes) - CONFIG_FIELDS
        if unknown:
            raise ValidationError(
                f"Fields not updatable: {', '.join(sorted(unknown))}", field=sorted(unknown)[0]
            )

        async with self.session("update_service") as session:
            result = await session.execute(select(ServiceRecord).where(ServiceRecord.name == name))
            record = result.scalar_one_or_none()
            if record is None:
                raise NotFoundError(f"Service '{name}' not found", entity="service", entity_id=name)

            for key, value in changes.items():
                setattr(record, key, value)
            record.updated_at = utcnow()

            await session.commit()
            await session.refresh(record)
            return record

    async def set_status(self, name: str, status: ServiceStatus) -> tuple[ServiceStatus, ServiceRecord]:
        """Administrative status override. Metrics are left untouched.

        Returns:
            Tuple of (previous_status, updated record)
        """
        async with self.session("override_service_status") as session:
            result = await session.execute(select(ServiceRecord).where(ServiceRecord.name == name))
            record = result.scalar_one_or_none()
            if record is None:
                raise NotFoundError(f"Service '{name}' not found", entity="service", entity_id=name)

            previous = ServiceStatus(record.status)
            record.status = status.value
            record.degraded_streak = 0
            record.updated_at = utcnow()

            await session.commit()
            await session.refresh(record)
            return previous, record

    async def apply_probe(
        self,
        name: str,
        status: ServiceStatus,
        latency_ms: float,
        checked_at: datetime,
        policy: RollingMetricsPolicy | None = None,
    ) -> tuple[ServiceStatus, ServiceRecord]:
        """Write one probe verdict and fold it into the rolling metrics.

        Status, metrics, last check and the degraded streak are updated in
        the same transaction.

        Returns:
            Tuple of (previous_status, updated record)
        """
        async with self.session("apply_probe") as session:
            result = await session.execute(
                select(ServiceRecord).where(ServiceRecord.name == name).with_for_update()
            )
            record = result.scalar_one_or_none()
            if record is None:
                raise NotFoundError(f"Service '{name}' not found", entity="service", entity_id=name)

            previous = ServiceStatus(record.status)
            current = RollingMetrics(
                response_time_ms=record.response_time_ms,
                error_rate=record.error_rate,
                uptime=record.uptime,
                last_updated=record.metrics_updated_at,
            )
            updated = update_rolling_metrics(
                current,
                latency_ms=latency_ms,
                success=status == ServiceStatus.HEALTHY,
                now=checked_at,
                policy=policy,
            )

            record.status = status.value
            record.response_time_ms = updated.response_time_ms
            record.error_rate = updated.error_rate
            record.uptime = updated.uptime
            record.metrics_updated_at = updated.last_updated
            record.last_health_check = checked_at
            record.degraded_streak = (
                record.degraded_streak + 1 if status == ServiceStatus.DEGRADED else 0
            )
            record.updated_at = utcnow()

            await session.commit()
            await session.refresh(record)
            return previous, record

    async def summary(self) -> ServiceSummary:
        """Counts by status plus average uptime and response time."""
        async with self.session("service_summary") as session:
            status_rows = (
                await session.execute(
                    select(ServiceRecord.status, func.count()).group_by(ServiceRecord.status)
                )
            ).all()
            totals = (
                await session.execute(
                    select(
                        func.count(),
                        func.avg(ServiceRecord.uptime),
                        func.avg(ServiceRecord.response_time_ms),
                    )
                )
            ).one()
            critical_total = (
                await session.execute(
                    select(func.count()).where(ServiceRecord.critical.is_(True))
                )
            ).scalar() or 0

        by_status = {status.value: 0 for status in ServiceStatus}
        for status, count in status_rows:
            by_status[status] = count

        return ServiceSummary(
            total=totals[0] or 0,
            by_status=by_status,
            critical_total=critical_total,
            average_uptime=float(totals[1] or 0.0),
            average_response_time_ms=float(totals[2] or 0.0),
        )
