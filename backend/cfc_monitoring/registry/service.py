"""Service registry: catalog of monitored targets and their health state."""

import logging
from datetime import datetime
from typing import Any

from cfc_monitoring.config import Settings
from cfc_monitoring.errors import NotFoundError, ValidationError
from cfc_monitoring.models.service import ServiceRecord, ServiceStatus
from cfc_monitoring.registry.catalog import default_catalog
from cfc_monitoring.registry.models import (
    ServiceDefinition,
    ServiceFilter,
    ServiceMetadata,
    ServiceSummary,
)
from cfc_monitoring.registry.repository import ServiceRepository
from cfc_monitoring.registry.rolling import RollingMetricsPolicy

logger = logging.getLogger(__name__)

# Configuration fields that may not be set to None
NON_NULL_FIELDS = frozenset(
    {
        "url",
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
    }
)


def _check_health_check_limits(timeout_seconds: float | None, retry_attempts: int | None) -> None:
    if timeout_seconds is not None and timeout_seconds <= 0:
        raise ValidationError("timeout_seconds must be positive", field="timeout_seconds")
    if retry_attempts is not None and retry_attempts < 0:
        raise ValidationError("retry_attempts must not be negative", field="retry_attempts")


class ServiceRegistry:
    """Registration, lookup and state updates for monitored services.

    Usage:
        registry = ServiceRegistry(ServiceRepository(session_factory))
        await registry.register(ServiceDefinition(name="notify", url="http://notify:7002"))
        service = await registry.get("notify")
    """

    def __init__(
        self,
        repository: ServiceRepository,
        policy: RollingMetricsPolicy | None = None,
    ):
        self._repo = repository
        self._policy = policy or RollingMetricsPolicy()

    @property
    def policy(self) -> RollingMetricsPolicy:
        return self._policy

    async def register(self, definition: ServiceDefinition) -> ServiceRecord:
        """Add a service. Status starts as unknown with neutral metrics.

        Raises:
            ValidationError: If the name or URL is empty or the name is taken
        """
        if not definition.name or not definition.name.strip():
            raise ValidationError("Service name is required", field="name")
        if not definition.url or not definition.url.strip():
            raise ValidationError("Service url is required", field="url")
        _check_health_check_limits(definition.timeout_seconds, definition.retry_attempts)

        record = await self._repo.create(definition)
        logger.info("Registered service %s (%s)", record.name, record.url)
        return record

    async def get(self, name: str) -> ServiceRecord:
        """Fetch a service by name.

        Raises:
            NotFoundError: If no such service is registered
        """
        record = await self._repo.get_by_name(name)
        if record is None:
            raise NotFoundError(f"Service '{name}' not found", entity="service", entity_id=name)
        return record

    async def get_by_id(self, service_id: str) -> ServiceRecord:
        record = await self._repo.get_by_id(service_id)
        if record is None:
            raise NotFoundError(
                f"Service '{service_id}' not found", entity="service", entity_id=service_id
            )
        return record

    async def list_services(self, filters: ServiceFilter | None = None) -> list[ServiceRecord]:
        return await self._repo.find_all(filters)

    async def monitored(self) -> list[ServiceRecord]:
        """Services the prober should check."""
        return await self._repo.find_all(ServiceFilter(monitored=True))

    async def update(self, name: str, changes: dict[str, Any]) -> ServiceRecord:
        """Update configuration fields. Status and metrics are not updatable here.

        ``metadata`` may be given as a ServiceMetadata or a plain dict.
        """
        changes = dict(changes)
        if "metadata" in changes:
            metadata = changes.pop("metadata")
            if not isinstance(metadata, ServiceMetadata):
                metadata = ServiceMetadata.from_dict(metadata)
            changes["service_metadata"] = metadata.to_dict()
        nulled = sorted(k for k in NON_NULL_FIELDS if k in changes and changes[k] is None)
        if nulled:
            raise ValidationError(f"Fields cannot be null: {', '.join(nulled)}", field=nulled[0])
        _check_health_check_limits(changes.get("timeout_seconds"), changes.get("retry_attempts"))
        for key in ("type", "environment"):
            if key in changes and hasattr(changes[key], "value"):
                changes[key] = changes[key].value

        record = await self._repo.update_config(name, changes)
        logger.info("Updated service %s: %s", name, ", ".join(sorted(changes)))
        return record

    async def override_status(self, name: str, status: ServiceStatus) -> ServiceRecord:
        """Administrative status override. Rolling metrics are left as they are."""
        previous, record = await self._repo.set_status(name, status)
        logger.warning(
            "Service %s status overridden: %s -> %s", name, previous.value, status.value
        )
        return record

    async def apply_probe(
        self,
        name: str,
        status: ServiceStatus,
        latency_ms: float,
        checked_at: datetime,
    ) -> tuple[ServiceStatus, ServiceRecord]:
        """Record a probe verdict. Returns (previous_status, updated record)."""
        return await self._repo.apply_probe(
            name, status, latency_ms, checked_at, policy=self._policy
        )

    async def summary(self) -> ServiceSummary:
        return await self._repo.summary()

    async def seed_defaults(self, settings: Settings) -> list[ServiceRecord]:
        """Register catalog entries that are not registered yet.

        Existing services are left untouched so operator edits survive restarts.
        """
        created = []
        for definition in default_catalog(settings):
            if await self._repo.get_by_name(definition.name) is not None:
                continue
            created.append(await self.register(definition))
        if created:
            logger.info("Seeded %d default services", len(created))
        return created
