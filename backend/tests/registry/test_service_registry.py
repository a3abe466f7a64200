"""Tests for the service registry."""

from datetime import datetime, timedelta, timezone

import pytest

from cfc_monitoring.config import Settings
from cfc_monitoring.errors import NotFoundError, ValidationError
from cfc_monitoring.models.service import Environment, ServiceStatus, ServiceType
from cfc_monitoring.registry.catalog import default_catalog, environment_from_url
from cfc_monitoring.registry.models import ServiceDefinition, ServiceFilter, ServiceMetadata

CHECKED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_definition(name: str = "notify", **overrides) -> ServiceDefinition:
    defaults = {
        "url": f"http://{name}:7002",
        "health_check_endpoint": "/health",
    }
    defaults.update(overrides)
    return ServiceDefinition(name=name, **defaults)


class TestRegister:
    """Tests for registration and lookup."""

    @pytest.mark.asyncio
    async def test_new_service_starts_unknown_with_neutral_metrics(self, registry):
        record = await registry.register(make_definition())

        assert record.status == ServiceStatus.UNKNOWN.value
        assert record.response_time_ms == 0.0
        assert record.error_rate == 0.0
        assert record.uptime == 100.0
        assert record.metrics_updated_at is None
        assert record.probe_url == "http://notify:7002/health"

    @pytest.mark.asyncio
    async def test_duplicate_name_rejected(self, registry):
        await registry.register(make_definition())

        with pytest.raises(ValidationError) as exc_info:
            await registry.register(make_definition())

        assert exc_info.value.field == "name"

    @pytest.mark.asyncio
    async def test_empty_url_rejected(self, registry):
        with pytest.raises(ValidationError):
            await registry.register(make_definition(url=" "))

    @pytest.mark.asyncio
    async def test_get_unknown_raises_not_found(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            await registry.get("missing")

        assert exc_info.value.entity_id == "missing"

    @pytest.mark.asyncio
    async def test_get_by_id(self, registry):
        record = await registry.register(make_definition())

        fetched = await registry.get_by_id(record.id)

        assert fetched.name == "notify"

    @pytest.mark.asyncio
    async def test_metadata_round_trips_with_extra(self, registry):
        metadata = ServiceMetadata(owner="DevOps Team", sla="99.9%", extra={"pager": "ops"})
        await registry.register(make_definition(metadata=metadata))

        record = await registry.get("notify")

        restored = ServiceMetadata.from_dict(record.service_metadata)
        assert restored.owner == "DevOps Team"
        assert restored.extra == {"pager": "ops"}


class TestListAndUpdate:
    """Tests for filtering and configuration updates."""

    @pytest.mark.asyncio
    async def test_list_filters(self, registry):
        await registry.register(make_definition("management", critical=True, type=ServiceType.AUTH))
        await registry.register(make_definition("notify"))
        await registry.register(make_definition("chatbot", is_monitored=False))

        critical = await registry.list_services(ServiceFilter(critical=True))
        auth = await registry.list_services(ServiceFilter(type=ServiceType.AUTH))
        monitored = await registry.monitored()
        searched = await registry.list_services(ServiceFilter(search="CHAT"))

        assert [s.name for s in critical] == ["management"]
        assert [s.name for s in auth] == ["management"]
        assert [s.name for s in monitored] == ["management", "notify"]
        assert [s.name for s in searched] == ["chatbot"]

    @pytest.mark.asyncio
    async def test_update_configuration(self, registry):
        await registry.register(make_definition())

        record = await registry.update(
            "notify",
            {"timeout_seconds": 3.0, "environment": Environment.PRODUCTION, "metadata": {"owner": "X"}},
        )

        assert record.timeout_seconds == 3.0
        assert record.environment == "production"
        assert record.service_metadata["owner"] == "X"

    @pytest.mark.asyncio
    async def test_update_cannot_touch_status_or_metrics(self, registry):
        await registry.register(make_definition())

        with pytest.raises(ValidationError):
            await registry.update("notify", {"status": "healthy"})
        with pytest.raises(ValidationError):
            await registry.update("notify", {"uptime": 50.0})

        record = await registry.get("notify")
        assert record.status == ServiceStatus.UNKNOWN.value
        assert record.uptime == 100.0

    @pytest.mark.asyncio
    async def test_update_rejects_null_required_field(self, registry):
        await registry.register(make_definition())

        with pytest.raises(ValidationError):
            await registry.update("notify", {"url": None})

    @pytest.mark.asyncio
    async def test_update_rejects_bad_check_limits(self, registry):
        await registry.register(make_definition())

        with pytest.raises(ValidationError) as exc_info:
            await registry.update("notify", {"timeout_seconds": 0})
        assert exc_info.value.field == "timeout_seconds"
        with pytest.raises(ValidationError) as exc_info:
            await registry.update("notify", {"retry_attempts": -1})
        assert exc_info.value.field == "retry_attempts"

        service = await registry.get("notify")
        assert service.timeout_seconds > 0
        assert service.retry_attempts >= 0

    @pytest.mark.asyncio
    async def test_update_unknown_service(self, registry):
        with pytest.raises(NotFoundError):
            await registry.update("missing", {"critical": True})


class TestStatusWrites:
    """Tests for probe application and overrides."""

    @pytest.mark.asyncio
    async def test_apply_probe_updates_status_and_metrics_together(self, registry):
        await registry.register(make_definition())

        previous, record = await registry.apply_probe(
            "notify", ServiceStatus.HEALTHY, 500.0, CHECKED_AT
        )

        assert previous == ServiceStatus.UNKNOWN
        assert record.status == ServiceStatus.HEALTHY.value
        assert record.response_time_ms == pytest.approx(150.0)
        assert record.last_health_check == CHECKED_AT
        assert record.metrics_updated_at == CHECKED_AT

    @pytest.mark.asyncio
    async def test_degraded_streak_counts_and_resets(self, registry):
        await registry.register(make_definition())

        for _ in range(2):
            _, record = await registry.apply_probe(
                "notify", ServiceStatus.DEGRADED, 10.0, CHECKED_AT
            )
        assert record.degraded_streak == 2

        _, record = await registry.apply_probe("notify", ServiceStatus.HEALTHY, 10.0, CHECKED_AT)
        assert record.degraded_streak == 0

    @pytest.mark.asyncio
    async def test_metrics_timestamp_is_monotonic(self, registry):
        await registry.register(make_definition())
        later = CHECKED_AT + timedelta(minutes=1)

        await registry.apply_probe("notify", ServiceStatus.HEALTHY, 10.0, later)
        _, record = await registry.apply_probe("notify", ServiceStatus.HEALTHY, 10.0, CHECKED_AT)

        assert record.metrics_updated_at == later

    @pytest.mark.asyncio
    async def test_override_status_keeps_metrics(self, registry):
        await registry.register(make_definition())
        await registry.apply_probe("notify", ServiceStatus.UNHEALTHY, 10.0, CHECKED_AT)
        before = await registry.get("notify")

        record = await registry.override_status("notify", ServiceStatus.STOPPED)

        assert record.status == ServiceStatus.STOPPED.value
        assert record.uptime == before.uptime
        assert record.error_rate == before.error_rate

    @pytest.mark.asyncio
    async def test_summary(self, registry):
        await registry.register(make_definition("a", critical=True))
        await registry.register(make_definition("b"))
        await registry.apply_probe("a", ServiceStatus.HEALTHY, 100.0, CHECKED_AT)
        await registry.apply_probe("b", ServiceStatus.UNHEALTHY, 300.0, CHECKED_AT)

        summary = await registry.summary()

        assert summary.total == 2
        assert summary.critical_total == 1
        assert summary.by_status["healthy"] == 1
        assert summary.by_status["unhealthy"] == 1
        assert summary.by_status["degraded"] == 0
        assert summary.average_response_time_ms == pytest.approx(60.0)


class TestDefaultCatalog:
    """Tests for default service seeding."""

    def test_environment_from_url(self):
        assert environment_from_url("http://localhost:7000") == Environment.DEVELOPMENT
        assert environment_from_url("http://127.0.0.1:7001") == Environment.DEVELOPMENT
        assert environment_from_url("https://staging.cfc.org") == Environment.STAGING
        assert environment_from_url("https://api.cfc.org") == Environment.PRODUCTION

    def test_catalog_covers_configured_backends(self):
        settings = Settings(_env_file=None)

        catalog = {definition.name: definition for definition in default_catalog(settings)}

        assert set(catalog) == {"management", "monitoring", "notify", "chatbot"}
        assert catalog["management"].critical is True
        assert catalog["management"].health_check_endpoint == "/api/management/health"
        assert catalog["notify"].critical is False
        assert catalog["chatbot"].environment == Environment.PRODUCTION

    def test_unconfigured_backend_skipped(self):
        settings = Settings(_env_file=None, chatbot_url="")

        names = [definition.name for definition in default_catalog(settings)]

        assert "chatbot" not in names

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, registry):
        settings = Settings(_env_file=None)

        first = await registry.seed_defaults(settings)
        second = await registry.seed_defaults(settings)

        assert len(first) == 4
        assert second == []
        assert len(await registry.list_services()) == 4
