# backend/tests/api/test_dashboard_api.py
"""Tests for Dashboard API endpoints."""

import pytest

from cfc_monitoring.models.service import ServiceStatus
from cfc_monitoring.registry.models import ServiceDefinition


class TestDashboardApi:
    """System status and overview endpoints."""

    @pytest.mark.asyncio
    async def test_status_of_empty_system(self, client):
        response = await client.get("/api/dashboard/status")

        data = response.json()["data"]
        assert data["overall_status"] == "healthy"
        assert data["overall_score"] == 100
        assert data["factors"] == []
        assert data["total_services"] == 0
        assert data["system_resources"]["cpu_percent"] == 10.0

    @pytest.mark.asyncio
    async def test_status_with_unhealthy_service_and_alerts(self, client, container):
        await container.registry.register(
            ServiceDefinition(name="notify", url="http://notify.local")
        )
        await container.registry.override_status("notify", ServiceStatus.UNHEALTHY)
        for _ in range(3):
            await client.post(
                "/api/alerts",
                json={"title": "down", "severity": "high", "service": "notify"},
            )

        response = await client.get("/api/dashboard/status")

        data = response.json()["data"]
        assert data["overall_score"] == 75
        assert data["overall_status"] == "degraded"
        assert data["open_alerts"] == 3
        assert data["healthy_services"] == 0
        assert {f["name"] for f in data["factors"]} == {"unhealthy_services", "open_alerts"}

    @pytest.mark.asyncio
    async def test_overview(self, client, container):
        await container.registry.register(
            ServiceDefinition(name="notify", url="http://notify.local")
        )
        await client.post(
            "/api/alerts", json={"title": "slow", "severity": "low", "service": "notify"}
        )

        response = await client.get("/api/dashboard")

        data = response.json()["data"]
        assert data["system_status"]["overall_score"] == 85
        assert [s["name"] for s in data["services"]] == ["notify"]
        assert data["alert_stats"]["total"] == 1
        assert len(data["recent_alerts"]) == 1
        assert "p95_response_time_ms" in data["performance"]

    @pytest.mark.asyncio
    async def test_services_health(self, client, container):
        await container.registry.register(
            ServiceDefinition(name="notify", url="http://notify.local")
        )

        response = await client.get("/api/dashboard/services")

        assert response.json()["data"][0]["service"] == "notify"
        assert response.json()["data"][0]["status"] == "unknown"


class TestHealthEndpoint:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "healthy"
