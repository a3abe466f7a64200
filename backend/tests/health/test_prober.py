"""Tests for the HTTP health prober."""

import asyncio
from types import SimpleNamespace

import httpx
import pytest

from cfc_monitoring.health.prober import HealthProber, classify_status_code
from cfc_monitoring.models.service import ServiceStatus


def make_service(name="notify", endpoint="/health", retries=0, timeout=1.0):
    url = f"http://{name}.local"
    return SimpleNamespace(
        name=name,
        url=url,
        health_check_endpoint=endpoint,
        retry_attempts=retries,
        timeout_seconds=timeout,
        probe_url=url + endpoint if endpoint else url,
    )


class TestClassifyStatusCode:
    """Tests for status code classification."""

    @pytest.mark.parametrize(
        "code, expected",
        [
            (200, ServiceStatus.HEALTHY),
            (204, ServiceStatus.HEALTHY),
            (301, ServiceStatus.DEGRADED),
            (404, ServiceStatus.DEGRADED),
            (429, ServiceStatus.DEGRADED),
            (500, ServiceStatus.UNHEALTHY),
            (503, ServiceStatus.UNHEALTHY),
        ],
    )
    def test_classification(self, code, expected):
        assert classify_status_code(code) == expected


class TestProbe:
    """Tests for single-service probes against a stub endpoint."""

    @pytest.mark.asyncio
    async def test_200_is_healthy(self, http_client, stub_endpoints, clock):
        stub_endpoints.set("http://notify.local/health", 200)
        prober = HealthProber(client=http_client, clock=clock)

        result = await prober.probe(make_service())

        assert result.status == ServiceStatus.HEALTHY
        assert result.status_code == 200
        assert result.error is None
        assert result.attempts == 1
        assert result.latency_ms >= 0
        assert result.checked_at == clock.now

    @pytest.mark.asyncio
    async def test_404_is_degraded(self, http_client, stub_endpoints):
        stub_endpoints.set("http://notify.local/health", 404)
        prober = HealthProber(client=http_client)

        result = await prober.probe(make_service(retries=2))

        assert result.status == ServiceStatus.DEGRADED
        # A 4xx answer is not retried
        assert result.attempts == 1

    @pytest.mark.asyncio
    async def test_timeout_is_unhealthy(self, http_client, stub_endpoints):
        stub_endpoints.set("http://notify.local/health", httpx.ConnectTimeout("timed out"))
        prober = HealthProber(client=http_client)

        result = await prober.probe(make_service())

        assert result.status == ServiceStatus.UNHEALTHY
        assert result.status_code is None
        assert "timeout" in result.error.lower()

    @pytest.mark.asyncio
    async def test_connection_error_is_unhealthy(self, http_client, stub_endpoints):
        stub_endpoints.set("http://notify.local/health", httpx.ConnectError("Connection refused"))
        prober = HealthProber(client=http_client)

        result = await prober.probe(make_service())

        assert result.status == ServiceStatus.UNHEALTHY
        assert "Connection refused" in result.error

    @pytest.mark.asyncio
    async def test_5xx_retried_until_success(self, http_client, stub_endpoints):
        stub_endpoints.set("http://notify.local/health", [503, 502, 200])
        prober = HealthProber(client=http_client)

        result = await prober.probe(make_service(retries=2))

        assert result.status == ServiceStatus.HEALTHY
        assert result.attempts == 3

    @pytest.mark.asyncio
    async def test_final_attempt_decides_verdict(self, http_client, stub_endpoints):
        stub_endpoints.set("http://notify.local/health", [503])
        prober = HealthProber(client=http_client)

        result = await prober.probe(make_service(retries=1))

        assert result.status == ServiceStatus.UNHEALTHY
        assert result.attempts == 2
        assert result.status_code == 503

    @pytest.mark.asyncio
    async def test_get_on_endpoint_head_without(self, http_client, stub_endpoints):
        prober = HealthProber(client=http_client)

        await prober.probe(make_service("a", endpoint="/health"))
        await prober.probe(make_service("b", endpoint=None))

        methods = {r.url.host: r.method for r in stub_endpoints.requests}
        assert methods["a.local"] == "GET"
        assert methods["b.local"] == "HEAD"

    def test_concurrency_must_be_positive(self, http_client):
        with pytest.raises(ValueError):
            HealthProber(client=http_client, concurrency=0)


class TestProbeAll:
    """Tests for concurrent probing."""

    @pytest.mark.asyncio
    async def test_results_in_service_order(self, http_client, stub_endpoints):
        stub_endpoints.set("http://b.local/health", 500)
        prober = HealthProber(client=http_client)
        services = [make_service("a"), make_service("b"), make_service("c")]

        results = await prober.probe_all(services)

        assert [r.service for r in results] == ["a", "b", "c"]
        assert [r.status for r in results] == [
            ServiceStatus.HEALTHY,
            ServiceStatus.UNHEALTHY,
            ServiceStatus.HEALTHY,
        ]

    @pytest.mark.asyncio
    async def test_concurrency_is_bounded(self):
        in_flight = 0
        peak = 0

        async def slow_handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(slow_handler)) as client:
            prober = HealthProber(client=client, concurrency=2)
            results = await prober.probe_all([make_service(f"s{i}") for i in range(6)])

        assert len(results) == 6
        assert peak == 2

    @pytest.mark.asyncio
    async def test_slow_service_does_not_block_others(self):
        finished = []

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "slow.local":
                await asyncio.sleep(0.05)
            finished.append(request.url.host)
            return httpx.Response(200)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            prober = HealthProber(client=client, concurrency=5)
            await prober.probe_all([make_service("slow"), make_service("fast")])

        assert finished == ["fast.local", "slow.local"]

    @pytest.mark.asyncio
    async def test_on_result_called_per_probe(self, http_client):
        seen = []

        async def on_result(result):
            seen.append(result.service)

        prober = HealthProber(client=http_client)
        await prober.probe_all([make_service("a"), make_service("b")], on_result=on_result)

        assert sorted(seen) == ["a", "b"]
