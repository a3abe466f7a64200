"""HTTP health prober for registered services."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime

import httpx

from cfc_monitoring.db.types import utcnow
from cfc_monitoring.health.models import ProbeResult
from cfc_monitoring.models.service import ServiceRecord, ServiceStatus

logger = logging.getLogger(__name__)


def classify_status_code(status_code: int) -> ServiceStatus:
    """Map an HTTP status code to a verdict.

    2xx is healthy, 3xx and 4xx are degraded (the service answered but
    abnormally), anything else is unhealthy.
    """
    if 200 <= status_code < 300:
        return ServiceStatus.HEALTHY
    if 300 <= status_code < 500:
        return ServiceStatus.DEGRADED
    return ServiceStatus.UNHEALTHY


def _should_retry(status_code: int | None) -> bool:
    # Errors and 5xx are retried; a degraded answer is a real answer
    return status_code is None or status_code >= 500


class HealthProber:
    """Issues bounded-timeout HTTP probes and classifies the outcome.

    A probe never raises. Connection errors and timeouts become unhealthy
    results carrying the error text.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        concurrency: int = 10,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the prober.

        Args:
            client: Shared HTTP client. One is created (and owned) if omitted.
            concurrency: Maximum probes in flight during probe_all
            clock: Source of checked_at timestamps
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(follow_redirects=False)
        self._concurrency = concurrency
        self._clock = clock

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _attempt(self, service: ServiceRecord) -> tuple[int | None, str | None, float]:
        method = "GET" if service.health_check_endpoint else "HEAD"
        start = time.perf_counter()
        try:
            response = await self._client.request(
                method,
                service.probe_url,
                timeout=service.timeout_seconds,
            )
            return response.status_code, None, (time.perf_counter() - start) * 1000
        except httpx.TimeoutException:
            return None, "Health check timeout", (time.perf_counter() - start) * 1000
        except httpx.HTTPError as e:
            return None, str(e) or e.__class__.__name__, (time.perf_counter() - start) * 1000

    async def probe(self, service: ServiceRecord) -> ProbeResult:
        """Probe one service, retrying on error, timeout or 5xx.

        Returns:
            ProbeResult of the final attempt
        """
        max_attempts = 1 + max(service.retry_attempts, 0)
        attempts = 0
        status_code = error = None
        latency_ms = 0.0

        while attempts < max_attempts:
            attempts += 1
            status_code, error, latency_ms = await self._attempt(service)
            if not _should_retry(status_code):
                break
            logger.debug(
                "Probe attempt %d/%d for %s failed: %s",
                attempts,
                max_attempts,
                service.name,
                error or status_code,
            )

        status = (
            classify_status_code(status_code)
            if status_code is not None
            else ServiceStatus.UNHEALTHY
        )
        result = ProbeResult(
            service=service.name,
            status=status,
            latency_ms=latency_ms,
            checked_at=self._clock(),
            attempts=attempts,
            status_code=status_code,
            error=error,
        )
        logger.debug(
            "Probed %s: %s in %.1fms (%s)",
            service.name,
            status.value,
            latency_ms,
            error or status_code,
        )
        return result

    async def probe_all(
        self,
        services: Sequence[ServiceRecord],
        on_result: Callable[[ProbeResult], Awaitable[None]] | None = None,
    ) -> list[ProbeResult]:
        """Probe services concurrently with bounded parallelism.

        Args:
            services: Services to probe
            on_result: Optional async callback awaited as soon as each probe
                finishes, so results are written individually

        Returns:
            Results in the same order as services
        """
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(service: ServiceRecord) -> ProbeResult:
            async with semaphore:
                result = await self.probe(service)
            if on_result is not None:
                await on_result(result)
            return result

        return list(await asyncio.gather(*[run(service) for service in services]))
