from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from cfc_monitoring.alerts.repository import AlertRepository
from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.config import Settings
from cfc_monitoring.container import build_container
from cfc_monitoring.db.database import build_engine, build_session_factory, create_tables
from cfc_monitoring.main import create_app
from cfc_monitoring.metrics.aggregator import MetricsAggregator
from cfc_monitoring.metrics.repository import MetricRepository
from cfc_monitoring.metrics.resources import ResourceSnapshot
from cfc_monitoring.registry.repository import ServiceRepository
from cfc_monitoring.registry.service import ServiceRegistry


class FakeClock:
    """Controllable time source."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float = 0, **kwargs) -> datetime:
        self.now = self.now + timedelta(seconds=seconds, **kwargs)
        return self.now


class FixedResources:
    """Resource sampler returning a preset snapshot."""

    def __init__(self, cpu: float = 10.0, memory: float = 20.0, disk: float = 30.0):
        self.snapshot = ResourceSnapshot(cpu_percent=cpu, memory_percent=memory, disk_percent=disk)

    def sample(self) -> ResourceSnapshot:
        return self.snapshot


class StubEndpoints:
    """httpx.MockTransport handler keyed by URL.

    Values are a status code, an exception instance to raise, or a list of
    either consumed one per request (the last entry repeats).
    """

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def set(self, url: str, outcome) -> None:
        self.routes[url] = outcome

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)
        outcome = self.routes.get(url, 200)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, request=request)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings(tmp_path):
    # File-backed so every session sees the same database
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'monitoring.db'}",
        probe_scheduler_enabled=False,
        escalation_enabled=False,
    )


@pytest_asyncio.fixture
async def session_factory(settings):
    engine = build_engine(settings)
    await create_tables(engine)
    yield build_session_factory(engine)
    await engine.dispose()


@pytest.fixture
def alert_manager(session_factory, clock):
    return AlertLifecycleManager(AlertRepository(session_factory), max_escalation_level=5, clock=clock)


@pytest.fixture
def registry(session_factory):
    return ServiceRegistry(ServiceRepository(session_factory))


@pytest.fixture
def metrics(session_factory, clock):
    return MetricsAggregator(MetricRepository(session_factory), clock=clock)


@pytest.fixture
def stub_endpoints():
    return StubEndpoints()


@pytest_asyncio.fixture
async def http_client(stub_endpoints):
    async with httpx.AsyncClient(transport=httpx.MockTransport(stub_endpoints)) as client:
        yield client


@pytest.fixture
def resources():
    return FixedResources()


@pytest_asyncio.fixture
async def container(settings, http_client, clock, resources):
    container = build_container(settings, http_client=http_client, clock=clock, resources=resources)
    await create_tables(container.engine)
    yield container
    await container.shutdown()


@pytest_asyncio.fixture
async def client(container):
    """HTTP client against an app wired to the test container."""
    app = create_app(container=container)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
