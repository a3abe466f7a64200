"""Tests for the transition bus."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from cfc_monitoring.health.events import TransitionBus
from cfc_monitoring.health.models import ProbeResult, ServiceTransition, TransitionKind
from cfc_monitoring.models.service import ServiceStatus


@pytest.fixture
def transition():
    result = ProbeResult(
        service="notify",
        status=ServiceStatus.UNHEALTHY,
        latency_ms=5.0,
        checked_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        error="refused",
    )
    return ServiceTransition(
        kind=TransitionKind.BECAME_UNHEALTHY,
        service="notify",
        previous=ServiceStatus.HEALTHY,
        current=ServiceStatus.UNHEALTHY,
        degraded_streak=0,
        critical=False,
        alert_on_failure=True,
        result=result,
    )


class TestTransitionBus:
    """Tests for publish and subscribe."""

    @pytest.mark.asyncio
    async def test_all_subscribers_receive(self, transition):
        bus = TransitionBus()
        first, second = AsyncMock(), AsyncMock()
        bus.subscribe(first)
        bus.subscribe(second)

        delivered = await bus.publish(transition)

        assert delivered == 2
        first.assert_awaited_once_with(transition)
        second.assert_awaited_once_with(transition)

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, transition):
        bus = TransitionBus()
        broken = AsyncMock(side_effect=RuntimeError("boom"))
        healthy = AsyncMock()
        bus.subscribe(broken)
        bus.subscribe(healthy)

        delivered = await bus.publish(transition)

        assert delivered == 1
        healthy.assert_awaited_once()

    def test_subscriber_count(self):
        bus = TransitionBus()
        bus.subscribe(AsyncMock())
        assert bus.subscriber_count == 1
