"""Tests for time-based escalation."""

from datetime import timedelta

import pytest

from cfc_monitoring.alerts.escalation import EscalationJob, EscalationPolicy
from cfc_monitoring.models.alert import AlertSeverity

RULES = [(1, 15), (2, 30), (3, 60)]


class TestEscalationPolicy:
    """Tests for threshold lookup."""

    @pytest.mark.parametrize(
        "minutes,expected",
        [(0, 0), (14, 0), (15, 1), (29, 1), (30, 2), (59, 2), (60, 3), (600, 3)],
    )
    def test_due_level(self, minutes, expected):
        policy = EscalationPolicy(RULES)
        assert policy.due_level(timedelta(minutes=minutes)) == expected

    def test_rules_sorted(self):
        policy = EscalationPolicy([(3, 60), (1, 15)])
        assert policy.rules == [(1, 15), (3, 60)]

    @pytest.mark.parametrize("rule", [(0, 10), (1, -1)])
    def test_invalid_rule(self, rule):
        with pytest.raises(ValueError):
            EscalationPolicy([rule])


class TestEscalationJob:
    """Tests for the periodic escalation run."""

    @pytest.mark.asyncio
    async def test_escalates_overdue_alerts_one_level(self, alert_manager, clock):
        alert = await alert_manager.create("down", "", AlertSeverity.HIGH, "notify")
        job = EscalationJob(alert_manager, EscalationPolicy(RULES))

        clock.advance(minutes=10)
        assert await job.run() == 0

        clock.advance(minutes=55)
        assert await job.run() == 1
        assert (await alert_manager.get(alert.id)).escalation_level == 1

        assert await job.run() == 1
        assert await job.run() == 1
        assert await job.run() == 0
        assert (await alert_manager.get(alert.id)).escalation_level == 3

    @pytest.mark.asyncio
    async def test_skips_non_open_alerts(self, alert_manager, clock):
        alert = await alert_manager.create("down", "", AlertSeverity.HIGH, "notify")
        await alert_manager.acknowledge(alert.id, "ops@cfc")
        job = EscalationJob(alert_manager, EscalationPolicy(RULES))

        clock.advance(hours=2)

        assert await job.run() == 0
        assert (await alert_manager.get(alert.id)).escalation_level == 0

    @pytest.mark.asyncio
    async def test_respects_max_level(self, alert_manager, clock):
        alert = await alert_manager.create("down", "", AlertSeverity.HIGH, "notify")
        job = EscalationJob(alert_manager, EscalationPolicy([(10, 0)]))

        for _ in range(8):
            await job.run()

        assert (await alert_manager.get(alert.id)).escalation_level == 5
        assert await job.run() == 0
