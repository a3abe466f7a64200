"""Time-based auto-escalation of open alerts.

Rules map an escalation level to how long an alert must have been open
before it reaches that level. Each run raises an alert by at most one level.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta

from cfc_monitoring.alerts.service import AlertLifecycleManager
from cfc_monitoring.errors import InvalidTransitionError, NotFoundError

logger = logging.getLogger(__name__)


class EscalationPolicy:
    """Escalation thresholds: (level, minutes open)."""

    def __init__(self, rules: Sequence[tuple[int, int]]) -> None:
        for level, minutes in rules:
            if level < 1 or minutes < 0:
                raise ValueError(f"Invalid escalation rule ({level}, {minutes})")
        self._rules = sorted((int(level), int(minutes)) for level, minutes in rules)

    @property
    def rules(self) -> list[tuple[int, int]]:
        return list(self._rules)

    def due_level(self, age: timedelta) -> int:
        """Highest level whose threshold the age has reached. 0 if none."""
        due = 0
        for level, minutes in self._rules:
            if age >= timedelta(minutes=minutes):
                due = max(due, level)
        return due


class EscalationJob:
    """Escalates open alerts that have outlived their current level."""

    def __init__(self, manager: AlertLifecycleManager, policy: EscalationPolicy) -> None:
        self._manager = manager
        self._policy = policy

    async def run(self) -> int:
        """Escalate every overdue open alert once.

        Returns:
            Number of alerts escalated
        """
        now: datetime = self._manager.now()
        escalated = 0
        for alert in await self._manager.open_alerts():
            due = min(
                self._policy.due_level(now - alert.created_at),
                self._manager.max_escalation_level,
            )
            if due <= alert.escalation_level:
                continue
            try:
                await self._manager.escalate(alert.id)
                escalated += 1
            except (NotFoundError, InvalidTransitionError) as e:
                # Changed state since the scan
                logger.debug("Skipped escalation of %s: %s", alert.id, e)

        if escalated:
            logger.info("Escalation run raised %d alerts", escalated)
        return escalated
