"""Alert lifecycle manager.

State machine:

    open -> acknowledged -> resolved
    open <-> muted -> resolved

``resolved`` is terminal. A muted alert returns to ``open`` once its
``muted_until`` has passed; this is applied lazily before every read and
transition, there is no timer.

Usage:
    manager = AlertLifecycleManager(AlertRepository(session_factory))
    alert = await manager.create("Service down", "...", AlertSeverity.HIGH, "notify")
    await manager.acknowledge(alert.id, "ops@cfc")
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from cfc_monitoring.alerts.models import (
    AlertCounts,
    AlertFilter,
    AlertMetadata,
    AlertPage,
    AlertStats,
)
from cfc_monitoring.alerts.repository import AlertRepository
from cfc_monitoring.db.types import as_utc, utcnow
from cfc_monitoring.errors import InvalidTransitionError, NotFoundError, ValidationError
from cfc_monitoring.models.alert import AlertRecord, AlertSeverity, AlertStatus

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "monitoring-service"
DEFAULT_MUTE_HOURS = 24
MAX_PAGE_SIZE = 100

RESOLVABLE = frozenset({AlertStatus.OPEN, AlertStatus.ACKNOWLEDGED, AlertStatus.MUTED})
ACKNOWLEDGEABLE = frozenset({AlertStatus.OPEN})
MUTABLE = frozenset({AlertStatus.OPEN, AlertStatus.ACKNOWLEDGED})
UNMUTABLE = frozenset({AlertStatus.MUTED})
ESCALATABLE = frozenset({AlertStatus.OPEN})


def _not_found(alert_id: str) -> NotFoundError:
    return NotFoundError(f"Alert '{alert_id}' not found", entity="alert", entity_id=alert_id)


def _validate_ids(alert_ids: Any) -> list[str]:
    if not isinstance(alert_ids, list):
        raise ValidationError("alert_ids must be a list", field="alert_ids")
    if not all(isinstance(alert_id, str) for alert_id in alert_ids):
        raise ValidationError("alert_ids must contain only strings", field="alert_ids")
    return alert_ids


class AlertLifecycleManager:
    """Owns the alert state machine.

    Every transition is a compare-and-set on the alert's status, so two
    concurrent actors can never both transition the same alert.
    """

    def __init__(
        self,
        repository: AlertRepository,
        max_escalation_level: int = 5,
        default_mute: timedelta = timedelta(hours=DEFAULT_MUTE_HOURS),
        clock: Callable[[], datetime] = utcnow,
    ):
        """Initialize the manager.

        Args:
            repository: Alert persistence
            max_escalation_level: Escalation cap
            default_mute: Mute window used when mute() gets no end time
            clock: Returns the current timezone-aware time
        """
        self._repo = repository
        self._max_escalation_level = max_escalation_level
        self._default_mute = default_mute
        self._clock = clock

    @property
    def max_escalation_level(self) -> int:
        return self._max_escalation_level

    def now(self) -> datetime:
        return self._clock()

    async def _expire_mutes(self) -> datetime:
        now = self._clock()
        reopened = await self._repo.expire_mutes(now)
        if reopened:
            logger.info("Reopened %d alerts whose mute expired", reopened)
        return now

    async def _transition(
        self,
        alert_id: str,
        action: str,
        eligible: frozenset[AlertStatus],
        values: dict[str, Any],
    ) -> AlertRecord:
        await self._expire_mutes()
        changed = await self._repo.transition(alert_id, eligible, values)
        record = await self._repo.get(alert_id)
        if record is None:
            raise _not_found(alert_id)
        if not changed:
            raise InvalidTransitionError(
                f"Cannot {action} alert '{alert_id}' in status '{record.status}'",
                alert_id=alert_id,
                current_status=record.status,
            )
        logger.info("Alert %s %s -> %s", alert_id, action, record.status)
        return record

    async def create(
        self,
        title: str,
        description: str,
        severity: AlertSeverity | str,
        service: str,
        source: str | None = DEFAULT_SOURCE,
        metadata: AlertMetadata | None = None,
    ) -> AlertRecord:
        """Create a new open alert at escalation level 0.

        Raises:
            ValidationError: On empty title/service or unknown severity
        """
        if not title or not title.strip():
            raise ValidationError("Alert title is required", field="title")
        if not service or not service.strip():
            raise ValidationError("Alert service is required", field="service")
        try:
            severity = AlertSeverity(severity)
        except ValueError as e:
            raise ValidationError(f"Unknown severity '{severity}'", field="severity") from e

        now = self._clock()
        record = AlertRecord(
            id=str(uuid4()),
            title=title,
            description=description or "",
            severity=severity.value,
            status=AlertStatus.OPEN.value,
            service=service,
            source=source or DEFAULT_SOURCE,
            alert_metadata=(metadata or AlertMetadata()).to_dict(),
            escalation_level=0,
            created_at=now,
            updated_at=now,
        )
        record = await self._repo.create(record)
        logger.info(
            "Alert created: %s [%s] service=%s source=%s",
            record.id,
            severity.value,
            service,
            record.source,
        )
        return record

    async def get(self, alert_id: str) -> AlertRecord:
        """Fetch an alert, applying mute expiry first.

        Raises:
            NotFoundError: If the alert does not exist
        """
        await self._expire_mutes()
        record = await self._repo.get(alert_id)
        if record is None:
            raise _not_found(alert_id)
        return record

    async def list_alerts(
        self,
        filters: AlertFilter | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> AlertPage:
        """Paginated alerts, most recent first. Page is 1-based."""
        if page < 1:
            raise ValidationError("page must be >= 1", field="page")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be within 1..{MAX_PAGE_SIZE}", field="limit")
        filters = filters or AlertFilter()
        if filters.start and filters.end and as_utc(filters.end) < as_utc(filters.start):
            raise ValidationError("end must not be before start", field="end")

        await self._expire_mutes()
        items, total = await self._repo.find_all(filters, page=page, limit=limit)
        return AlertPage(items=items, total=total, page=page, limit=limit)

    async def acknowledge(self, alert_id: str, actor: str) -> AlertRecord:
        """open -> acknowledged."""
        now = self._clock()
        return await self._transition(
            alert_id,
            "acknowledge",
            ACKNOWLEDGEABLE,
            {
                "status": AlertStatus.ACKNOWLEDGED.value,
                "acknowledged_by": actor,
                "acknowledged_at": now,
                "updated_at": now,
            },
        )

    async def resolve(self, alert_id: str, actor: str) -> AlertRecord:
        """open, acknowledged or muted -> resolved. Clears any mute."""
        now = self._clock()
        return await self._transition(
            alert_id,
            "resolve",
            RESOLVABLE,
            {
                "status": AlertStatus.RESOLVED.value,
                "resolved_by": actor,
                "resolved_at": now,
                "muted_by": None,
                "muted_at": None,
                "muted_until": None,
                "updated_at": now,
            },
        )

    async def mute(
        self,
        alert_id: str,
        actor: str,
        until: datetime | None = None,
    ) -> AlertRecord:
        """open or acknowledged -> muted until the given time.

        Args:
            alert_id: Alert to mute
            actor: Who muted it
            until: End of the mute window. Defaults to now + 24h.

        Raises:
            NotFoundError: If the alert does not exist
            InvalidTransitionError: If until is not strictly in the future,
                or the alert is not open or acknowledged
        """
        if await self._repo.get(alert_id) is None:
            raise _not_found(alert_id)
        now = self._clock()
        until = as_utc(until) if until is not None else now + self._default_mute
        if until <= now:
            raise InvalidTransitionError(
                f"Mute end {until.isoformat()} is not in the future", alert_id=alert_id
            )
        return await self._transition(
            alert_id,
            "mute",
            MUTABLE,
            {
                "status": AlertStatus.MUTED.value,
                "muted_by": actor,
                "muted_at": now,
                "muted_until": until,
                "updated_at": now,
            },
        )

    async def unmute(self, alert_id: str) -> AlertRecord:
        """muted -> open."""
        return await self._transition(
            alert_id,
            "unmute",
            UNMUTABLE,
            {
                "status": AlertStatus.OPEN.value,
                "muted_by": None,
                "muted_at": None,
                "muted_until": None,
                "updated_at": self._clock(),
            },
        )

    async def escalate(self, alert_id: str) -> AlertRecord:
        """Raise the escalation level of an open alert by one.

        At the maximum level the alert is returned unchanged.

        Raises:
            NotFoundError: If the alert does not exist
            InvalidTransitionError: If the alert is not open
        """
        await self._expire_mutes()
        changed = await self._repo.transition(
            alert_id,
            ESCALATABLE,
            {
                "escalation_level": AlertRecord.escalation_level + 1,
                "updated_at": self._clock(),
            },
            AlertRecord.escalation_level < self._max_escalation_level,
        )
        record = await self._repo.get(alert_id)
        if record is None:
            raise _not_found(alert_id)
        if changed:
            logger.info("Alert %s escalated to level %d", alert_id, record.escalation_level)
            return record
        if record.alert_status != AlertStatus.OPEN:
            raise InvalidTransitionError(
                f"Cannot escalate alert '{alert_id}' in status '{record.status}'",
                alert_id=alert_id,
                current_status=record.status,
            )
        logger.debug(
            "Alert %s already at max escalation level %d", alert_id, record.escalation_level
        )
        return record

    async def _bulk(self, alert_ids: Any, action: str, apply) -> int:
        alert_ids = _validate_ids(alert_ids)
        count = 0
        for alert_id in alert_ids:
            try:
                await apply(alert_id)
                count += 1
            except (NotFoundError, InvalidTransitionError) as e:
                logger.debug("Bulk %s skipped %s: %s", action, alert_id, e)
        logger.info("Bulk %s: %d of %d alerts transitioned", action, count, len(alert_ids))
        return count

    async def bulk_resolve(self, alert_ids: list[str], actor: str) -> int:
        """Resolve every eligible alert. Ineligible or missing ids are skipped.

        Returns:
            Number of alerts actually resolved

        Raises:
            ValidationError: If alert_ids is not a list of strings
        """
        return await self._bulk(
            alert_ids, "resolve", lambda alert_id: self.resolve(alert_id, actor)
        )

    async def bulk_acknowledge(self, alert_ids: list[str], actor: str) -> int:
        """Acknowledge every open alert. Others are skipped."""
        return await self._bulk(
            alert_ids, "acknowledge", lambda alert_id: self.acknowledge(alert_id, actor)
        )

    async def stats(self) -> AlertStats:
        await self._expire_mutes()
        return await self._repo.stats()

    async def counts(self) -> AlertCounts:
        """Alert counts by status, after mute expiry."""
        await self._expire_mutes()
        return await self._repo.counts()

    async def recent(self, limit: int = 20) -> list[AlertRecord]:
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be within 1..{MAX_PAGE_SIZE}", field="limit")
        await self._expire_mutes()
        return await self._repo.recent(limit)

    async def open_alerts(self) -> list[AlertRecord]:
        """Open alerts, oldest first."""
        await self._expire_mutes()
        return await self._repo.find_by_status(AlertStatus.OPEN)

    async def delete(self, alert_id: str) -> None:
        """Administrative removal.

        Raises:
            NotFoundError: If the alert does not exist
        """
        if not await self._repo.delete(alert_id):
            raise _not_found(alert_id)
        logger.warning("Alert %s deleted", alert_id)
