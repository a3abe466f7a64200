"""Alert repository module for database operations.

Lifecycle transitions are compare-and-set updates:

    UPDATE alerts SET ... WHERE id = :id AND status IN (:eligible)

Exactly one of two concurrent actors wins; the loser sees a zero row count.

Usage:
    repo = AlertRepository(session_factory)
    changed = await repo.transition(alert_id, {AlertStatus.OPEN}, {"status": "acknowledged"})
"""

from collections.abc import Collection
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, or_, select, update

from cfc_monitoring.alerts.models import AlertCounts, AlertFilter, AlertStats
from cfc_monitoring.db.repository import BaseRepository
from cfc_monitoring.models.alert import AlertRecord, AlertSeverity, AlertStatus


def _apply_filters(query, filters: AlertFilter):
    if filters.severity is not None:
        query = query.where(AlertRecord.severity == filters.severity.value)
    if filters.status is not None:
        query = query.where(AlertRecord.status == filters.status.value)
    if filters.service:
        query = query.where(AlertRecord.service == filters.service)
    if filters.source:
        query = query.where(AlertRecord.source == filters.source)
    if filters.search:
        pattern = f"%{filters.search}%"
        query = query.where(
            or_(
                AlertRecord.title.ilike(pattern),
                AlertRecord.description.ilike(pattern),
                AlertRecord.service.ilike(pattern),
            )
        )
    if filters.start is not None:
        query = query.where(AlertRecord.created_at >= filters.start)
    if filters.end is not None:
        query = query.where(AlertRecord.created_at <= filters.end)
    return query


class AlertRepository(BaseRepository):
    """Repository for alert database operations."""

    async def create(self, record: AlertRecord) -> AlertRecord:
        async with self.session("create_alert") as session:
            session.add(record)
            await session.commit()
            await session.refresh(record)
        return record

    async def get(self, alert_id: str) -> AlertRecord | None:
        async with self.session("get_alert") as session:
            result = await session.execute(select(AlertRecord).where(AlertRecord.id == alert_id))
            return result.scalar_one_or_none()

    async def transition(
        self,
        alert_id: str,
        eligible: Collection[AlertStatus],
        values: dict[str, Any],
        *conditions,
    ) -> bool:
        """Apply values if the alert is currently in an eligible status.

        Args:
            alert_id: Alert to update
            eligible: Statuses the alert must be in
            values: Column values to set
            conditions: Extra WHERE clauses

        Returns:
            True if the row was updated, False if absent or ineligible
        """
        stmt = (
            update(AlertRecord)
            .where(
                AlertRecord.id == alert_id,
                AlertRecord.status.in_([status.value for status in eligible]),
                *conditions,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.session("transition_alert") as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount == 1

    async def expire_mutes(self, now: datetime) -> int:
        """Reopen muted alerts whose mute window has elapsed.

        Returns:
            Number of alerts reopened
        """
        stmt = (
            update(AlertRecord)
            .where(
                AlertRecord.status == AlertStatus.MUTED.value,
                AlertRecord.muted_until <= now,
            )
            .values(
                status=AlertStatus.OPEN.value,
                muted_by=None,
                muted_at=None,
                muted_until=None,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        async with self.session("expire_mutes") as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0

    async def find_all(
        self,
        filters: AlertFilter,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[AlertRecord], int]:
        """List alerts most recent first, id descending on ties.

        Returns:
            Tuple of (alerts on the page, total matching)
        """
        query = _apply_filters(select(AlertRecord), filters)
        count_query = _apply_filters(select(func.count()).select_from(AlertRecord), filters)

        async with self.session("list_alerts") as session:
            total = (await session.execute(count_query)).scalar() or 0
            result = await session.execute(
                query.order_by(AlertRecord.created_at.desc(), AlertRecord.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            return list(result.scalars().all()), total

    async def find_by_status(self, status: AlertStatus) -> list[AlertRecord]:
        """All alerts in a status, oldest first."""
        async with self.session("find_alerts_by_status") as session:
            result = await session.execute(
                select(AlertRecord)
                .where(AlertRecord.status == status.value)
                .order_by(AlertRecord.created_at, AlertRecord.id)
            )
            return list(result.scalars().all())

    async def recent(self, limit: int) -> list[AlertRecord]:
        async with self.session("recent_alerts") as session:
            result = await session.execute(
                select(AlertRecord)
                .order_by(AlertRecord.created_at.desc(), AlertRecord.id.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def counts(self) -> AlertCounts:
        async with self.session("count_alerts") as session:
            rows = (
                await session.execute(
                    select(AlertRecord.status, func.count()).group_by(AlertRecord.status)
                )
            ).all()
        by_status = {status: count for status, count in rows}
        return AlertCounts(
            open=by_status.get(AlertStatus.OPEN.value, 0),
            acknowledged=by_status.get(AlertStatus.ACKNOWLEDGED.value, 0),
            muted=by_status.get(AlertStatus.MUTED.value, 0),
            resolved=by_status.get(AlertStatus.RESOLVED.value, 0),
        )

    async def stats(self) -> AlertStats:
        async with self.session("alert_stats") as session:
            status_rows = (
                await session.execute(
                    select(AlertRecord.status, func.count()).group_by(AlertRecord.status)
                )
            ).all()
            severity_rows = (
                await session.execute(
                    select(AlertRecord.severity, func.count()).group_by(AlertRecord.severity)
                )
            ).all()
            service_rows = (
                await session.execute(
                    select(AlertRecord.service, func.count()).group_by(AlertRecord.service)
                )
            ).all()

        by_status = {status.value: 0 for status in AlertStatus}
        by_status.update({status: count for status, count in status_rows})
        by_severity = {severity.value: 0 for severity in AlertSeverity}
        by_severity.update({severity: count for severity, count in severity_rows})

        return AlertStats(
            total=sum(by_status.values()),
            by_status=by_status,
            by_severity=by_severity,
            by_service={service: count for service, count in service_rows},
        )

    async def delete(self, alert_id: str) -> bool:
        async with self.session("delete_alert") as session:
            result = await session.execute(delete(AlertRecord).where(AlertRecord.id == alert_id))
            await session.commit()
            return result.rowcount == 1
