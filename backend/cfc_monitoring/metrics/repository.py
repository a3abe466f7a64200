"""Repository for metric samples. Append-only."""

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, func, select

from cfc_monitoring.db.repository import BaseRepository
from cfc_monitoring.metrics.models import MetricAggregate, MetricQuery
from cfc_monitoring.models.metric import MetricSampleRecord


def _apply_filters(query, filters: MetricQuery):
    if filters.service:
        query = query.where(MetricSampleRecord.service == filters.service)
    if filters.name:
        query = query.where(MetricSampleRecord.name == filters.name)
    if filters.start is not None:
        query = query.where(MetricSampleRecord.timestamp >= filters.start)
    if filters.end is not None:
        query = query.where(MetricSampleRecord.timestamp <= filters.end)
    for key, value in filters.tags.items():
        query = query.where(MetricSampleRecord.tags[key].as_string() == value)
    return query


class MetricRepository(BaseRepository):
    """Repository for metric sample database operations."""

    async def append(self, records: Sequence[MetricSampleRecord]) -> list[MetricSampleRecord]:
        """Insert samples in one transaction."""
        async with self.session("append_metrics") as session:
            session.add_all(records)
            await session.commit()
        return list(records)

    async def find_all(
        self,
        filters: MetricQuery,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[MetricSampleRecord], int]:
        """List samples newest first.

        Returns:
            Tuple of (samples on the page, total matching)
        """
        query = _apply_filters(select(MetricSampleRecord), filters)
        count_query = _apply_filters(select(func.count()).select_from(MetricSampleRecord), filters)

        async with self.session("list_metrics") as session:
            total = (await session.execute(count_query)).scalar() or 0
            result = await session.execute(
                query.order_by(MetricSampleRecord.timestamp.desc(), MetricSampleRecord.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            return list(result.scalars().all()), total

    async def values(
        self,
        service: str | None,
        name: str,
        start: datetime,
        end: datetime,
    ) -> list[tuple[datetime, float]]:
        """(timestamp, value) pairs within [start, end], oldest first."""
        query = select(MetricSampleRecord.timestamp, MetricSampleRecord.value).where(
            MetricSampleRecord.name == name,
            MetricSampleRecord.timestamp >= start,
            MetricSampleRecord.timestamp <= end,
        )
        if service:
            query = query.where(MetricSampleRecord.service == service)

        async with self.session("metric_values") as session:
            result = await session.execute(
                query.order_by(MetricSampleRecord.timestamp, MetricSampleRecord.id)
            )
            return [(row[0], float(row[1])) for row in result.all()]

    async def aggregate(self, filters: MetricQuery) -> list[MetricAggregate]:
        """avg/min/max/count grouped by metric name."""
        query = _apply_filters(
            select(
                MetricSampleRecord.name,
                func.avg(MetricSampleRecord.value),
                func.min(MetricSampleRecord.value),
                func.max(MetricSampleRecord.value),
                func.count(),
            ),
            filters,
        ).group_by(MetricSampleRecord.name)

        async with self.session("aggregate_metrics") as session:
            rows = (await session.execute(query.order_by(MetricSampleRecord.name))).all()

        return [
            MetricAggregate(
                name=name,
                avg=float(avg),
                min=float(minimum),
                max=float(maximum),
                count=count,
            )
            for name, avg, minimum, maximum, count in rows
        ]

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Retention cleanup. Returns number of samples removed."""
        async with self.session("delete_old_metrics") as session:
            result = await session.execute(
                delete(MetricSampleRecord).where(MetricSampleRecord.timestamp < cutoff)
            )
            await session.commit()
            return result.rowcount or 0
