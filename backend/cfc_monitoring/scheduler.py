"""Periodic jobs: the probe cycle and optional alert escalation.

The probe job never overlaps itself. If a cycle overruns the interval the
next run is skipped and missed runs are coalesced into one.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from cfc_monitoring.alerts.escalation import EscalationJob
from cfc_monitoring.health.monitor import HealthMonitor

logger = logging.getLogger(__name__)

PROBE_JOB_ID = "probe_cycle"
ESCALATION_JOB_ID = "alert_escalation"


class MonitoringScheduler:
    """APScheduler wrapper for the background monitoring jobs."""

    def __init__(
        self,
        monitor: HealthMonitor,
        probe_interval_seconds: int,
        escalation: EscalationJob | None = None,
        escalation_interval_seconds: int = 60,
    ):
        """Initialize scheduler.

        Args:
            monitor: Runs one probe cycle per job execution
            probe_interval_seconds: Seconds between probe cycles
            escalation: Escalation job, None to disable escalation
            escalation_interval_seconds: Seconds between escalation runs
        """
        if probe_interval_seconds < 1:
            raise ValueError("probe_interval_seconds must be at least 1")
        self.monitor = monitor
        self.probe_interval_seconds = probe_interval_seconds
        self.escalation = escalation
        self.escalation_interval_seconds = escalation_interval_seconds
        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)

    @property
    def running(self) -> bool:
        return self.scheduler.running

    async def _run_probe_cycle(self) -> None:
        try:
            await self.monitor.run_cycle()
        except Exception:
            logger.exception("Probe cycle failed")

    async def _run_escalation(self) -> None:
        try:
            await self.escalation.run()
        except Exception:
            logger.exception("Escalation run failed")

    def start(self) -> None:
        """Start the scheduler.

        Schedules:
        - Probe cycle immediately, then every probe_interval_seconds
        - Escalation every escalation_interval_seconds, when configured
        """
        self.scheduler.add_job(
            self._run_probe_cycle,
            trigger="interval",
            seconds=self.probe_interval_seconds,
            next_run_time=datetime.now(timezone.utc),
            id=PROBE_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

        if self.escalation is not None:
            self.scheduler.add_job(
                self._run_escalation,
                trigger="interval",
                seconds=self.escalation_interval_seconds,
                id=ESCALATION_JOB_ID,
                max_instances=1,
                coalesce=True,
                replace_existing=True,
            )

        self.scheduler.start()
        logger.info(
            "MonitoringScheduler started (probe every %ds, escalation %s)",
            self.probe_interval_seconds,
            "enabled" if self.escalation is not None else "disabled",
        )

    def shutdown(self) -> None:
        """Shutdown the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("MonitoringScheduler shut down")
