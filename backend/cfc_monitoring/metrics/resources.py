"""Host resource sampling via psutil."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

import psutil

from cfc_monitoring.db.types import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceSnapshot:
    """CPU, memory and disk utilisation in percent at one instant."""

    cpu_percent: float = 0.0
    memory_percent: float = 0.0
    disk_percent: float = 0.0
    sampled_at: datetime | None = None


class ResourceSampler:
    """Takes ResourceSnapshots of the local host."""

    def __init__(self, disk_path: str = "/", clock: Callable[[], datetime] = utcnow) -> None:
        self._disk_path = disk_path
        self._clock = clock
        # First call primes psutil's CPU counters and always returns 0.0
        psutil.cpu_percent(interval=None)

    def sample(self) -> ResourceSnapshot:
        """Read current utilisation. Unreadable disk paths report 0.0."""
        cpu = psutil.cpu_percent(interval=None)
        memory = psutil.virtual_memory().percent
        try:
            disk = psutil.disk_usage(self._disk_path).percent
        except OSError as e:
            logger.warning("Cannot read disk usage for %s: %s", self._disk_path, e)
            disk = 0.0

        return ResourceSnapshot(
            cpu_percent=float(cpu),
            memory_percent=float(memory),
            disk_percent=float(disk),
            sampled_at=self._clock(),
        )
