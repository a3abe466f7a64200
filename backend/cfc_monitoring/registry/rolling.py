"""Rolling per-service health metrics.

Latency is smoothed with an exponential moving average. Error rate and
uptime move by fixed steps; failures weigh more than successes so uptime
drops quickly on outages and recovers gradually.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RollingMetricsPolicy:
    """Smoothing factor and step sizes for rolling metrics."""

    alpha: float = 0.3
    error_rate_step: float = 1.0
    uptime_success_step: float = 0.1
    uptime_failure_step: float = 1.0


@dataclass(frozen=True)
class RollingMetrics:
    """Snapshot of a service's rolling metrics.

    Attributes:
        response_time_ms: EMA of probe latency
        error_rate: Percentage in [0, 100]
        uptime: Percentage in [0, 100]
        last_updated: Never moves backwards
    """

    response_time_ms: float = 0.0
    error_rate: float = 0.0
    uptime: float = 100.0
    last_updated: datetime | None = None


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def ema(previous: float, sample: float, alpha: float) -> float:
    """Exponential moving average step: previous*(1-alpha) + sample*alpha."""
    return previous * (1 - alpha) + sample * alpha


def update_rolling_metrics(
    current: RollingMetrics,
    latency_ms: float,
    success: bool,
    now: datetime,
    policy: RollingMetricsPolicy | None = None,
) -> RollingMetrics:
    """Fold one probe outcome into the rolling metrics.

    Args:
        current: Metrics before this probe
        latency_ms: Measured probe latency
        success: Whether the probe verdict was healthy
        now: Probe completion time
        policy: Step sizes, defaults to RollingMetricsPolicy()

    Returns:
        New RollingMetrics. The input is not modified.
    """
    policy = policy or RollingMetricsPolicy()

    if success:
        error_rate = current.error_rate - policy.error_rate_step / 2
        uptime = current.uptime + policy.uptime_success_step
    else:
        error_rate = current.error_rate + policy.error_rate_step
        uptime = current.uptime - policy.uptime_failure_step

    last_updated = now
    if current.last_updated is not None and current.last_updated > now:
        last_updated = current.last_updated

    return RollingMetrics(
        response_time_ms=ema(current.response_time_ms, latency_ms, policy.alpha),
        error_rate=_clamp(error_rate),
        uptime=_clamp(uptime),
        last_updated=last_updated,
    )
