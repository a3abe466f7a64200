"""Math utilities for metric aggregates."""


def mean(data: list[float]) -> float:
    """Arithmetic mean.

    Args:
        data: List of values.

    Returns:
        Mean as float. Returns 0.0 if list is empty.
    """
    if not data:
        return 0.0
    return sum(data) / len(data)


def percentile(data: list[float], p: float) -> float:
    """Percentile with linear interpolation between closest ranks.

    Uses the (n - 1) * p / 100 rank, so p=0 is the minimum and p=100 the
    maximum.

    Args:
        data: List of values, in any order.
        p: Percentile in [0, 100].

    Returns:
        Interpolated percentile. Returns 0.0 if list is empty.

    Raises:
        ValueError: If p is outside [0, 100].
    """
    if not 0 <= p <= 100:
        raise ValueError(f"Percentile must be within [0, 100], got {p}")
    if not data:
        return 0.0

    ordered = sorted(data)
    rank = (len(ordered) - 1) * p / 100
    lower = int(rank)
    upper = min(lower + 1, len(ordered) - 1)
    fraction = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def percent_change(previous: float, current: float) -> float:
    """Relative change from previous to current, in percent.

    Returns 0.0 when previous is zero; callers decide the direction from
    the sign of current in that case.
    """
    if previous == 0:
        return 0.0
    return (current - previous) / abs(previous) * 100
