"""Headline statistics for metric series."""

from collections.abc import Sequence
from dataclasses import dataclass

from ..data.models import Metric, TimeSeriesPoint
from .utils import day_distance, years_before

# Tuned for monthly data: stop scanning once a point is this much further from
# the target than the best match so far.
YOY_EARLY_EXIT_DAYS = 60
# Reject a prior-year match that sits further than this from the exact anchor.
YOY_MAX_DISTANCE_DAYS = 90


def find_prior_year_point(
    series: Sequence[TimeSeriesPoint],
    *,
    early_exit_days: int = YOY_EARLY_EXIT_DAYS,
) -> tuple[TimeSeriesPoint, int] | None:
    """Return the point nearest one year before the last point, with its distance in days."""
    if len(series) < 2:
        return None
    target = years_before(series[-1].date)
    best: TimeSeriesPoint | None = None
    best_distance = 0
    for point in reversed(series[:-1]):
        distance = day_distance(point.date, target)
        if best is not None and distance - best_distance > early_exit_days:
            break
        if best is None or distance < best_distance:
            best = point
            best_distance = distance
    if best is None:
        return None
    return best, best_distance


def yoy_change(
    series: Sequence[TimeSeriesPoint],
    *,
    early_exit_days: int = YOY_EARLY_EXIT_DAYS,
    max_distance_days: int = YOY_MAX_DISTANCE_DAYS,
) -> float | None:
    """Percent change from the point nearest one year earlier to the latest point.

    Returns ``None`` when the series is too short, the latest value is absent,
    no prior point lies within ``max_distance_days`` of the one-year anchor, or
    the prior value is absent or zero.
    """
    if len(series) < 2:
        return None
    latest = series[-1]
    if latest.value is None:
        return None
    match = find_prior_year_point(series, early_exit_days=early_exit_days)
    if match is None:
        return None
    prior, distance = match
    if prior.value is None or prior.value == 0 or distance > max_distance_days:
        return None
    return (latest.value - prior.value) / prior.value * 100


@dataclass(frozen=True)
class MetricHeadline:
    """Latest value and year-over-year change for a single metric."""

    latest_value: float | None
    yoy_change: float | None


def metric_headline(metric: Metric) -> MetricHeadline:
    """Compute the headline figures shown for a metric."""
    return MetricHeadline(latest_value=metric.latest_value, yoy_change=yoy_change(metric.series))
