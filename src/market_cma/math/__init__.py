"""Statistical utilities for market metrics."""

from .stats import (  # noqa: F401
    YOY_EARLY_EXIT_DAYS,
    YOY_MAX_DISTANCE_DAYS,
    MetricHeadline,
    find_prior_year_point,
    metric_headline,
    yoy_change,
)

__all__ = [
    "YOY_EARLY_EXIT_DAYS",
    "YOY_MAX_DISTANCE_DAYS",
    "MetricHeadline",
    "find_prior_year_point",
    "metric_headline",
    "yoy_change",
]
