"""Series-level utilities for windowing and chart preparation."""

from .merge import merge_series, series_names
from .window import DEFAULT_PERIOD, TIME_PERIODS, TimePeriod, filter_by_period, parse_period

__all__ = [
    "DEFAULT_PERIOD",
    "TIME_PERIODS",
    "TimePeriod",
    "filter_by_period",
    "merge_series",
    "parse_period",
    "series_names",
]
