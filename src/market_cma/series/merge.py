"""Combine several named series into per-date rows for multi-line charts."""

from collections.abc import Sequence
from datetime import date
from typing import Any

from ..data.models import TimeSeriesPoint

ChartRow = dict[str, Any]
NamedSeries = tuple[str, Sequence[TimeSeriesPoint]]


def merge_series(named_series: Sequence[NamedSeries]) -> list[ChartRow]:
    """Outer-join series on date into ``{"date": d, name: value, ...}`` rows.

    A series without a point on some date gets no key in that row, leaving a
    gap for the chart rather than a false zero.
    """
    rows: dict[date, ChartRow] = {}
    for name, points in named_series:
        for point in points:
            row = rows.setdefault(point.date, {"date": point.date})
            row[name] = point.value
    return [rows[key] for key in sorted(rows)]


def series_names(named_series: Sequence[NamedSeries]) -> list[str]:
    """Return the series names in input order without duplicates."""
    seen: list[str] = []
    for name, _ in named_series:
        if name not in seen:
            seen.append(name)
    return seen


__all__ = ["ChartRow", "NamedSeries", "merge_series", "series_names"]
