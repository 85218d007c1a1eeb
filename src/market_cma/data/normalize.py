"""Reshape wide-format rows (one column per month) into ordered time series.

Zillow exports carry one row per region and one column per reporting period.
Columns are labeled ``YYYY-MM`` or ``YYYY-MM-DD`` and trailing periods are
often blank, so parsing is lenient: a cell that is not a number simply does
not contribute a point.
"""

import math
import re
from collections.abc import Mapping
from datetime import date

from .files import DATE_COLUMN_PATTERN, MONTH_ANCHOR_DAY
from .models import TimeSeriesPoint

_DATE_COLUMN_RE = re.compile(DATE_COLUMN_PATTERN, re.ASCII)


def is_date_column(name: str) -> bool:
    """Return True when a header names a calendar month or day."""
    return bool(_DATE_COLUMN_RE.fullmatch(name))


def column_date(name: str) -> date | None:
    """Resolve a date column label to a calendar date, or None if it is not a real date."""
    if not is_date_column(name):
        return None
    parts = name.split("-")
    year, month = int(parts[0]), int(parts[1])
    day = int(parts[2]) if len(parts) == 3 else MONTH_ANCHOR_DAY
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_cell(raw: str | None) -> float | None:
    """Parse a cell as a float; empty, non-numeric and NaN cells yield None."""
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def normalize_series(record: Mapping[str, str] | None) -> list[TimeSeriesPoint]:
    """Convert one region's wide-format row into points sorted by date."""
    if record is None:
        return []

    points: dict[date, TimeSeriesPoint] = {}
    explicit_days: set[date] = set()
    for column, raw in record.items():
        point_date = column_date(column)
        if point_date is None:
            continue
        value = parse_cell(raw)
        if value is None:
            continue
        is_explicit = len(column) == 10
        if point_date in points:
            # A full YYYY-MM-DD label outranks a month label pinned to the same day.
            if not is_explicit or point_date in explicit_days:
                continue
        points[point_date] = TimeSeriesPoint(date=point_date, value=value)
        if is_explicit:
            explicit_days.add(point_date)
    return [points[key] for key in sorted(points)]


__all__ = ["column_date", "is_date_column", "normalize_series", "parse_cell"]
