"""Relative time-window filtering for metric series."""

from collections.abc import Sequence
from datetime import date
from enum import Enum

from dateutil.relativedelta import relativedelta

from ..data.models import TimeSeriesPoint


class TimePeriod(str, Enum):
    """Selectable chart windows, measured back from a series' last observation."""

    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"
    THREE_YEARS = "3Y"
    FIVE_YEARS = "5Y"
    TEN_YEARS = "10Y"
    MAX = "Max"

    @property
    def offset(self) -> relativedelta | None:
        """Calendar offset for the window; ``None`` for :attr:`MAX`."""
        return _OFFSETS[self]

    def __str__(self) -> str:
        return self.value


_OFFSETS: dict[TimePeriod, relativedelta | None] = {
    TimePeriod.ONE_MONTH: relativedelta(months=1),
    TimePeriod.THREE_MONTHS: relativedelta(months=3),
    TimePeriod.SIX_MONTHS: relativedelta(months=6),
    TimePeriod.ONE_YEAR: relativedelta(years=1),
    TimePeriod.THREE_YEARS: relativedelta(years=3),
    TimePeriod.FIVE_YEARS: relativedelta(years=5),
    TimePeriod.TEN_YEARS: relativedelta(years=10),
    TimePeriod.MAX: None,
}

TIME_PERIODS: tuple[str, ...] = tuple(period.value for period in TimePeriod)
DEFAULT_PERIOD = TimePeriod.ONE_YEAR


def parse_period(token: str | TimePeriod) -> TimePeriod:
    """Resolve a period token such as ``"3y"`` or ``"max"`` (case-insensitive)."""
    if isinstance(token, TimePeriod):
        return token
    normalized = str(token).strip().upper()
    for period in TimePeriod:
        if period.value.upper() == normalized:
            return period
    valid = ", ".join(TIME_PERIODS)
    raise ValueError(f"Unsupported time period {token!r}. Choose one of: {valid}.")


def window_cutoff(last_date: date, period: TimePeriod) -> date | None:
    """Return the earliest date kept by ``period`` when anchored at ``last_date``."""
    offset = period.offset
    if offset is None:
        return None
    return last_date - offset


def filter_by_period(
    series: Sequence[TimeSeriesPoint],
    period: TimePeriod | str,
) -> list[TimeSeriesPoint]:
    """Return the points on or after the cutoff measured back from the series' last date.

    The anchor is the series' own final point rather than today, so data that
    lags the calendar still yields a full window.
    """
    if not series:
        return []
    period = parse_period(period)
    cutoff = window_cutoff(series[-1].date, period)
    if cutoff is None:
        return list(series)
    return [point for point in series if point.date >= cutoff]


__all__ = [
    "DEFAULT_PERIOD",
    "TIME_PERIODS",
    "TimePeriod",
    "filter_by_period",
    "parse_period",
    "window_cutoff",
]
