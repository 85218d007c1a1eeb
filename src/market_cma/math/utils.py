"""Calendar helpers shared by the windowing and YoY routines."""

from datetime import date

from dateutil.relativedelta import relativedelta


def years_before(anchor: date, years: int = 1) -> date:
    """Return ``anchor`` shifted back by whole calendar years (Feb 29 clamps to Feb 28)."""
    return anchor - relativedelta(years=years)


def day_distance(first: date, second: date) -> int:
    """Absolute distance between two dates in days."""
    return abs((first - second).days)
