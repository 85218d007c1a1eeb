"""Unit tests for chart series merging."""

from datetime import date

from market_cma.data.models import TimeSeriesPoint
from market_cma.series.merge import merge_series, series_names

JAN = date(2021, 1, 28)
FEB = date(2021, 2, 28)
MAR = date(2021, 3, 28)


def test_merge_outer_joins_on_date():
    x = [TimeSeriesPoint(JAN, 1.0), TimeSeriesPoint(FEB, 2.0)]
    y = [TimeSeriesPoint(FEB, 5.0)]
    assert merge_series([("X", x), ("Y", y)]) == [
        {"date": JAN, "X": 1.0},
        {"date": FEB, "X": 2.0, "Y": 5.0},
    ]


def test_merge_rows_are_sorted_by_date():
    x = [TimeSeriesPoint(MAR, 3.0)]
    y = [TimeSeriesPoint(JAN, 1.0)]
    rows = merge_series([("X", x), ("Y", y)])
    assert [row["date"] for row in rows] == [JAN, MAR]


def test_merge_is_commutative_over_series_order():
    x = [TimeSeriesPoint(JAN, 1.0), TimeSeriesPoint(MAR, 3.0)]
    y = [TimeSeriesPoint(FEB, 2.0), TimeSeriesPoint(MAR, 4.0)]
    assert merge_series([("X", x), ("Y", y)]) == merge_series([("Y", y), ("X", x)])


def test_merge_keeps_null_values_as_keys():
    rows = merge_series([("X", [TimeSeriesPoint(JAN, None)])])
    assert rows == [{"date": JAN, "X": None}]


def test_merge_empty():
    assert merge_series([]) == []
    assert merge_series([("X", [])]) == []


def test_series_names_deduplicates_in_order():
    assert series_names([("Austin", []), ("US Average", []), ("Austin", [])]) == ["Austin", "US Average"]
