"""Unit tests for the market data models."""

from datetime import date

import pytest

from market_cma.data.models import (
    DatasetFile,
    LoadedDatasetBundle,
    Metric,
    MetricSchema,
    RegionMarketRecord,
    RegionMarketRecordSchema,
    TimeSeriesPoint,
    TimeSeriesPointSchema,
)


def test_time_series_point_accepts_iso_strings():
    point = TimeSeriesPoint(date="2021-07-28", value="330000")
    assert point.date == date(2021, 7, 28)
    assert point.value == 330000.0


def test_time_series_points_order_by_date_only():
    early = TimeSeriesPoint(date(2021, 1, 28), 5.0)
    late = TimeSeriesPoint(date(2021, 2, 28), 1.0)
    assert sorted([late, early]) == [early, late]


def test_metric_from_series_takes_last_value():
    points = [TimeSeriesPoint(date(2021, 1, 28), 1.0), TimeSeriesPoint(date(2021, 2, 28), 2.0)]
    metric = Metric.from_series(points)
    assert metric.latest_value == 2.0
    assert metric.latest_date == date(2021, 2, 28)
    assert isinstance(metric.series, tuple)


def test_empty_metric_has_no_latest_value():
    metric = Metric.from_series([])
    assert metric.latest_value is None
    assert metric.latest_date is None


def test_point_schema_round_trip():
    point = TimeSeriesPointSchema().load({"date": "2024-01-28", "value": None})
    assert point == TimeSeriesPoint(date(2024, 1, 28), None)


def test_region_record_metric_lookup():
    metric = Metric.from_series([TimeSeriesPoint(date(2024, 1, 28), 7.0)])
    record = RegionMarketRecord(region_name="Austin", new_listings=metric)
    assert record.metric("new_listings") is metric
    assert record.metrics()["median_sale_price"].series == ()
    with pytest.raises(KeyError):
        record.metric("region_name")
    with pytest.raises(KeyError):
        record.metric("median_rent")


def test_region_record_schema_round_trip():
    metric = Metric.from_series([TimeSeriesPoint(date(2024, 1, 28), 330000.0)])
    record = RegionMarketRecord(region_name="Austin", state_name="TX", median_sale_price=metric)
    schema = RegionMarketRecordSchema()
    dumped = schema.dump(record)
    assert dumped["median_sale_price"]["series"] == [{"date": "2024-01-28", "value": 330000.0}]
    assert schema.load(dumped) == record


def test_metric_schema_load():
    metric = MetricSchema().load({"series": [{"date": "2024-01-28", "value": 1.5}], "latest_value": 1.5})
    assert metric.latest_value == 1.5


def test_bundle_from_mapping_requires_all_files():
    with pytest.raises(ValueError, match="Missing datasets"):
        LoadedDatasetBundle.from_mapping({"sale_price": DatasetFile("a.csv", [])})


def test_bundle_accessors(bundle):
    assert list(bundle.files()) == [
        "sale_price",
        "list_price",
        "sale_to_list_ratio",
        "days_to_pending",
        "new_listings",
        "inventory",
    ]
    assert bundle.file_names()["inventory"] == "inventory.csv"
    assert len(bundle.datasets()) == 6
    with pytest.raises(KeyError):
        bundle.file("rent")
