"""Domain models for Zillow market datasets and per-region aggregates."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, TypeAlias

import marshmallow as ma
from attrs import define, field

from .files import DATASET_KEYS

RawRecord: TypeAlias = dict[str, str]
"""One CSV row keyed by header name: ``RegionName``, descriptive columns, date columns."""


def _to_date(value: date | str) -> date:
    """Accept either a :class:`date` or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def _optional_float(value: float | str | None) -> float | None:
    """Coerce numeric payloads to ``float`` while preserving absent values."""
    if value is None:
        return None
    return float(value)


@define(slots=True, frozen=True, order=True)
class TimeSeriesPoint:
    """Single dated observation; ``value`` is ``None`` when the source had a gap."""

    date: date = field(converter=_to_date)
    value: float | None = field(converter=_optional_float, default=None, order=False)


class TimeSeriesPointSchema(ma.Schema):
    """Marshmallow schema for :class:`TimeSeriesPoint`."""

    date = ma.fields.Date(required=True)
    value = ma.fields.Float(required=True, allow_none=True)

    @ma.post_load
    def make_point(self, data: dict[str, Any], **kwargs: object) -> TimeSeriesPoint:
        """Instantiate :class:`TimeSeriesPoint` from validated payloads."""
        return TimeSeriesPoint(**data)


def _point_tuple(points: Iterable[TimeSeriesPoint]) -> tuple[TimeSeriesPoint, ...]:
    return tuple(points)


@define(slots=True, frozen=True)
class Metric:
    """A tracked statistic as a dated series plus the value of its last point."""

    series: tuple[TimeSeriesPoint, ...] = field(converter=_point_tuple, factory=tuple)
    latest_value: float | None = field(converter=_optional_float, default=None)

    @classmethod
    def from_series(cls, points: Iterable[TimeSeriesPoint]) -> "Metric":
        """Build a metric whose latest value is taken from the final point."""
        series = tuple(points)
        latest = series[-1].value if series else None
        return cls(series=series, latest_value=latest)

    @property
    def latest_date(self) -> date | None:
        """Return the date of the final point, if any."""
        return self.series[-1].date if self.series else None


class MetricSchema(ma.Schema):
    """Marshmallow schema for :class:`Metric`."""

    series = ma.fields.List(ma.fields.Nested(TimeSeriesPointSchema), required=True)
    latest_value = ma.fields.Float(required=True, allow_none=True)

    @ma.post_load
    def make_metric(self, data: dict[str, Any], **kwargs: object) -> Metric:
        """Instantiate :class:`Metric` records."""
        return Metric(series=data["series"], latest_value=data["latest_value"])


@define(slots=True, frozen=True, kw_only=True)
class RegionMarketRecord:
    """All six Zillow metrics for one region (or the national aggregate)."""

    region_name: str
    state_name: str = ""
    median_sale_price: Metric = field(factory=Metric)
    median_list_price: Metric = field(factory=Metric)
    sale_to_list_ratio: Metric = field(factory=Metric)
    median_days_to_pending: Metric = field(factory=Metric)
    new_listings: Metric = field(factory=Metric)
    active_inventory: Metric = field(factory=Metric)

    def metric(self, name: str) -> Metric:
        """Return a metric by attribute name (e.g. ``"median_sale_price"``)."""
        value = getattr(self, name, None)
        if not isinstance(value, Metric):
            raise KeyError(f"Unknown metric: {name!r}")
        return value

    def metrics(self) -> dict[str, Metric]:
        """Return the six metrics keyed by attribute name."""
        return {
            "median_sale_price": self.median_sale_price,
            "median_list_price": self.median_list_price,
            "sale_to_list_ratio": self.sale_to_list_ratio,
            "median_days_to_pending": self.median_days_to_pending,
            "new_listings": self.new_listings,
            "active_inventory": self.active_inventory,
        }


class RegionMarketRecordSchema(ma.Schema):
    """Marshmallow schema for exporting :class:`RegionMarketRecord` snapshots."""

    region_name = ma.fields.Str(required=True)
    state_name = ma.fields.Str(load_default="", dump_default="")
    median_sale_price = ma.fields.Nested(MetricSchema, required=True)
    median_list_price = ma.fields.Nested(MetricSchema, required=True)
    sale_to_list_ratio = ma.fields.Nested(MetricSchema, required=True)
    median_days_to_pending = ma.fields.Nested(MetricSchema, required=True)
    new_listings = ma.fields.Nested(MetricSchema, required=True)
    active_inventory = ma.fields.Nested(MetricSchema, required=True)

    @ma.post_load
    def make_record(self, data: dict[str, Any], **kwargs: object) -> RegionMarketRecord:
        """Instantiate :class:`RegionMarketRecord` from validated payloads."""
        return RegionMarketRecord(**data)


def _record_tuple(records: Iterable[Mapping[str, str]]) -> tuple[RawRecord, ...]:
    return tuple(dict(record) for record in records)


@define(slots=True, frozen=True)
class DatasetFile:
    """Parsed rows of one uploaded CSV file alongside its original file name."""

    file_name: str
    records: tuple[RawRecord, ...] = field(converter=_record_tuple, factory=tuple)


@define(slots=True, frozen=True, kw_only=True)
class LoadedDatasetBundle:
    """The six parsed Zillow datasets backing a single analysis session."""

    sale_price: DatasetFile
    list_price: DatasetFile
    sale_to_list_ratio: DatasetFile
    days_to_pending: DatasetFile
    new_listings: DatasetFile
    inventory: DatasetFile

    @classmethod
    def from_mapping(cls, files: Mapping[str, DatasetFile]) -> "LoadedDatasetBundle":
        """Build a bundle from files keyed by dataset key, requiring all six."""
        missing = [key for key in DATASET_KEYS if key not in files]
        if missing:
            raise ValueError(f"Missing datasets: {', '.join(missing)}")
        return cls(**{key: files[key] for key in DATASET_KEYS})

    def file(self, key: str) -> DatasetFile:
        """Return the dataset file registered under ``key``."""
        if key not in DATASET_KEYS:
            raise KeyError(f"Unknown dataset key: {key!r}")
        return getattr(self, key)

    def files(self) -> dict[str, DatasetFile]:
        """Return all six dataset files keyed by dataset key, in canonical order."""
        return {key: getattr(self, key) for key in DATASET_KEYS}

    def datasets(self) -> list[tuple[RawRecord, ...]]:
        """Return the six raw record collections in canonical order."""
        return [getattr(self, key).records for key in DATASET_KEYS]

    def file_names(self) -> dict[str, str]:
        """Return the source file names keyed by dataset key."""
        return {key: getattr(self, key).file_name for key in DATASET_KEYS}
