"""Top-level data module for Zillow market datasets."""

from .assemble import build_region_record, find_region_record
from .ingest import DatasetBundleBuilder, NoCommonRegionsError
from .models import (
    DatasetFile,
    LoadedDatasetBundle,
    Metric,
    RawRecord,
    RegionMarketRecord,
    TimeSeriesPoint,
)
from .normalize import is_date_column, normalize_series
from .parser import DatasetParseError, parse_csv_bytes, parse_csv_text
from .pipeline import load_bundle, load_bundle_sync
from .regions import find_common_regions

__all__ = [
    "DatasetBundleBuilder",
    "DatasetFile",
    "DatasetParseError",
    "LoadedDatasetBundle",
    "Metric",
    "NoCommonRegionsError",
    "RawRecord",
    "RegionMarketRecord",
    "TimeSeriesPoint",
    "build_region_record",
    "find_common_regions",
    "find_region_record",
    "is_date_column",
    "load_bundle",
    "load_bundle_sync",
    "normalize_series",
    "parse_csv_bytes",
    "parse_csv_text",
]
