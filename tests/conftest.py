"""Global test configuration and fixtures."""

import pytest

from market_cma.data.files import DATASET_KEYS
from market_cma.data.models import DatasetFile, LoadedDatasetBundle
from market_cma.data.parser import parse_csv_text

HEADER = ("RegionID", "SizeRank", "RegionName", "RegionType", "StateName")
DATE_COLUMNS = ("2023-01", "2023-07", "2024-01")

REGION_META = {
    "United States": ("102001", "0", "country", ""),
    "Austin": ("394355", "30", "msa", "TX"),
    "Denver": ("394530", "19", "msa", "CO"),
}

# Values per dataset for 2023-01, 2023-07 and 2024-01 (month labels map to day 28).
SAMPLE_VALUES = {
    "sale_price": {
        "United States": ("400000", "410000", "420000"),
        "Austin": ("300000", "310000", "330000"),
        "Denver": ("500000", "505000", "510000"),
    },
    "list_price": {
        "United States": ("410000", "415000", "425000"),
        "Austin": ("320000", "325000", "340000"),
        "Denver": ("520000", "525000", "530000"),
    },
    "sale_to_list_ratio": {
        "United States": ("0.99", "1.0", "0.98"),
        "Austin": ("0.97", "0.98", "0.99"),
        "Denver": ("1.0", "1.01", "1.0"),
    },
    "days_to_pending": {
        "United States": ("20", "15", "25"),
        "Austin": ("40", "30", "50"),
        "Denver": ("18", "12", "20"),
    },
    "new_listings": {
        "United States": ("400000", "450000", "380000"),
        "Austin": ("3000", "3500", "2800"),
        "Denver": ("4000", "4200", "3900"),
    },
    "inventory": {
        "United States": ("1000000", "1100000", "1050000"),
        "Austin": ("9000", "10000", "11000"),
        "Denver": ("7000", "7500", "7200"),
    },
}


def dataset_csv(values, date_columns=DATE_COLUMNS):
    """Render ``{region: (cell, ...)}`` as a Zillow-style wide CSV."""
    lines = [",".join(HEADER + tuple(date_columns))]
    for region, cells in values.items():
        meta = REGION_META.get(region, ("1", "99", "msa", "ZZ"))
        lines.append(",".join((meta[0], meta[1], region, meta[2], meta[3]) + tuple(cells)))
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_csv():
    """Expose the CSV renderer to tests that need custom rows."""
    return dataset_csv


@pytest.fixture
def csv_paths(tmp_path):
    """Write the six sample datasets to disk and return their paths by dataset key."""
    paths = {}
    for key in DATASET_KEYS:
        path = tmp_path / f"{key}.csv"
        path.write_text(dataset_csv(SAMPLE_VALUES[key]))
        paths[key] = path
    return paths


@pytest.fixture
def bundle():
    """A loaded bundle built from the in-memory sample datasets."""
    files = {
        key: DatasetFile(
            file_name=f"{key}.csv",
            records=parse_csv_text(dataset_csv(SAMPLE_VALUES[key]), f"{key}.csv"),
        )
        for key in DATASET_KEYS
    }
    return LoadedDatasetBundle.from_mapping(files)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep real API keys and settings overrides out of the tests."""
    for name in (
        "MARKET_CMA_GEMINI_API_KEY",
        "API_KEY",
        "MARKET_CMA_SETTINGS",
        "MARKET_CMA_LOG_LEVEL",
        "MARKET_CMA_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
