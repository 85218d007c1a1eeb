"""Constants describing the Zillow research CSV datasets."""

from attrs import define

ZILLOW_DATA_URL = "https://www.zillow.com/research/data/"

REGION_COLUMN = "RegionName"
STATE_COLUMN = "StateName"

# Reserved identifier for the national aggregate row present in every file.
NATIONAL_REGION = "United States"
NATIONAL_LABEL = "US Average"

DATE_COLUMN_PATTERN = r"^\d{4}-\d{2}(-\d{2})?$"

# Month-only columns are pinned to this day to sidestep month-length differences.
MONTH_ANCHOR_DAY = 28


@define(frozen=True)
class DatasetSpec:
    """Bundle describing one of the six required Zillow CSV uploads."""

    key: str
    title: str
    description: str
    metric: str


# Order matters: the sale-price dataset is authoritative for region existence.
DATASETS: tuple[DatasetSpec, ...] = (
    DatasetSpec(
        key="sale_price",
        title="Median Sale Price",
        description="The typical sale price for homes.",
        metric="median_sale_price",
    ),
    DatasetSpec(
        key="list_price",
        title="Median List Price",
        description="The typical asking price for homes.",
        metric="median_list_price",
    ),
    DatasetSpec(
        key="sale_to_list_ratio",
        title="Sale-to-List Ratio",
        description="Shows if homes sell above/below asking.",
        metric="sale_to_list_ratio",
    ),
    DatasetSpec(
        key="days_to_pending",
        title="Median Days to Pending",
        description="How quickly homes go under contract.",
        metric="median_days_to_pending",
    ),
    DatasetSpec(
        key="new_listings",
        title="New Listings",
        description="The number of new homes listed.",
        metric="new_listings",
    ),
    DatasetSpec(
        key="inventory",
        title="For Sale Inventory",
        description="Total homes available for sale.",
        metric="active_inventory",
    ),
)

DATASET_KEYS: tuple[str, ...] = tuple(spec.key for spec in DATASETS)
METRIC_NAMES: tuple[str, ...] = tuple(spec.metric for spec in DATASETS)


def dataset_spec(key: str) -> DatasetSpec:
    """Return the dataset description registered under ``key``."""
    for spec in DATASETS:
        if spec.key == key:
            return spec
    raise KeyError(f"Unknown dataset key: {key!r}")
