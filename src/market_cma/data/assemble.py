"""Assemble per-region market records from the six loaded datasets."""

from collections.abc import Mapping, Sequence

import structlog

from .files import DATASETS, REGION_COLUMN, STATE_COLUMN
from .models import LoadedDatasetBundle, Metric, RawRecord, RegionMarketRecord
from .normalize import normalize_series

logger = structlog.get_logger(__name__)


def find_region_record(records: Sequence[Mapping[str, str]], region: str) -> RawRecord | None:
    """Return the first row whose region identifier equals ``region`` exactly."""
    for record in records:
        if record.get(REGION_COLUMN) == region:
            return dict(record)
    return None


def build_region_record(region: str, bundle: LoadedDatasetBundle) -> RegionMarketRecord | None:
    """Build the six-metric record for ``region``.

    The sale-price dataset decides whether the region exists at all; when it has
    no matching row the result is ``None``. Any of the other five datasets may
    lack the region, in which case that metric carries an empty series.
    """
    log = logger.bind(region=region)
    rows = {spec.key: find_region_record(bundle.file(spec.key).records, region) for spec in DATASETS}
    primary_row = rows[DATASETS[0].key]
    if primary_row is None:
        log.debug("assemble.region_missing", dataset=DATASETS[0].key)
        return None

    metrics: dict[str, Metric] = {}
    for spec in DATASETS:
        row = rows[spec.key]
        if row is None:
            log.debug("assemble.metric_missing", dataset=spec.key)
        metrics[spec.metric] = Metric.from_series(normalize_series(row))

    record = RegionMarketRecord(
        region_name=region,
        state_name=primary_row.get(STATE_COLUMN) or "",
        **metrics,
    )
    log.debug(
        "assemble.region_built",
        points={name: len(metric.series) for name, metric in metrics.items()},
    )
    return record


__all__ = ["build_region_record", "find_region_record"]
